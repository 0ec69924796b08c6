# printsim/controller.py

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional

from .primitives import Point, RunMode
from .program import ParsedProgram, estimate_duration_ms, parse_program


log = logging.getLogger(__name__)


def format_time(seconds):
    """
    Convert a time duration in seconds into a human-readable string.

    Examples:
    - 45    -> "45s"
    - 125   -> "2m 5s"
    - 3723  -> "1h 2m 3s"

    Used when logging job durations.
    """
    seconds = int(max(0, seconds))
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60

    if h > 0:
        return f"{h}h {m}m {s}s"
    elif m > 0:
        return f"{m}m {s}s"
    else:
        return f"{s}s"


def wall_clock_ms():
    """
    Default controller clock: wall time in milliseconds.
    """
    return time.time() * 1000.0


def clamp01(x):
    return max(0.0, min(1.0, x))


@dataclass
class JobState:
    """
    Progress of the active job.

    ``start_ts`` is None while no job is running. ``completion`` stays
    in [0, 1] and ``file_position`` in [0, file_size].
    """
    file_name: Optional[str] = None
    file_size: int = 0
    start_ts: Optional[float] = None
    est_duration_ms: float = 0.0
    completion: float = 0.0
    file_position: int = 0

    # Number of completed runs (wraps) of the same file
    loops: int = 0

    # Timestamp of the pause, while paused
    paused_at: Optional[float] = None


@dataclass
class MachineState:
    """
    Complete mutable state of the simulated machine.
    """
    run_mode: RunMode = RunMode.IDLE
    head: List[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])
    current_tool: int = 0
    job: JobState = field(default_factory=JobState)
    program: Optional[ParsedProgram] = None
    boot_ts: float = 0.0


@dataclass(frozen=True)
class Snapshot:
    """
    Read-only view of the machine, as reported to status queries.
    """
    run_mode: RunMode
    head: Point
    current_tool: int
    file_name: Optional[str]
    file_size: int
    file_position: int
    completion: float
    uptime: int


def take_snapshot(machine, now):
    job = machine.job
    return Snapshot(
        run_mode=machine.run_mode,
        head=tuple(machine.head),
        current_tool=machine.current_tool,
        file_name=job.file_name,
        file_size=job.file_size,
        file_position=job.file_position,
        completion=job.completion,
        uptime=int(max(0.0, now - machine.boot_ts) // 1000),
    )


def tick(machine, now, on_wrap=None):
    """
    Advance the simulation to ``now`` (milliseconds).

    - idle: hold Z at the printed minimum, leave X/Y alone
    - printing: walk the endpoint path by elapsed time; when the
      estimated duration is reached, snap to the end, report the
      snapped state through ``on_wrap`` and restart the same job
    - paused / stopped: hold everything

    Never raises; missing program or job data leaves the state as is.
    Returns True if the job wrapped during this tick.
    """
    program = machine.program
    job = machine.job

    if machine.run_mode is RunMode.IDLE:
        # Keep Z at min when idle
        machine.head[2] = program.printed_z_min if program else 0.0
        return False

    if machine.run_mode is not RunMode.PRINTING:
        return False

    if job.start_ts is None or program is None:
        return False

    elapsed = now - job.start_ts
    duration = job.est_duration_ms
    t = clamp01(elapsed / duration) if duration > 0 else 1.0

    endpoints = program.endpoints
    if len(endpoints) > 1:
        # Map progress onto the printed endpoint index
        last = len(endpoints) - 1
        idx = math.floor(t * last)
        machine.head = list(endpoints[idx])
        job.completion = idx / last
        job.file_position = math.floor(job.completion * job.file_size)
    else:
        # Nothing meaningfully printed: hold at the printed Z minimum
        machine.head = [0.0, 0.0, program.printed_z_min]
        job.completion = t
        job.file_position = math.floor(t * job.file_size)

    if elapsed < duration:
        return False

    # Finished: snap to the end once ...
    if endpoints:
        machine.head = list(endpoints[-1])
    else:
        machine.head = [0.0, 0.0, program.printed_z_max]
    job.completion = 1.0
    job.file_position = job.file_size

    if on_wrap is not None:
        try:
            on_wrap(take_snapshot(machine, now))
        except Exception:
            log.exception("Wrap observer failed for %s", job.file_name)

    # ... then immediately restart the same file
    job.loops += 1
    job.start_ts = now
    job.completion = 0.0
    job.file_position = 0
    log.info("Job %s finished run %d, restarting", job.file_name, job.loops)
    return True


class MachineController:
    """
    Owner of the simulated machine state.

    Responsibilities:
    - Start jobs from program text (parse, analyze, estimate duration)
    - Advance progress on demand (pull-based ``tick``)
    - Handle explicit pause, resume, stop and reset commands
    - Produce consistent snapshots for status queries

    Every read and write of the machine state happens under one lock,
    so a status query sees either the pre-wrap or the wrapped state.
    """

    def __init__(self, feed_rate=600.0, clock=None, on_wrap=None):
        # Feed rate (mm/min) used to estimate job durations
        self.feed_rate = feed_rate

        # Millisecond clock used when callers do not pass ``now``
        self.clock = clock or wall_clock_ms

        # Optional observer of the snapped end-of-run state; called with
        # the lock held, so it must not call back into the controller
        self.on_wrap = on_wrap

        self._lock = threading.Lock()
        self.machine = MachineState(boot_ts=self.clock())

    def _now(self, now):
        return self.clock() if now is None else now

    # -------------------------
    # Control commands
    # -------------------------

    def start_job(self, file_name, text, now=None, duration_ms=None):
        """
        Parse ``text`` and start printing it.

        The duration is ``duration_ms`` when given, otherwise estimated
        from the printed length at ``self.feed_rate``. A running job is
        replaced. Returns the parsed program.
        """
        program = parse_program(text)
        if duration_ms is None or duration_ms <= 0:
            duration_ms = estimate_duration_ms(program, self.feed_rate)

        with self._lock:
            now = self._now(now)
            self.machine.program = program
            self.machine.job = JobState(
                file_name=file_name,
                file_size=len(text.encode("utf-8")),
                start_ts=now,
                est_duration_ms=duration_ms,
            )
            self.machine.head = [0.0, 0.0, program.printed_z_min]
            self.machine.run_mode = RunMode.PRINTING

        log.info("Started %s: %d segments, %d printed endpoints, est. %s",
                 file_name, program.segment_count, len(program.endpoints),
                 format_time(duration_ms / 1000.0))
        return program

    def pause(self, now=None):
        """
        Pause a printing job; elapsed time stops counting.
        """
        with self._lock:
            if self.machine.run_mode is not RunMode.PRINTING:
                return False
            now = self._now(now)
            tick(self.machine, now, on_wrap=self.on_wrap)
            self.machine.job.paused_at = now
            self.machine.run_mode = RunMode.PAUSED
        log.info("Job paused")
        return True

    def resume(self, now=None):
        """
        Resume a paused job where it left off.
        """
        with self._lock:
            if self.machine.run_mode is not RunMode.PAUSED:
                return False
            job = self.machine.job
            if job.start_ts is not None and job.paused_at is not None:
                job.start_ts += self._now(now) - job.paused_at
            job.paused_at = None
            self.machine.run_mode = RunMode.PRINTING
        log.info("Job resumed")
        return True

    def stop(self, now=None):
        """
        Stop the active job. Position and progress are kept for display.
        """
        with self._lock:
            if self.machine.run_mode not in (RunMode.PRINTING, RunMode.PAUSED):
                return False
            tick(self.machine, self._now(now), on_wrap=self.on_wrap)
            self.machine.job.start_ts = None
            self.machine.job.paused_at = None
            self.machine.run_mode = RunMode.STOPPED
        log.info("Job stopped")
        return True

    def reset(self):
        """
        Return to idle, dropping the job but keeping the loaded program.
        """
        with self._lock:
            self.machine.job = JobState()
            self.machine.run_mode = RunMode.IDLE
        log.info("Controller reset")

    # -------------------------
    # Simulation
    # -------------------------

    def tick(self, now=None):
        """
        Advance the simulation; returns True if the job wrapped.
        """
        with self._lock:
            return tick(self.machine, self._now(now), on_wrap=self.on_wrap)

    def snapshot(self, now=None):
        with self._lock:
            return take_snapshot(self.machine, self._now(now))

    def status(self, now=None):
        """
        Tick and snapshot under a single lock acquisition.
        """
        with self._lock:
            now = self._now(now)
            tick(self.machine, now, on_wrap=self.on_wrap)
            return take_snapshot(self.machine, now)

    @property
    def run_mode(self):
        return self.machine.run_mode

    @property
    def program(self):
        return self.machine.program

    @property
    def job(self):
        return self.machine.job
