# printsim/test_printer_mode.py
#
# Run from repo root:
#   python3 -m printsim.test_printer_mode

import contextlib
import io
import json
import os
import sys
import tempfile

from printsim.__main__ import main as cli_main
from printsim.config import ConfigError, SimConfig
from printsim.primitives import RunMode
from printsim.printer_mode import CommandError, PrinterMode
from printsim.store import ProgramNotFoundError, ProgramStore, UploadError


REFERENCE = "G1 X0 Y0\nG1 X10 Y0 E1\nG1 X10 Y10 E2\n"


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def make_mode(**values):
    clock = FakeClock()
    mode = PrinterMode(SimConfig(values), clock=clock)
    return mode, clock


def expect_raises(exc_type, fn, *args, **kwargs):
    try:
        fn(*args, **kwargs)
    except exc_type as e:
        return e
    raise AssertionError(f"{exc_type.__name__} not raised")


# -------------------------
# Store
# -------------------------

def test_store_normalizes_names():
    store = ProgramStore()
    store.put("/gcodes/a.gcode", "G1 X1")
    assert store.get("gcodes/a.gcode") == "G1 X1"
    assert store.contains("//gcodes/a.gcode")
    assert store.names() == ["gcodes/a.gcode"]

    store.remove("/gcodes/a.gcode")
    expect_raises(ProgramNotFoundError, store.get, "gcodes/a.gcode")
    expect_raises(ProgramNotFoundError, store.remove, "gcodes/a.gcode")


def test_store_uploads():
    store = ProgramStore()
    assert store.upload_file("part.gcode", b"G1 X1\n") == "/gcodes/part.gcode"
    assert store.get("gcodes/part.gcode") == "G1 X1\n"
    assert store.upload_file("", "G1") == "/gcodes/upload.gcode"
    assert store.upload_file("../../etc/evil.gcode", "G1") == "/gcodes/evil.gcode"

    assert store.upload_raw("/gcodes/raw.gcode", b"G1 X2") == "gcodes/raw.gcode"
    expect_raises(UploadError, store.upload_raw, "/macros/raw.g", b"G1")
    expect_raises(UploadError, store.upload_raw, "/gcodes/empty.gcode", b"")


# -------------------------
# Config
# -------------------------

def test_config_defaults_and_aliases():
    mode, _ = make_mode()
    assert mode.feed_rate == 600.0
    assert mode.print_seconds == 0.0

    mode, _ = make_mode(FEED_MM_PER_MIN="1200", PRINT_SECONDS="5")
    assert mode.feed_rate == 1200.0
    assert mode.print_seconds == 5.0

    config = SimConfig({"feed_rate": "", "START_FILE": "/tmp/x.gcode"})
    assert config.getfloat("feed_rate", 600.0) == 600.0
    assert config.get("start_file") == "/tmp/x.gcode"
    expect_raises(ConfigError, config.get, "missing")


def test_config_errors():
    expect_raises(ConfigError, make_mode, feed_rate="fast")
    expect_raises(ConfigError, make_mode, feed_rate="0")
    expect_raises(ConfigError, make_mode, print_seconds="-1")


# -------------------------
# Commands
# -------------------------

def test_start_and_dsf_status():
    mode, clock = make_mode()
    mode.cmd_upload("test.gcode", REFERENCE.encode("utf-8"))
    assert mode.cmd_start("/gcodes/test.gcode") == "/gcodes/test.gcode"

    clock.now = 1000.0
    payload = mode.machine_status()
    assert payload["state"] == {"status": "printing", "heaterFault": False}
    assert payload["coords"] == {"xyz": [10.0, 0.0, 0.0], "extruders": [0]}
    assert payload["currentTool"] == 0
    assert payload["system"] == {"voltage": 24, "uptime": 1}
    assert payload["job"] == {
        "file": {"fileName": "/gcodes/test.gcode"},
        "progress": {"completion": 0.0},
        "filePosition": 0,
        "fileSize": len(REFERENCE),
    }
    assert payload["fans"] == []
    json.dumps(payload)


def test_rr_status_letters():
    mode, clock = make_mode()
    payload = mode.rr_status()
    assert payload["status"] == "I"
    assert payload["job"]["file"] is None
    assert payload["coords"] == {"xyz": [0.0, 0.0, 0.0], "extr": [0]}

    mode.store.put("gcodes/a.gcode", REFERENCE)
    mode.cmd_gcode('M32 "/gcodes/a.gcode"')
    assert mode.rr_status()["status"] == "P"

    mode.cmd_gcode("M25")
    assert mode.rr_status()["status"] == "M"

    mode.cmd_gcode("M24")
    assert mode.rr_status()["status"] == "P"

    mode.cmd_gcode("M0")
    assert mode.rr_status()["status"] == "S"


def test_gcode_command_errors():
    mode, _ = make_mode()
    expect_raises(CommandError, mode.cmd_gcode, "G28")
    expect_raises(CommandError, mode.cmd_gcode, "")
    expect_raises(CommandError, mode.cmd_gcode, "M32 missing-quotes.gcode")
    expect_raises(ProgramNotFoundError, mode.cmd_gcode, 'M32 "/gcodes/nope.gcode"')
    expect_raises(ProgramNotFoundError, mode.cmd_start, "gcodes/nope.gcode")
    assert mode.controller.run_mode is RunMode.IDLE


def test_empty_program_is_not_started():
    mode, _ = make_mode()
    mode.store.put("gcodes/empty.gcode", "")
    expect_raises(ProgramNotFoundError, mode.cmd_start, "/gcodes/empty.gcode")
    expect_raises(ProgramNotFoundError, mode.cmd_gcode, 'M32 "/gcodes/empty.gcode"')
    assert mode.controller.run_mode is RunMode.IDLE


def test_print_seconds_override():
    mode, clock = make_mode(print_seconds="30")
    mode.store.put("gcodes/a.gcode", REFERENCE)
    mode.cmd_start("gcodes/a.gcode")
    assert mode.controller.job.est_duration_ms == 30000.0


def test_feed_rate_estimate():
    mode, clock = make_mode(feed_rate="1200")
    mode.store.put("gcodes/a.gcode", REFERENCE)
    mode.cmd_start("gcodes/a.gcode")
    assert mode.controller.job.est_duration_ms == 1000.0


def test_download():
    mode, _ = make_mode()
    mode.cmd_upload_raw("/gcodes/a.gcode", REFERENCE)
    assert mode.cmd_download("/gcodes/a.gcode") == REFERENCE
    expect_raises(ProgramNotFoundError, mode.cmd_download, "gcodes/b.gcode")


def test_seed_from_file():
    fd, path = tempfile.mkstemp(prefix="seed_", suffix=".gcode", text=True)
    os.close(fd)
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(REFERENCE)

        mode, _ = make_mode(START_FILE=path)
        name = mode.seed_from_file()
        assert name == "gcodes/" + os.path.basename(path)
        assert mode.cmd_download(name) == REFERENCE
        assert mode.controller.run_mode is RunMode.PRINTING
    finally:
        os.remove(path)

    mode, _ = make_mode()
    assert mode.seed_from_file() is None
    assert mode.seed_from_file(path) is None
    assert mode.controller.run_mode is RunMode.IDLE


def test_cli_prints_status_lines():
    fd, path = tempfile.mkstemp(prefix="cli_", suffix=".gcode", text=True)
    os.close(fd)
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(REFERENCE)

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            rc = cli_main([path, "--count", "2", "--interval", "0",
                           "--dialect", "rr"])
        assert rc == 0

        lines = out.getvalue().splitlines()
        assert len(lines) == 2
        payload = json.loads(lines[0])
        assert payload["status"] == "P"
        assert payload["job"]["fileSize"] == len(REFERENCE)
    finally:
        os.remove(path)


def test_cli_without_file():
    err = io.StringIO()
    with contextlib.redirect_stderr(err):
        rc = cli_main([os.path.join(tempfile.gettempdir(), "no-such.gcode")])
    assert rc == 2


def main():
    tests = [
        ("store normalizes names", test_store_normalizes_names),
        ("store uploads", test_store_uploads),
        ("config defaults and aliases", test_config_defaults_and_aliases),
        ("config errors", test_config_errors),
        ("start and DSF status", test_start_and_dsf_status),
        ("rr_status letters", test_rr_status_letters),
        ("gcode command errors", test_gcode_command_errors),
        ("empty program is not started", test_empty_program_is_not_started),
        ("print_seconds override", test_print_seconds_override),
        ("feed rate estimate", test_feed_rate_estimate),
        ("download", test_download),
        ("seed from file", test_seed_from_file),
        ("CLI prints status lines", test_cli_prints_status_lines),
        ("CLI without file", test_cli_without_file),
    ]

    failed = 0
    for name, fn in tests:
        try:
            fn()
            print(f"[PASS] {name}")
        except Exception as e:
            failed += 1
            print(f"[FAIL] {name}: {e}")

    if failed:
        print(f"\n{failed} test(s) failed.")
        sys.exit(1)

    print("\nAll tests passed.")
    sys.exit(0)


if __name__ == "__main__":
    main()
