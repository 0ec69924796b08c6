# printsim/status.py
#
# Status payloads for the two Duet protocol dialects: the DSF object
# model (/machine/status) and the legacy standalone rr_status.

from .primitives import RunMode


# Legacy single-letter status codes
RR_STATUS_LETTERS = {
    RunMode.IDLE: "I",
    RunMode.PRINTING: "P",
    RunMode.PAUSED: "M",
    RunMode.STOPPED: "S",
}


def job_payload(snapshot):
    file_info = None
    if snapshot.file_name is not None:
        file_info = {"fileName": "/" + snapshot.file_name.lstrip("/")}
    return {
        "file": file_info,
        "progress": {"completion": snapshot.completion},
        "filePosition": snapshot.file_position,
        "fileSize": snapshot.file_size,
    }


def dsf_status(snapshot):
    """
    Build the DSF-style status object from a controller snapshot.

    Heaters, fans and supply voltage are fixed placeholder values.
    """
    return {
        "state": {"status": snapshot.run_mode.value, "heaterFault": False},
        "system": {"voltage": 24, "uptime": snapshot.uptime},
        "coords": {"xyz": list(snapshot.head), "extruders": [0]},
        "currentTool": snapshot.current_tool,
        "job": job_payload(snapshot),
        "heat": {
            "bed": {"current": 25, "target": 0},
            "heaters": [{"current": 25, "target": 0}],
        },
        "fans": [],
    }


def rr_status(snapshot):
    """
    Build the legacy rr_status object from a controller snapshot.
    """
    return {
        "status": RR_STATUS_LETTERS.get(snapshot.run_mode, "I"),
        "coords": {"xyz": list(snapshot.head), "extr": [0]},
        "currentTool": snapshot.current_tool,
        "time": snapshot.uptime,
        "job": job_payload(snapshot),
    }
