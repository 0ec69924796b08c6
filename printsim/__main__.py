#!/usr/bin/env python3
# printsim/__main__.py
#
# Run a G-code file through the mock controller and print status lines.
#
#   python3 -m printsim part.gcode --feed 1200 --interval 0.5 --count 20

import argparse
import json
import logging
import sys
import time

from .config import SimConfig
from .printer_mode import PrinterMode


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Mock printer telemetry")
    ap.add_argument("file", nargs="?", default=None,
                    help="G-code file to start (default: $START_FILE)")
    ap.add_argument("--feed", type=float, default=None,
                    help="feed rate in mm/min (default: $FEED_MM_PER_MIN or 600)")
    ap.add_argument("--print-seconds", type=float, default=None,
                    help="fixed job duration (default: estimate)")
    ap.add_argument("--dialect", choices=("dsf", "rr"), default="dsf")
    ap.add_argument("--interval", type=float, default=1.0,
                    help="seconds between status lines")
    ap.add_argument("--count", type=int, default=10,
                    help="number of status lines (0 = forever)")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    values = SimConfig().values
    if args.feed is not None:
        values["feed_rate"] = args.feed
    if args.print_seconds is not None:
        values["print_seconds"] = args.print_seconds

    mode = PrinterMode(SimConfig(values))

    if mode.seed_from_file(args.file) is None:
        print("No G-code file to start", file=sys.stderr)
        return 2

    status = mode.rr_status if args.dialect == "rr" else mode.machine_status

    i = 0
    while args.count <= 0 or i < args.count:
        if i:
            time.sleep(args.interval)
        sys.stdout.write(json.dumps(status()) + "\n")
        sys.stdout.flush()
        i += 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
