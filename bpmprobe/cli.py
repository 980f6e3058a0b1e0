"""Command-line entry point.

Usage:
    bpmprobe estimate song.wav
    bpmprobe estimate --raw --sample-rate 48000 capture.pcm --json
    bpmprobe serve
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from bpmprobe.analysis.engine import TempoEngine
from bpmprobe.config import settings
from bpmprobe.errors import TempoServiceError


def _estimate(args: argparse.Namespace) -> int:
    engine = TempoEngine(settings, sample_rate=args.sample_rate)
    status = 0
    for path in args.files:
        try:
            result = engine.analyze_file(path, raw=args.raw)
        except (OSError, TempoServiceError) as e:
            print(f"{path}: ERROR {e}", file=sys.stderr)
            status = 1
            continue

        if args.json:
            print(json.dumps({"file": str(path), **result.to_dict()}))
        else:
            print(f"{path}: {result.bpm} BPM ({result.confidence}, "
                  f"{result.duration:.1f}s, {result.onset_count} onsets)")
    return status


def _serve(args: argparse.Namespace) -> int:
    import uvicorn
    uvicorn.run(
        "bpmprobe.main:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="bpmprobe", description="Offline tempo estimation")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    est = sub.add_parser("estimate", help="Estimate the tempo of audio files")
    est.add_argument("files", nargs="+", type=Path)
    est.add_argument("--raw", action="store_true",
                     help="Treat files as raw s16le stereo PCM")
    est.add_argument("--sample-rate", type=int, default=None,
                     help=f"Sample rate of raw PCM (default {settings.sample_rate})")
    est.add_argument("--json", action="store_true", help="One JSON object per line")
    est.set_defaults(func=_estimate)

    srv = sub.add_parser("serve", help="Run the HTTP API")
    srv.add_argument("--host", default=None)
    srv.add_argument("--port", type=int, default=None)
    srv.set_defaults(func=_serve)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
