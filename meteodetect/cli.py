#!/usr/bin/env python3
"""meteodetect CLI entrypoint."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from meteodetect.config import (
    DEFAULT_MIN_CHIRP_DURATION,
    DEFAULT_NARROW_CUTOFF,
    DEFAULT_NARROW_ORDER,
    DEFAULT_WIDE_CUTOFF,
    DEFAULT_WIDE_ORDER,
    DetectorConfig,
)
from meteodetect.errors import DetectorInitError, SampleIOError
from meteodetect.runner import run_detection
from meteodetect.util.duration import positive_duration
from meteodetect.util.exit_codes import ExitCode
from meteodetect.util.logging import configure_logging, get_logger, log_exception

PROG = "meteodetect"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(
        prog=PROG,
        description="Detect meteor-scatter chirps in a raw complex64 IQ capture",
    )
    p.add_argument("input", help="Raw IQ capture (interleaved float32 I/Q, no header)")
    p.add_argument("--sample-rate", dest="sample_rate", type=float, help="Capture sample rate [Hz] (default 8000, env METEODETECT_SAMPLE_RATE)")
    p.add_argument("--center-freq", dest="center_frequency", type=float, help="Local oscillator frequency [Hz] (default 1000, env METEODETECT_CENTER_FREQ)")
    p.add_argument("--wide-order", dest="wide_order", type=int, help=f"Order of the wide (noise) low-pass filter (default {DEFAULT_WIDE_ORDER})")
    p.add_argument("--wide-cutoff", dest="wide_cutoff", type=float, help=f"Cutoff of the wide low-pass filter [Hz] (default {DEFAULT_WIDE_CUTOFF:g})")
    p.add_argument("--narrow-order", dest="narrow_order", type=int, help=f"Order of the narrow (chirp) low-pass filter (default {DEFAULT_NARROW_ORDER})")
    p.add_argument("--narrow-cutoff", dest="narrow_cutoff", type=float, help=f"Cutoff of the narrow low-pass filter [Hz] (default {DEFAULT_NARROW_CUTOFF:g})")
    p.add_argument(
        "--min-chirp-duration",
        dest="min_chirp_duration",
        type=positive_duration,
        help=f"Minimum chirp duration, e.g. 0.07 or 70ms; sets the energy window and EMA time constant (default {DEFAULT_MIN_CHIRP_DURATION:g}s)",
    )
    p.add_argument("-o", "--output", dest="output_path", type=str, help="Output file for composed samples (default detect.raw, env METEODETECT_OUTPUT)")
    p.add_argument(
        "--incremental-integral",
        dest="incremental_integral",
        action="store_true",
        default=None,
        help="Keep a running window sum instead of re-summing every sample (faster, different rounding)",
    )
    p.add_argument("--jsonl", type=str, help="Also append chirp events as line-delimited JSON to this path")
    p.add_argument("--chunk-size", dest="chunk_size", type=int, default=65536, help="Samples read per block (default 65536)")
    p.add_argument("--log-level", dest="log_level", type=str, help="Diagnostic log level (default WARNING, env METEODETECT_LOG_LEVEL)")
    p.add_argument("--log-json", dest="log_json", type=str, help="Append JSON-formatted diagnostics to this file")

    args = p.parse_args(argv)
    if args.chunk_size < 1:
        p.error("--chunk-size must be >= 1")
    try:
        args.config = DetectorConfig.from_env(
            sample_rate=args.sample_rate,
            center_frequency=args.center_frequency,
            wide_order=args.wide_order,
            wide_cutoff=args.wide_cutoff,
            narrow_order=args.narrow_order,
            narrow_cutoff=args.narrow_cutoff,
            min_chirp_duration=args.min_chirp_duration,
            output_path=args.output_path,
            incremental_integral=args.incremental_integral,
        )
    except ValueError as exc:
        p.error(str(exc))
    return args


def run(args: argparse.Namespace) -> int:
    """Run detection for parsed arguments and return the process exit code."""
    configure_logging(level=args.log_level, json_file=args.log_json)
    logger = get_logger(__name__)
    try:
        run_detection(args.input, args.config, chunk_size=args.chunk_size, jsonl_path=args.jsonl)
    except SampleIOError as exc:
        print(f"{PROG}: {exc}", file=sys.stderr)
        if exc.path == args.input:
            return ExitCode.INPUT_UNAVAILABLE
        return ExitCode.OUTPUT_UNAVAILABLE
    except DetectorInitError as exc:
        print(f"{PROG}: {exc}", file=sys.stderr)
        return ExitCode.DETECTOR_INIT
    except KeyboardInterrupt:
        return ExitCode.GENERAL_ERROR
    except Exception:
        log_exception(logger, "Detection run failed", error_type="unexpected")
        return ExitCode.GENERAL_ERROR
    return ExitCode.SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    code = run(parse_args(argv))
    if code != ExitCode.SUCCESS:
        get_logger(__name__).debug("Exiting with %d (%s)", code, ExitCode.message(code))
    return code


if __name__ == "__main__":
    sys.exit(main())
