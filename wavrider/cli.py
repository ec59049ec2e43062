"""Command-line entry point: decode a cassette WAV into a binary file."""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from wavrider.analyse import analyse_stream, print_report
from wavrider.config import load_config
from wavrider.decoder import decode_samples, describe_stream
from wavrider.errors import WavriderError
from wavrider.samples import read_wav

DEFAULT_OUTFILE = "output.bin"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wavrider",
        description="Decode Apple II style FSK cassette audio from a WAV file",
    )
    parser.add_argument("wav", help="Input WAV file (8-bit unsigned or 16-bit signed PCM)")
    parser.add_argument("outfile", nargs="?", default=DEFAULT_OUTFILE,
                        help=f"Output file (default: {DEFAULT_OUTFILE})")
    parser.add_argument("--config", default=None, help="JSON file with decoder settings")
    parser.add_argument("--short-us", type=float, default=None,
                        help="SHORT/MEDIUM half-cycle threshold in microseconds")
    parser.add_argument("--long-us", type=float, default=None,
                        help="MEDIUM/LONG half-cycle threshold in microseconds")
    parser.add_argument("--min-header", type=int, default=None,
                        help="Leader half-cycles required before a sync is accepted")
    parser.add_argument("--split", action="store_true",
                        help="Write each tape record to its own file (output.000.bin, ...)")
    parser.add_argument("--events", action="store_true",
                        help="Print demodulator events as they happen")
    parser.add_argument("--plot", default=None,
                        help="Save a half-cycle duration histogram to this PNG")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only print errors")
    return parser


def split_names(outfile: str, n: int) -> List[str]:
    root, ext = os.path.splitext(outfile)
    return [f"{root}.{i:03d}{ext}" for i in range(n)]


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    verbose = not args.quiet

    try:
        config = load_config(args.config).replace(
            short_threshold_us = args.short_us,
            long_threshold_us  = args.long_us,
            min_header_count   = args.min_header,
        )
        if verbose:
            print(f"Processing {args.wav}...")
        stream = read_wav(args.wav)
        if verbose:
            describe_stream(stream)

        if args.plot:
            stats = analyse_stream(stream, config, plot_path=args.plot, title=args.wav)
            if verbose:
                print_report(stats)
                print(f"Histogram saved to: {args.plot}")

        result = decode_samples(stream, config, verbose=verbose, show_events=args.events)
    except (WavriderError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not result.data:
        if verbose:
            print("No data decoded.")
        return 0

    try:
        if args.split:
            for name, block in zip(split_names(args.outfile, len(result.blocks)), result.blocks):
                with open(name, "wb") as f:
                    f.write(block)
                if verbose:
                    print(f"Block written to {name} ({len(block)} bytes)")
        else:
            with open(args.outfile, "wb") as f:
                f.write(result.data)
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1

    if verbose and not args.split:
        print(f"Decoded {len(result.data)} bytes. Written to {args.outfile}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
