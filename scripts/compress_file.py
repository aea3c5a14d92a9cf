#!/usr/bin/env uv run
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "zstandard>=0.22",
# ]
# ///
"""
Whole-file compression CLI.

Compresses a single file to <file>.zst without splitting it.

Usage:
    uv run scripts/compress_file.py input.log
    uv run scripts/compress_file.py input.log --level 19
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from linesplit.storage.codec import DEFAULT_LEVEL, compress_file


def setup_logging(log_level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Compress a whole file with zstd")
    parser.add_argument("input", type=Path, help="File to compress")
    parser.add_argument(
        "--level",
        type=int,
        default=DEFAULT_LEVEL,
        help="Zstd compression level (1-22)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    args = parser.parse_args()
    setup_logging(args.log_level)

    if not 1 <= args.level <= 22:
        print(f"Error: compression level must be in 1..22, got {args.level}", file=sys.stderr)
        return 2

    try:
        output = compress_file(args.input, level=args.level)
    except Exception as e:
        logging.error(f"Compression failed: {e}", exc_info=True)
        return 1

    print(f"File compressed successfully to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
