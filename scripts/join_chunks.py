#!/usr/bin/env uv run
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "zstandard>=0.22",
# ]
# ///
"""
Reassemble split output.

Decompresses <output_prefix>.NNN.zst files in index order and writes the
restored input. With --manifest the chunk files are checked against the
manifest first.

Usage:
    uv run scripts/join_chunks.py out/input restored.log
    uv run scripts/join_chunks.py out/input restored.log --manifest out/input.manifest.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from linesplit.chunking.manifests import (
    load_manifest,
    validate_manifest,
    verify_chunk_integrity,
)
from linesplit.storage.reader import find_chunk_files, join_chunks


def setup_logging(log_level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Join line-aligned zstd chunks")
    parser.add_argument("output_prefix", help="Prefix the chunks were written with")
    parser.add_argument("dest", type=Path, help="Path of the restored file")
    parser.add_argument(
        "--manifest",
        type=Path,
        help="Manifest JSON to verify the chunks against",
    )
    parser.add_argument(
        "--extension",
        default="zst",
        help="Chunk file extension",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    args = parser.parse_args()
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        if args.manifest:
            manifest = load_manifest(args.manifest)
            is_valid, issues = validate_manifest(manifest)
            if is_valid:
                paths = find_chunk_files(args.output_prefix, args.extension)
                is_valid, issues = verify_chunk_integrity(manifest, paths)
            if not is_valid:
                for issue in issues:
                    logger.error(issue)
                return 1
            logger.info(f"Verified {manifest['chunk_count']} chunks against {args.manifest}")

        with args.dest.open("wb") as dest:
            total = join_chunks(args.output_prefix, dest, extension=args.extension)
    except Exception as e:
        logger.error(f"Join failed: {e}", exc_info=True)
        return 1

    print(f"Restored {total} bytes to {args.dest}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
