#!/usr/bin/env uv run
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "zstandard>=0.22",
#     "numpy>=1.26",
# ]
# ///
"""
Line-aligned split CLI.

Splits a large text file into chunks of at least the given size that end on
a line boundary, and writes each chunk as a separate zstd file named
<output_prefix>.001.zst, <output_prefix>.002.zst, ...

Usage:
    uv run scripts/split_file.py input.log out/input [chunk_size_mb] [line_ending] [encoding]
    uv run scripts/split_file.py input.log out/input 100 CRLF GBK --manifest

line_ending:
    LF      Unix style (\\n)
    CRLF    Windows style (\\r\\n)
    CR      classic Mac style (\\r)
    custom:<literal>  custom line ending, e.g. custom:\\r\\n\\r\\n

encoding:
    UTF-8, GBK, GB18030, BIG5, SHIFT_JIS, LATIN-1
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from linesplit.chunking.manifests import generate_manifest, manifest_path, write_manifest
from linesplit.config import LOG_LEVELS, Config, ConfigError, SplitConfig, load_config
from linesplit.eval.stats import compute_split_stats, format_report
from linesplit.pipeline import split_file
from linesplit.storage.emitter import ChunkEmitter

EXIT_CONFIG_ERROR = 2


def setup_logging(log_level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Split a text file into line-aligned zstd chunks",
        epilog="line_ending: LF, CRLF, CR or custom:<literal>; "
        "encoding: UTF-8, GBK, GB18030, BIG5, SHIFT_JIS, LATIN-1",
    )
    parser.add_argument("input", type=Path, help="Input file to split")
    parser.add_argument("output_prefix", help="Prefix of the output chunk files")
    parser.add_argument(
        "chunk_size_mb",
        nargs="?",
        help="Chunk size threshold in MB (default: 100)",
    )
    parser.add_argument(
        "line_ending",
        nargs="?",
        help="Line ending: LF, CRLF, CR or custom:<literal> (default: LF)",
    )
    parser.add_argument(
        "encoding",
        nargs="?",
        help="Input encoding (default: UTF-8)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/default.toml"),
        help="Configuration file",
    )
    parser.add_argument(
        "--level",
        type=int,
        help="Zstd compression level (1-22)",
    )
    parser.add_argument(
        "--buffer-size-mb",
        type=int,
        help="Read buffer size in MB",
    )
    parser.add_argument(
        "--manifest",
        action="store_true",
        default=None,
        help="Write <output_prefix>.manifest.json",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        help="Logging level",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> tuple[Config, SplitConfig]:
    """Merge the TOML configuration with command-line overrides.

    Raises:
        ConfigError: If any value is invalid.
    """
    try:
        config = load_config(args.config) if args.config.exists() else Config()
    except (OSError, ValueError) as e:
        raise ConfigError(f"cannot load {args.config}: {e}") from e

    if args.level is not None:
        config.compression.level = args.level
    if args.buffer_size_mb is not None:
        config.reader.buffer_size_mb = args.buffer_size_mb
    if args.manifest is not None:
        config.general.write_manifest = args.manifest
    if args.log_level is not None:
        config.general.log_level = args.log_level

    config.validate()

    split_config = SplitConfig.from_options(
        args.input,
        args.output_prefix,
        chunk_size_mb=args.chunk_size_mb,
        line_ending=args.line_ending,
        encoding=args.encoding,
        defaults=config.chunking,
    )
    return config, split_config


def main() -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args()

    try:
        config, split_config = resolve_config(args)
    except ConfigError as e:
        parser.print_usage(sys.stderr)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    setup_logging(config.general.log_level)
    logger = logging.getLogger(__name__)

    emitter = ChunkEmitter.from_config(split_config.output_prefix, config.compression)

    try:
        result = split_file(
            split_config,
            emitter=emitter,
            buffer_size=config.reader.buffer_size,
        )
    except Exception as e:
        logger.error(f"Split failed after {len(emitter.emitted)} chunks: {e}", exc_info=True)
        return 1

    if config.general.write_manifest:
        manifest = generate_manifest(result, split_config)
        path = write_manifest(manifest, manifest_path(split_config.output_prefix))
        logger.info(f"Wrote manifest to {path}")

    for line in format_report(compute_split_stats(result)):
        logger.info(line)

    return 0


if __name__ == "__main__":
    sys.exit(main())
