"""
Zstandard codec helpers.

Chunks are compressed as whole, independent zstd frames so each output file
can be decompressed on its own.
"""

from __future__ import annotations

import logging
from pathlib import Path

import zstandard

logger = logging.getLogger(__name__)

DEFAULT_LEVEL = 3


class CodecError(RuntimeError):
    """Raised when compression or decompression fails."""


def compress(data: bytes, level: int = DEFAULT_LEVEL) -> bytes:
    """Compress bytes into a single zstd frame.

    Args:
        data: Uncompressed bytes.
        level: Zstd compression level.

    Returns:
        Compressed frame. The frame records the content size.

    Raises:
        CodecError: If the compressor rejects the input or level.
    """
    try:
        cctx = zstandard.ZstdCompressor(level=level, write_content_size=True)
        return cctx.compress(data)
    except zstandard.ZstdError as e:
        raise CodecError(f"zstd compression failed: {e}") from e


def decompress(data: bytes) -> bytes:
    """Decompress a zstd frame.

    Raises:
        CodecError: If the data is not a valid zstd frame.
    """
    try:
        dobj = zstandard.ZstdDecompressor().decompressobj()
        return dobj.decompress(data)
    except zstandard.ZstdError as e:
        raise CodecError(f"zstd decompression failed: {e}") from e


def compress_file(
    path: str | Path,
    level: int = DEFAULT_LEVEL,
    output_path: str | Path | None = None,
) -> Path:
    """Compress a whole file into ``<path>.zst``.

    The file is streamed through the compressor, so it does not need to fit
    in memory.

    Args:
        path: File to compress.
        level: Zstd compression level.
        output_path: Destination; defaults to the input path plus ``.zst``.

    Returns:
        Path of the compressed file.

    Raises:
        OSError: If the input cannot be read or the output written.
        CodecError: If compression fails.
    """
    path = Path(path)
    output_path = Path(output_path) if output_path is not None else path.with_name(path.name + ".zst")

    cctx = zstandard.ZstdCompressor(level=level)
    with path.open("rb") as src, output_path.open("wb") as dst:
        try:
            read, written = cctx.copy_stream(src, dst)
        except zstandard.ZstdError as e:
            raise CodecError(f"zstd compression of {path} failed: {e}") from e

    logger.info(f"Compressed {path} ({read} bytes) to {output_path} ({written} bytes)")
    return output_path
