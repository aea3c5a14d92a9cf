"""
Reassembly of split output.

Finds the numbered chunk files written for a prefix and restores the
original input by decompressing them in index order.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import BinaryIO, Iterator

from linesplit.storage.codec import decompress

logger = logging.getLogger(__name__)


def find_chunk_files(output_prefix: str | Path, extension: str = "zst") -> list[Path]:
    """List the chunk files for a prefix, ordered by index.

    Args:
        output_prefix: Prefix used when splitting.
        extension: File extension of the chunk files.

    Returns:
        Paths ordered by their numeric index.

    Raises:
        ValueError: If the indices are not exactly 1..N.
    """
    prefix = Path(output_prefix)
    directory = prefix.parent
    pattern = re.compile(
        re.escape(prefix.name) + r"\.(\d+)\." + re.escape(extension) + r"$"
    )

    found: list[tuple[int, Path]] = []
    if directory.is_dir():
        for path in directory.iterdir():
            match = pattern.match(path.name)
            if match:
                found.append((int(match.group(1)), path))

    found.sort()
    indices = [index for index, _ in found]
    expected = list(range(1, len(found) + 1))
    if indices != expected:
        raise ValueError(
            f"Chunk files for {output_prefix} are not numbered 1..{len(found)}: {indices}"
        )

    return [path for _, path in found]


def iter_chunk_contents(paths: list[Path]) -> Iterator[bytes]:
    """Yield the decompressed content of each chunk file in order."""
    for path in paths:
        yield decompress(path.read_bytes())


def join_chunks(
    output_prefix: str | Path,
    dest: BinaryIO,
    extension: str = "zst",
) -> int:
    """Decompress all chunks of a prefix and write them to ``dest``.

    Args:
        output_prefix: Prefix used when splitting.
        dest: Writable binary stream.
        extension: File extension of the chunk files.

    Returns:
        Total number of bytes written.
    """
    paths = find_chunk_files(output_prefix, extension)
    total = 0
    for path, content in zip(paths, iter_chunk_contents(paths)):
        dest.write(content)
        total += len(content)
        logger.debug(f"Restored {path} ({len(content)} bytes)")

    logger.info(f"Joined {len(paths)} chunks ({total} bytes)")
    return total
