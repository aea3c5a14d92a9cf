"""
Chunk emitter: compresses finished chunks and writes numbered output files.

Output files are named ``<output_prefix>.<NNN>.<extension>`` with a
zero-padded index, so a lexical sort of the names follows chunk order.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from linesplit.storage.codec import DEFAULT_LEVEL, compress

if TYPE_CHECKING:
    from linesplit.chunking.streaming import Chunk
    from linesplit.config import CompressionConfig

logger = logging.getLogger(__name__)


@dataclass
class EmittedChunk:
    """Record of a chunk written to disk.

    Attributes:
        index: One-based chunk index.
        path: Path of the compressed output file.
        byte_start: Starting byte offset in the input (inclusive).
        byte_end: Ending byte offset in the input (exclusive).
        uncompressed_bytes: Size of the chunk before compression.
        compressed_bytes: Size of the written file.
        content_sha256: SHA256 of the uncompressed chunk.
        is_final: Whether the chunk was flushed at end of stream.
    """

    index: int
    path: Path
    byte_start: int
    byte_end: int
    uncompressed_bytes: int
    compressed_bytes: int
    content_sha256: str
    is_final: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "index": self.index,
            "path": str(self.path),
            "byte_start": self.byte_start,
            "byte_end": self.byte_end,
            "uncompressed_bytes": self.uncompressed_bytes,
            "compressed_bytes": self.compressed_bytes,
            "content_sha256": self.content_sha256,
            "is_final": self.is_final,
        }


def chunk_path(
    output_prefix: str | Path,
    index: int,
    extension: str = "zst",
    index_width: int = 3,
) -> Path:
    """Return the output path of the chunk with the given index."""
    return Path(f"{output_prefix}.{index:0{index_width}d}.{extension}")


class ChunkEmitter:
    """Writes each chunk as an independent compressed file."""

    def __init__(
        self,
        output_prefix: str | Path,
        level: int = DEFAULT_LEVEL,
        extension: str = "zst",
        index_width: int = 3,
    ) -> None:
        """
        Initialize the emitter.

        Args:
            output_prefix: Prefix of the output files, may include directories.
            level: Zstd compression level.
            extension: File extension of the output files.
            index_width: Zero-padded width of the index in file names.
        """
        self.output_prefix = str(output_prefix)
        self.level = level
        self.extension = extension
        self.index_width = index_width
        self.emitted: list[EmittedChunk] = []

    @classmethod
    def from_config(cls, output_prefix: str | Path, config: CompressionConfig) -> ChunkEmitter:
        return cls(
            output_prefix,
            level=config.level,
            extension=config.extension,
            index_width=config.index_width,
        )

    def path_for(self, index: int) -> Path:
        return chunk_path(self.output_prefix, index, self.extension, self.index_width)

    def emit(self, chunk: Chunk) -> EmittedChunk:
        """Compress a chunk and write it to its numbered file.

        Args:
            chunk: Finished chunk.

        Returns:
            EmittedChunk describing the written file.

        Raises:
            CodecError: If compression fails.
            OSError: If the file cannot be written.
        """
        compressed = compress(chunk.content, self.level)

        path = self.path_for(chunk.index)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(compressed)

        record = EmittedChunk(
            index=chunk.index,
            path=path,
            byte_start=chunk.byte_start,
            byte_end=chunk.byte_end,
            uncompressed_bytes=len(chunk.content),
            compressed_bytes=len(compressed),
            content_sha256=hashlib.sha256(chunk.content).hexdigest(),
            is_final=chunk.is_final,
        )
        self.emitted.append(record)

        logger.info(
            f"Wrote chunk {chunk.index} to {path} "
            f"({record.uncompressed_bytes} bytes, {record.compressed_bytes} compressed)"
        )
        return record
