"""
Split pipeline: reads the input in fixed-size blocks, cuts line-aligned
chunks and hands each one to the emitter as soon as it is cut.

Processing is sequential. A chunk is compressed and written before the next
block is read.
"""

from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, BinaryIO, Iterator

from linesplit.chunking.streaming import StreamingChunker
from linesplit.config import DEFAULT_BUFFER_SIZE_MB, MB, CompressionConfig
from linesplit.storage.emitter import ChunkEmitter, EmittedChunk

if TYPE_CHECKING:
    from linesplit.config import SplitConfig

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = DEFAULT_BUFFER_SIZE_MB * MB


@dataclass
class SplitResult:
    """Outcome of a split run.

    Attributes:
        chunks: Emitted chunks in index order.
        total_bytes: Number of input bytes read.
        elapsed_seconds: Wall-clock duration of the run.
        decode_warnings: Number of invalid byte sequences in the input.
        input_sha256: SHA256 of the whole input.
    """

    chunks: list[EmittedChunk] = field(default_factory=list)
    total_bytes: int = 0
    elapsed_seconds: float = 0.0
    decode_warnings: int = 0
    input_sha256: str = ""

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "chunk_count": self.chunk_count,
            "total_bytes": self.total_bytes,
            "elapsed_seconds": self.elapsed_seconds,
            "decode_warnings": self.decode_warnings,
            "input_sha256": self.input_sha256,
            "chunks": [c.to_dict() for c in self.chunks],
        }


def read_blocks(stream: BinaryIO, block_size: int = DEFAULT_BUFFER_SIZE) -> Iterator[bytes]:
    """Yield blocks of at most ``block_size`` bytes until the stream is exhausted."""
    if block_size <= 0:
        raise ValueError(f"block_size must be positive, got {block_size}")
    while True:
        data = stream.read(block_size)
        if not data:
            break
        yield data


def split_stream(
    stream: BinaryIO,
    config: SplitConfig,
    emitter: ChunkEmitter,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> SplitResult:
    """Split a binary stream into compressed, line-aligned chunk files.

    Args:
        stream: Readable binary stream positioned at the start of the input.
        config: Resolved split configuration.
        emitter: Emitter that compresses and writes each chunk.
        buffer_size: Read block size in bytes.

    Returns:
        SplitResult with the emitted chunks and run statistics.

    Raises:
        OSError: If reading or writing fails.
        CodecError: If compression fails.
    """
    start_time = time.perf_counter()
    chunker = StreamingChunker.from_config(config)
    digest = hashlib.sha256()
    result = SplitResult()

    for block in read_blocks(stream, buffer_size):
        digest.update(block)
        result.total_bytes += len(block)
        logger.debug(f"Read {len(block)} bytes ({result.total_bytes} total)")

        for chunk in chunker.feed(block):
            result.chunks.append(emitter.emit(chunk))

    for chunk in chunker.finalize():
        result.chunks.append(emitter.emit(chunk))

    result.elapsed_seconds = time.perf_counter() - start_time
    result.decode_warnings = chunker.decode_warnings
    result.input_sha256 = digest.hexdigest()
    return result


def split_file(
    config: SplitConfig,
    emitter: ChunkEmitter | None = None,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    compression: CompressionConfig | None = None,
) -> SplitResult:
    """Split the configured input file.

    Args:
        config: Resolved split configuration.
        emitter: Emitter to use; defaults to one built from ``compression``
            under the configured output prefix.
        buffer_size: Read block size in bytes.
        compression: Compression settings for the default emitter. Ignored
            when ``emitter`` is given.

    Returns:
        SplitResult with the emitted chunks and run statistics.
    """
    if emitter is None:
        emitter = ChunkEmitter.from_config(config.output_prefix, compression or CompressionConfig())

    logger.info(f"Splitting {config.input_path}")
    logger.info(f"- encoding: {config.encoding}")
    logger.info(f"- line ending: {config.line_ending!r}")
    logger.info(f"- chunk size: {config.chunk_size} bytes")

    with config.input_path.open("rb") as f:
        return split_stream(f, config, emitter, buffer_size=buffer_size)
