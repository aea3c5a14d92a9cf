"""Line-aligned chunking module."""

from .boundary import find_first_boundary, find_last_boundary, scan_for_boundary
from .streaming import Chunk, StreamingChunker, chunk_stream

__all__ = [
    "Chunk",
    "StreamingChunker",
    "chunk_stream",
    "find_first_boundary",
    "find_last_boundary",
    "scan_for_boundary",
]
