"""
Split run statistics for linesplit.

Summarizes a finished split run for the end-of-run report.

Metrics:
- chunk_count: Number of chunk files written
- total_bytes / compressed_bytes: Input size and total output size
- compression_ratio: total_bytes / compressed_bytes
- size_mean / size_min / size_max / size_p50 / size_p95: Uncompressed chunk sizes
- throughput_mb_s: Input megabytes processed per second
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from linesplit.pipeline import SplitResult

MB = 1024 * 1024


@dataclass
class SplitStats:
    """
    Aggregate statistics of a split run.

    Attributes:
        chunk_count: Number of chunks emitted.
        total_bytes: Input bytes read.
        compressed_bytes: Sum of compressed chunk sizes.
        compression_ratio: total_bytes / compressed_bytes, 0 when nothing
            was written.
        size_mean: Mean uncompressed chunk size in bytes.
        size_min: Smallest uncompressed chunk size.
        size_max: Largest uncompressed chunk size.
        size_p50: Median uncompressed chunk size.
        size_p95: 95th percentile of uncompressed chunk size.
        elapsed_seconds: Wall-clock duration of the run.
        throughput_mb_s: Input MB per second, 0 when elapsed is 0.
        decode_warnings: Number of invalid byte sequences in the input.
    """

    chunk_count: int
    total_bytes: int
    compressed_bytes: int
    compression_ratio: float
    size_mean: float
    size_min: int
    size_max: int
    size_p50: float
    size_p95: float
    elapsed_seconds: float
    throughput_mb_s: float
    decode_warnings: int

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "chunk_count": self.chunk_count,
            "total_bytes": self.total_bytes,
            "compressed_bytes": self.compressed_bytes,
            "compression_ratio": self.compression_ratio,
            "size_mean": self.size_mean,
            "size_min": self.size_min,
            "size_max": self.size_max,
            "size_p50": self.size_p50,
            "size_p95": self.size_p95,
            "elapsed_seconds": self.elapsed_seconds,
            "throughput_mb_s": self.throughput_mb_s,
            "decode_warnings": self.decode_warnings,
        }


def compute_split_stats(result: SplitResult) -> SplitStats:
    """
    Compute aggregate statistics for a split run.

    Args:
        result: Result returned by the split pipeline.

    Returns:
        SplitStats for the run. Size fields are 0 when no chunk was emitted.
    """
    sizes = np.array([c.uncompressed_bytes for c in result.chunks], dtype=np.int64)
    compressed = int(sum(c.compressed_bytes for c in result.chunks))

    if sizes.size > 0:
        size_mean = float(np.mean(sizes))
        size_min = int(np.min(sizes))
        size_max = int(np.max(sizes))
        size_p50 = float(np.percentile(sizes, 50))
        size_p95 = float(np.percentile(sizes, 95))
    else:
        size_mean = size_p50 = size_p95 = 0.0
        size_min = size_max = 0

    ratio = result.total_bytes / compressed if compressed > 0 else 0.0
    if result.elapsed_seconds > 0:
        throughput = (result.total_bytes / MB) / result.elapsed_seconds
    else:
        throughput = 0.0

    return SplitStats(
        chunk_count=len(result.chunks),
        total_bytes=result.total_bytes,
        compressed_bytes=compressed,
        compression_ratio=ratio,
        size_mean=size_mean,
        size_min=size_min,
        size_max=size_max,
        size_p50=size_p50,
        size_p95=size_p95,
        elapsed_seconds=result.elapsed_seconds,
        throughput_mb_s=throughput,
        decode_warnings=result.decode_warnings,
    )


def format_report(stats: SplitStats) -> list[str]:
    """Render statistics as report lines."""
    return [
        "Split summary:",
        f"- chunks: {stats.chunk_count}",
        f"- input: {stats.total_bytes / MB:.2f} MB",
        f"- output: {stats.compressed_bytes / MB:.2f} MB (ratio {stats.compression_ratio:.2f})",
        f"- chunk size: mean {stats.size_mean / MB:.2f} MB, "
        f"p50 {stats.size_p50 / MB:.2f} MB, p95 {stats.size_p95 / MB:.2f} MB, "
        f"max {stats.size_max / MB:.2f} MB",
        f"- elapsed: {stats.elapsed_seconds:.2f} s ({stats.throughput_mb_s:.2f} MB/s)",
        f"- decode warnings: {stats.decode_warnings}",
    ]
