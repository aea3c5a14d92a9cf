"""
Streaming line-aligned chunking.

Processes data incrementally as it arrives, holding back the trailing partial
line and cutting a chunk at the first line boundary at or after the size
threshold. A line longer than the threshold is never split; the chunk grows
until the line ends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from linesplit.chunking.boundary import (
    BoundaryScan,
    decode_span,
    log_invalid_sequences,
    scan_for_boundary,
)

if TYPE_CHECKING:
    from linesplit.config import SplitConfig

# Initial window for the forward cut search; doubles until a boundary is found.
CUT_PROBE_BYTES = 64 * 1024


@dataclass
class Chunk:
    """A line-aligned span of the input.

    Attributes:
        index: One-based position of the chunk in the output sequence.
        byte_start: Starting byte offset in the input (inclusive).
        byte_end: Ending byte offset in the input (exclusive).
        content: The chunk content as bytes.
        is_final: Whether this chunk was flushed at end of stream.
    """

    index: int
    byte_start: int
    byte_end: int
    content: bytes
    is_final: bool = False


@dataclass
class StreamingChunkerState:
    """Internal state for the streaming chunker.

    Attributes:
        chunk: Complete lines not yet emitted. Always ends on a boundary.
        carry: Trailing partial line waiting for its line ending.
        carry_scanned: Offset in ``carry`` already searched without a match.
        safe_split: Rightmost boundary in ``chunk`` at or before the threshold.
        anchored: Whether ``safe_split`` has been located for this chunk.
        cut_scanned: Offset in ``chunk`` from which the cut search resumes.
        chunk_start_offset: Byte offset of ``chunk[0]`` in the input.
        next_index: Index the next emitted chunk receives.
        checked_offset: Input offset up to which invalid sequences are reported.
        decode_warnings: Number of invalid byte sequences found in the input.
    """

    chunk: bytearray = field(default_factory=bytearray)
    carry: bytearray = field(default_factory=bytearray)
    carry_scanned: int = 0
    safe_split: int = 0
    anchored: bool = False
    cut_scanned: int = 0
    chunk_start_offset: int = 0
    next_index: int = 1
    checked_offset: int = 0
    decode_warnings: int = 0


class StreamingChunker:
    """Stateful chunker that cuts a byte stream at line boundaries.

    Example:
        chunker = StreamingChunker(chunk_size=100 * 1024 * 1024)
        for data in data_source:
            for chunk in chunker.feed(data):
                process(chunk)
        for chunk in chunker.finalize():
            process(chunk)
    """

    def __init__(
        self,
        chunk_size: int,
        line_ending: str = "\n",
        encoding: str = "utf-8",
    ) -> None:
        """Initialize the streaming chunker.

        Args:
            chunk_size: Threshold in bytes a chunk must reach before a cut.
            line_ending: Line-ending character sequence.
            encoding: Python codec name of the input.

        Raises:
            ValueError: If chunk_size is not positive or line_ending is empty.
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if not line_ending:
            raise ValueError("line_ending must not be empty")

        self.chunk_size = chunk_size
        self.line_ending = line_ending
        self.encoding = encoding
        self.state = StreamingChunkerState()
        self._finalized = False

    @classmethod
    def from_config(cls, config: SplitConfig) -> StreamingChunker:
        """Create a chunker from a resolved split configuration."""
        return cls(
            chunk_size=config.chunk_size,
            line_ending=config.line_ending,
            encoding=config.encoding,
        )

    def feed(self, data: bytes) -> Iterator[Chunk]:
        """Feed data into the chunker and yield any ready chunks.

        Args:
            data: Bytes read from the input.

        Yields:
            Chunk objects as they are cut.

        Raises:
            RuntimeError: If called after finalize().
        """
        if self._finalized:
            raise RuntimeError("Cannot feed data after finalize()")

        if not data:
            return

        state = self.state
        state.carry.extend(data)

        # Every input byte passes through this scan before it joins the chunk,
        # so invalid sequences are reported here and nowhere else.
        base = state.chunk_start_offset + len(state.chunk) + state.carry_scanned
        scan = self._scan(state.carry[state.carry_scanned:], last=True)
        self._report_errors(scan.errors, base)
        if scan.boundary is not None:
            end = state.carry_scanned + scan.boundary
            state.chunk.extend(state.carry[:end])
            del state.carry[:end]
            state.carry_scanned = 0
        else:
            state.carry_scanned += scan.resume

        while len(state.chunk) >= self.chunk_size:
            cut = self._find_cut()
            if cut is None:
                break
            yield self._cut(cut)

    def finalize(self) -> Iterator[Chunk]:
        """Flush the remaining data as the final chunk.

        Must be called once when all data has been fed.

        Yields:
            The final Chunk, if any data remains.

        Raises:
            RuntimeError: If called more than once.
        """
        if self._finalized:
            raise RuntimeError("finalize() already called")

        self._finalized = True
        state = self.state
        if state.carry:
            # Bytes of an incomplete character at end of input were never decoded
            base = state.chunk_start_offset + len(state.chunk) + state.carry_scanned
            span = decode_span(bytes(state.carry[state.carry_scanned:]), self.encoding, final=True)
            self._report_errors(span.errors, base)
        state.chunk.extend(state.carry)
        state.carry.clear()
        state.carry_scanned = 0

        if state.chunk:
            chunk = self._cut(len(state.chunk))
            chunk.is_final = True
            yield chunk

    def reset(self) -> None:
        """Reset the chunker state for reuse."""
        self.state = StreamingChunkerState()
        self._finalized = False

    @property
    def buffer_size(self) -> int:
        """Return the number of bytes held but not yet emitted."""
        return len(self.state.chunk) + len(self.state.carry)

    @property
    def total_bytes_processed(self) -> int:
        """Return the total bytes fed so far."""
        return self.state.chunk_start_offset + self.buffer_size

    @property
    def decode_warnings(self) -> int:
        return self.state.decode_warnings

    def _scan(self, data: bytearray, last: bool) -> BoundaryScan:
        return scan_for_boundary(bytes(data), self.line_ending, self.encoding, last=last)

    def _report_errors(self, errors: list[tuple[int, int]], base: int) -> None:
        """Log and count invalid sequences not reported by an earlier scan."""
        state = self.state
        new = [(start, end) for start, end in errors if base + start >= state.checked_offset]
        if not new:
            return
        log_invalid_sequences(new, self.encoding, base_offset=base)
        state.decode_warnings += len(new)
        state.checked_offset = base + new[-1][1]

    def _find_cut(self) -> int | None:
        """Find the smallest boundary at or after the threshold.

        Returns:
            Cut offset in the chunk, or None if no boundary follows the
            threshold yet.
        """
        state = self.state

        if not state.anchored:
            scan = self._scan(state.chunk[: self.chunk_size], last=True)
            state.safe_split = scan.boundary or 0
            state.cut_scanned = state.safe_split
            state.anchored = True
            if state.safe_split == self.chunk_size:
                return state.safe_split

        probe = CUT_PROBE_BYTES
        while state.cut_scanned < len(state.chunk):
            start = state.cut_scanned
            window = state.chunk[start:start + probe]
            scan = self._scan(window, last=False)
            if scan.boundary is not None:
                return start + scan.boundary
            state.cut_scanned = start + scan.resume
            if start + len(window) >= len(state.chunk):
                break
            probe *= 2

        return None

    def _cut(self, cut: int) -> Chunk:
        """Remove ``chunk[:cut]`` and return it as the next Chunk."""
        state = self.state
        content = bytes(state.chunk[:cut])
        del state.chunk[:cut]

        chunk = Chunk(
            index=state.next_index,
            byte_start=state.chunk_start_offset,
            byte_end=state.chunk_start_offset + cut,
            content=content,
        )

        state.next_index += 1
        state.chunk_start_offset += cut
        state.safe_split = 0
        state.anchored = False
        state.cut_scanned = 0

        return chunk


def chunk_stream(
    data_iter: Iterator[bytes],
    chunk_size: int,
    line_ending: str = "\n",
    encoding: str = "utf-8",
) -> Iterator[Chunk]:
    """Stream chunks from an iterator of byte data.

    Args:
        data_iter: Iterator yielding blocks of bytes.
        chunk_size: Threshold in bytes a chunk must reach before a cut.
        line_ending: Line-ending character sequence.
        encoding: Python codec name of the input.

    Yields:
        Chunk objects in index order.
    """
    chunker = StreamingChunker(chunk_size, line_ending=line_ending, encoding=encoding)
    for data in data_iter:
        yield from chunker.feed(data)
    yield from chunker.finalize()
