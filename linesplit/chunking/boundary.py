"""
Encoding-aware line boundary search.

Line endings are searched for in decoded text rather than raw bytes, so a
multi-byte character whose trailing byte happens to equal a line-ending byte
never produces a false boundary. Offsets are reported in bytes of the
original span.
"""

from __future__ import annotations

import codecs
import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Invalid bytes decode to lone surrogates and re-encode to the same bytes,
# so offsets measured by re-encoding stay exact.
SUBSTITUTE_ERRORS = "surrogateescape"

# Each escaped byte decodes to one character in this range.
_ESCAPED_RUN = re.compile("[\udc80-\udcff]+")


@dataclass
class DecodedSpan:
    """Result of decoding a byte span.

    Attributes:
        text: Decoded text.
        consumed: Number of bytes the text covers. A trailing incomplete
            multi-byte character is left out unless decoding was final.
        errors: ``(start, end)`` byte ranges of invalid sequences.
    """

    text: str
    consumed: int
    errors: list[tuple[int, int]] = field(default_factory=list)

    @property
    def had_errors(self) -> bool:
        return bool(self.errors)


@dataclass
class BoundaryScan:
    """Result of a boundary search over a byte span.

    Attributes:
        boundary: Byte offset just past the matched line ending, or None.
        resume: Character-aligned offset from which a search of the same span,
            grown by appending bytes, must restart to not miss an occurrence.
        errors: ``(start, end)`` byte ranges of invalid sequences.
    """

    boundary: int | None
    resume: int
    errors: list[tuple[int, int]] = field(default_factory=list)

    @property
    def had_errors(self) -> bool:
        return bool(self.errors)


def _encoded_length(text: str, encoding: str) -> int:
    return len(text.encode(encoding, errors=SUBSTITUTE_ERRORS))


def _escaped_ranges(text: str, encoding: str) -> list[tuple[int, int]]:
    ranges = []
    pos = 0
    offset = 0
    for m in _ESCAPED_RUN.finditer(text):
        offset += _encoded_length(text[pos:m.start()], encoding)
        run = m.end() - m.start()
        ranges.append((offset, offset + run))
        offset += run
        pos = m.end()
    return ranges


def decode_span(data: bytes, encoding: str, final: bool = False) -> DecodedSpan:
    """Decode a byte span, substituting invalid sequences instead of failing.

    Args:
        data: Bytes to decode.
        encoding: Python codec name.
        final: Treat a trailing incomplete character as invalid instead of
            leaving it undecoded.

    Returns:
        DecodedSpan with the text, the number of bytes it covers and the
        ranges of any invalid sequences.
    """
    decoder = codecs.getincrementaldecoder(encoding)(errors="strict")
    try:
        text = decoder.decode(data, final=final)
        errors = []
    except UnicodeDecodeError:
        decoder = codecs.getincrementaldecoder(encoding)(errors=SUBSTITUTE_ERRORS)
        text = decoder.decode(data, final=final)
        errors = _escaped_ranges(text, encoding)

    pending, _ = decoder.getstate()
    return DecodedSpan(text=text, consumed=len(data) - len(pending), errors=errors)


def log_invalid_sequences(
    errors: list[tuple[int, int]],
    encoding: str,
    base_offset: int = 0,
) -> None:
    """Log one warning per invalid sequence, at its offset in the input."""
    for start, end in errors:
        logger.warning(
            f"Invalid {encoding} byte sequence at offset {base_offset + start} "
            f"({end - start} bytes), continuing with substituted characters"
        )


def scan_for_boundary(
    data: bytes,
    line_ending: str,
    encoding: str,
    last: bool = True,
) -> BoundaryScan:
    """Search a byte span for a line ending in its decoded text.

    Invalid sequences are reported in the result but not logged; the caller
    knows where the span sits in the input.

    Args:
        data: Byte span to search.
        line_ending: Line-ending character sequence.
        encoding: Python codec name.
        last: Find the rightmost occurrence if True, the leftmost otherwise.

    Returns:
        BoundaryScan with the byte offset just past the matched occurrence.
    """
    if not data:
        return BoundaryScan(boundary=None, resume=0)

    span = decode_span(data, encoding)
    text = span.text

    pos = text.rfind(line_ending) if last else text.find(line_ending)

    if pos >= 0:
        end = pos + len(line_ending)
        if last:
            # Rightmost match sits near the end, so measure the shorter tail
            boundary = span.consumed - _encoded_length(text[end:], encoding)
        else:
            boundary = _encoded_length(text[:end], encoding)
    else:
        boundary = None

    # An occurrence may straddle the end of the span; back off by the
    # characters that could be its prefix.
    overlap = len(line_ending) - 1
    if overlap > 0 and text:
        resume = span.consumed - _encoded_length(text[-overlap:], encoding)
    else:
        resume = span.consumed

    return BoundaryScan(boundary=boundary, resume=resume, errors=span.errors)


def find_last_boundary(data: bytes, line_ending: str, encoding: str) -> int | None:
    """Return the byte offset just past the last line ending in ``data``.

    Args:
        data: Byte span to search.
        line_ending: Line-ending character sequence.
        encoding: Python codec name.

    Returns:
        Byte offset of the boundary, or None if the span has no line ending.
    """
    scan = scan_for_boundary(data, line_ending, encoding, last=True)
    log_invalid_sequences(scan.errors, encoding)
    return scan.boundary


def find_first_boundary(data: bytes, line_ending: str, encoding: str) -> int | None:
    """Return the byte offset just past the first line ending in ``data``."""
    scan = scan_for_boundary(data, line_ending, encoding, last=False)
    log_invalid_sequences(scan.errors, encoding)
    return scan.boundary


def resume_offset(data: bytes, line_ending: str, encoding: str) -> int:
    """Return the offset from which a search of ``data`` grown by appended
    bytes must restart.

    The offset is character-aligned. It backs off over the characters that
    could begin a straddling line ending and excludes a trailing incomplete
    character.
    """
    return scan_for_boundary(data, line_ending, encoding).resume
