"""
Line scanner that finds statement delimiters.

The scanner never holds state of its own: each call receives the
:class:`ScanState` left by the previous line and returns a new one, so an
open quote or block comment carries across line boundaries explicitly.
"""
from __future__ import annotations

import dataclasses as dc
import enum

from sqlbatch.config import DelimiterType


class Overflow(enum.Enum):
    """What the previous line left open."""

    NONE = ""
    SINGLE_QUOTE = "'"
    DOUBLE_QUOTE = '"'
    COMMENT = "/*"


_QUOTES = {"'": Overflow.SINGLE_QUOTE, '"': Overflow.DOUBLE_QUOTE}


@dc.dataclass(frozen=True)
class ScanState:
    overflow: Overflow = Overflow.NONE
    # offset just past the delimiter; None means no end found on this line
    end: int | None = None

    @property
    def found(self) -> bool:
        return self.end is not None


CLEAN = ScanState()


def _matches(line: str, pos: int, delimiter: str, alpha: bool) -> bool:
    if not alpha:
        return line.startswith(delimiter, pos)
    stop = pos + len(delimiter)
    if line[pos:stop].lower() != delimiter.lower():
        return False
    before = line[pos - 1] if pos > 0 else " "
    after = line[stop] if stop < len(line) else " "
    return not (before.isalnum() or before == "_" or after.isalnum() or after == "_")


def _scan_normal(line: str, delimiter: str, state: ScanState) -> ScanState:
    overflow = Overflow.NONE if state.found else state.overflow
    alpha = delimiter.isalpha()
    pos, size = 0, len(line)

    while pos < size:
        c = line[pos]
        nxt = line[pos + 1] if pos + 1 < size else "\n"

        if overflow is Overflow.COMMENT:
            if c == "*" and nxt == "/":
                overflow = Overflow.NONE
                pos += 2
            else:
                pos += 1
            continue

        if overflow is not Overflow.NONE:
            if c == "\\":
                pos += 2
                continue
            if c == overflow.value:
                overflow = Overflow.NONE
            pos += 1
            continue

        if c == "-" and nxt == "-":
            # comment to end of line: kept in the statement, never scanned
            break
        if c == "/" and nxt == "*":
            overflow = Overflow.COMMENT
            pos += 2
            continue
        if c in _QUOTES:
            overflow = _QUOTES[c]
            pos += 1
            continue
        if _matches(line, pos, delimiter, alpha):
            return ScanState(end=pos + len(delimiter))
        pos += 1

    return ScanState(overflow=overflow)


def scan_line(
    line: str,
    delimiter: str,
    state: ScanState = CLEAN,
    delimiter_type: DelimiterType = DelimiterType.NORMAL,
) -> ScanState:
    """
    Scan one *line* starting from *state* and return the state after it.

    In ``row`` mode only a line consisting of the delimiter alone ends a
    statement; quotes and comments are not analysed.
    """
    if delimiter_type is DelimiterType.ROW:
        if line.strip() == delimiter:
            return ScanState(end=len(line))
        return CLEAN
    return _scan_normal(line, delimiter, state)
