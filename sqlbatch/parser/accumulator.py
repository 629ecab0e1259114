from __future__ import annotations

import dataclasses as dc
import typing as t

from sqlbatch.config import DelimiterType
from sqlbatch.constants import DEFAULT_DELIMITER
from sqlbatch.errors import ConfigError
from sqlbatch.parser.scanner import CLEAN, Overflow, ScanState, scan_line


@dc.dataclass(frozen=True)
class DelimiterConfig:
    delimiter: str = DEFAULT_DELIMITER
    delimiter_type: DelimiterType = DelimiterType.NORMAL
    keep_format: bool = False

    def __post_init__(self) -> None:
        if not self.delimiter:
            raise ConfigError("delimiter must not be empty")
        if not isinstance(self.delimiter_type, DelimiterType):
            raise ConfigError(f"Unknown delimiter type {self.delimiter_type!r}")

    @classmethod
    def from_config(cls, cfg) -> "DelimiterConfig":
        return cls(cfg.delimiter, cfg.delimiter_type, cfg.keep_format)


def _is_noise(line: str) -> bool:
    """Comment-only lines skipped when formatting is not kept."""
    if line.startswith("//") or line.startswith("--"):
        return True
    tokens = line.split(None, 1)
    return bool(tokens) and tokens[0].upper() == "REM"


class _Buffer:
    def __init__(self, keep_format: bool) -> None:
        self.keep_format = keep_format
        self.parts: list[str] = []

    def add(self, fragment: str, open_ended: bool) -> None:
        if not self.keep_format and open_ended:
            # `--` runs to end of line (and may carry a hint), so end it
            fragment += "\n"
        self.parts.append(fragment)

    def flush(self) -> str | None:
        sep = "\n" if self.keep_format else " "
        text = sep.join(self.parts)
        self.parts.clear()
        if not text.strip():
            return None
        return text if self.keep_format else text.strip()

    def __bool__(self) -> bool:
        return bool(self.parts)


def split_statements(lines: t.Iterable[str], config: DelimiterConfig = DelimiterConfig()) -> t.Iterator[str]:
    """
    Yield the statements found in *lines* one by one.

    A statement left open at end of input is still yielded; statements that
    are empty after trimming never are.
    """
    buf = _Buffer(config.keep_format)
    state: ScanState = CLEAN

    for raw in lines:
        line = raw.rstrip("\r\n")
        if not config.keep_format:
            line = line.strip()
            if state.overflow is Overflow.NONE and (not line or _is_noise(line)):
                continue

        if config.delimiter_type is DelimiterType.ROW:
            if scan_line(line, config.delimiter, delimiter_type=DelimiterType.ROW).found:
                stmt = buf.flush()
                if stmt is not None:
                    yield stmt
            else:
                buf.add(line, open_ended=True)
            continue

        rest = line
        while True:
            state = scan_line(rest, config.delimiter, state)
            if not state.found:
                buf.add(rest, open_ended=True)
                break

            buf.add(rest[: state.end - len(config.delimiter)], open_ended=False)
            stmt = buf.flush()
            if stmt is not None:
                yield stmt

            rest = rest[state.end:]
            state = CLEAN
            if not config.keep_format:
                rest = rest.strip()
                if not rest or _is_noise(rest):
                    break
            elif not rest.strip():
                break

    if buf:
        stmt = buf.flush()
        if stmt is not None:
            yield stmt


def split_text(text: str, config: DelimiterConfig = DelimiterConfig()) -> list[str]:
    return list(split_statements(text.splitlines(), config))
