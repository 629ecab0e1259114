from __future__ import annotations

import typing as t

_CSV_SPECIAL = (",", '"', "\r", "\n")


def escape_csv(value: str) -> str:
    """Quote *value* when it holds a comma, quote or line break."""
    if any(ch in value for ch in _CSV_SPECIAL):
        return '"' + value.replace('"', '""') + '"'
    return value


class ResultRenderer:
    """Writes result sets as delimited text to an output sink."""

    def __init__(self, out: t.TextIO, *, delimiter: str = ",", show_headers: bool = True) -> None:
        self.out = out
        self.delimiter = delimiter
        self.show_headers = show_headers

    def _field(self, value: t.Any) -> str:
        if value is None:
            return "null"
        text = str(value).strip()
        return escape_csv(text) if self.delimiter == "," else text

    def _line(self, values: t.Iterable[t.Any]) -> None:
        self.out.write(self.delimiter.join(self._field(v) for v in values) + "\n")

    def render(self, description: t.Sequence[t.Sequence[t.Any]], rows: t.Iterable[t.Sequence[t.Any]]) -> None:
        if self.show_headers:
            self._line(col[0] for col in description)
        for row in rows:
            self._line(row)
        self.out.write("\n")

    def rows_affected(self, count: int) -> None:
        self.out.write(f"{count} rows affected\n")
