"""
Script sources and the helpers that find and prepare them.
"""
from __future__ import annotations

import dataclasses as dc
import os
import pathlib
import re
import tempfile
import typing as t

from sqlbatch.constants import DEFAULT_INCLUDES
from sqlbatch.errors import SourceError

_VAR_RE = re.compile(r"\$\{([^}]+)\}")


@dc.dataclass(frozen=True)
class InlineText:
    text: str

    def lines(self) -> t.Iterator[str]:
        yield from self.text.splitlines()

    def read(self) -> str:
        return self.text

    def describe(self) -> str:
        return "commands"


@dc.dataclass(frozen=True)
class FilePath:
    path: pathlib.Path
    encoding: str | None = None
    # the file the user named; differs from `path` once filtered into a copy
    origin: pathlib.Path | None = None

    @property
    def source_path(self) -> pathlib.Path:
        return self.origin or self.path

    def lines(self) -> t.Iterator[str]:
        with self.path.open("r", encoding=self.encoding) as fh:
            yield from fh

    def read(self) -> str:
        return self.path.read_text(encoding=self.encoding)

    def describe(self) -> str:
        return f"file: {self.source_path.absolute()}"


ScriptSource = t.Union[InlineText, FilePath]


class Fileset:
    """Glob-based selection of script files below *basedir*."""

    def __init__(
        self,
        basedir: pathlib.Path,
        includes: t.Sequence[str] = DEFAULT_INCLUDES,
        excludes: t.Sequence[str] = (),
    ) -> None:
        self.basedir = pathlib.Path(basedir)
        self.includes = list(includes) or list(DEFAULT_INCLUDES)
        self.excludes = list(excludes)

    def scan(self) -> list[str]:
        """Return the sorted relative POSIX paths of every matching file."""
        if not self.basedir.is_dir():
            raise SourceError(f"Fileset directory {self.basedir} not found.")

        included = {p for pat in self.includes for p in self.basedir.glob(pat) if p.is_file()}
        excluded = {p for pat in self.excludes for p in self.basedir.glob(pat)}
        # a matched directory excludes everything below it
        kept = (p for p in included if p not in excluded and excluded.isdisjoint(p.parents))
        return sorted(p.relative_to(self.basedir).as_posix() for p in kept)


def substitute(text: str, properties: t.Mapping[str, str]) -> str:
    """Replace ``${name}`` from *properties*, then the environment."""

    def _value(m: re.Match) -> str:
        name = m.group(1)
        if name in properties:
            return properties[name]
        return os.environ.get(name, m.group(0))

    return _VAR_RE.sub(_value, text)


def filter_copy(
    src: pathlib.Path,
    workdir: pathlib.Path,
    *,
    properties: t.Mapping[str, str],
    encoding: str | None = None,
) -> pathlib.Path:
    """
    Copy *src* into *workdir* with ``${...}`` references substituted and
    return the path of the copy.
    """
    try:
        text = src.read_text(encoding=encoding)
    except FileNotFoundError as exc:
        raise SourceError(f"{src} not found.") from exc

    fd, target = tempfile.mkstemp(prefix=f"{src.stem}-", suffix=src.suffix, dir=workdir)
    with os.fdopen(fd, "w", encoding=encoding) as fh:
        fh.write(substitute(text, properties))
    return pathlib.Path(target)
