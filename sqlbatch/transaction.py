from __future__ import annotations

import logging
import pathlib
import typing as t

from sqlbatch.config import ExecConfig, OrderFile
from sqlbatch.errors import SourceError
from sqlbatch.sources import FilePath, Fileset, InlineText, ScriptSource, filter_copy

log = logging.getLogger(__name__)


class Transaction:
    """
    One unit of work: inline text and/or a single file, executed on one
    connection and committed once at the end.
    """

    def __init__(self) -> None:
        self.text: InlineText | None = None
        self.src: FilePath | None = None

    def add_text(self, sql: str) -> "Transaction":
        self.text = InlineText((self.text.text if self.text else "") + sql)
        return self

    def set_src(self, src: FilePath) -> "Transaction":
        self.src = src
        return self

    def sources(self) -> t.Iterator[ScriptSource]:
        if self.text is not None and self.text.text:
            yield self.text
        if self.src is not None:
            yield self.src

    def sort_key(self) -> tuple[int, str]:
        # file-less transactions sort after every transaction with a file
        if self.src is None:
            return (1, "")
        return (0, str(self.src.source_path))

    def __repr__(self) -> str:
        src = self.src.source_path if self.src else None
        return f"Transaction(src={src!s}, text={bool(self.text and self.text.text)})"


def order_transactions(transactions: list[Transaction], order: OrderFile | None) -> list[Transaction]:
    if order is OrderFile.ASCENDING:
        return sorted(transactions, key=Transaction.sort_key)
    if order is OrderFile.DESCENDING:
        return sorted(transactions, key=Transaction.sort_key, reverse=True)
    return list(transactions)


def _file_source(cfg: ExecConfig, path: pathlib.Path, workdir: pathlib.Path) -> FilePath:
    if not cfg.enable_filtering:
        return FilePath(path, cfg.encoding)
    copy = filter_copy(path, workdir, properties=cfg.filter_properties, encoding=cfg.encoding)
    log.debug("Filtered %s into %s", path, copy)
    return FilePath(copy, cfg.encoding, origin=path)


def collect_transactions(cfg: ExecConfig, workdir: pathlib.Path) -> list[Transaction]:
    """
    Build the transaction list: inline commands first (always present, even
    when empty), then the explicit files, then the fileset matches.
    """
    transactions = [Transaction().add_text(cfg.sql_command.strip())]

    for path in cfg.src_files:
        if not path.exists():
            raise SourceError(f"{path} not found.")
        transactions.append(Transaction().set_src(_file_source(cfg, path, workdir)))

    if cfg.fileset_dir is not None:
        fileset = Fileset(cfg.fileset_dir, cfg.fileset_includes, cfg.fileset_excludes)
        for rel in fileset.scan():
            transactions.append(Transaction().set_src(FilePath(cfg.fileset_dir / rel, cfg.encoding)))

    return transactions
