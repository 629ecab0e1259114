from __future__ import annotations


class SqlBatchError(RuntimeError):
    """Base class for every user‑visible sqlbatch failure."""


class ConfigError(SqlBatchError):
    """Raised for any user‑visible configuration problem."""


class SourceError(SqlBatchError):
    """A script source cannot be read (missing file, bad fileset dir …)."""


class ConnectError(SqlBatchError):
    """The driver could not be loaded or refused to connect."""


class StatementError(SqlBatchError):
    """The database rejected a statement."""

    def __init__(self, sql: str, cause: BaseException) -> None:
        super().__init__(f"{cause} (while executing: {sql.strip()[:200]})")
        self.sql = sql
        self.cause = cause


class RunFailed(SqlBatchError):
    """The run as a whole failed; ``counters`` holds what was achieved."""

    def __init__(self, message: str, counters) -> None:
        super().__init__(message)
        self.counters = counters
