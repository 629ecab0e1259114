from __future__ import annotations

import dataclasses as dc
import logging

from sqlbatch.config import OnError
from sqlbatch.driver import Driver
from sqlbatch.errors import StatementError
from sqlbatch.execution.render import ResultRenderer

log = logging.getLogger(__name__)


@dc.dataclass
class ExecutionCounters:
    successful: int = 0
    total: int = 0

    @property
    def failed(self) -> int:
        return self.total - self.successful

    def summary(self) -> str:
        return f"{self.successful} of {self.total} SQL statements executed successfully"


class StatementExecutor:
    """
    Runs single statements on one cursor, walking every result set and
    update count a statement produces, and keeps the counters.
    """

    def __init__(
        self,
        cursor,
        driver: Driver,
        counters: ExecutionCounters,
        *,
        on_error: OnError = OnError.ABORT,
        renderer: ResultRenderer | None = None,
    ) -> None:
        self.cursor = cursor
        self.driver = driver
        self.counters = counters
        self.on_error = on_error
        self.renderer = renderer

    def _next_result(self) -> bool:
        nextset = getattr(self.cursor, "nextset", None)
        if nextset is None:
            return False
        try:
            return bool(nextset())
        except (NotImplementedError, self.driver.NotSupportedError):
            return False

    def _log_warnings(self) -> None:
        fetch = getattr(self.cursor, "fetchwarnings", None)
        for warning in (fetch() if fetch else None) or ():
            log.debug("%s sql warning", warning)

    def _run(self, sql: str) -> int:
        self.cursor.execute(sql)
        update_total = 0
        while True:
            if self.cursor.description is None:
                if self.cursor.rowcount is not None and self.cursor.rowcount >= 0:
                    update_total += self.cursor.rowcount
            else:
                rows = self.cursor.fetchall()
                if self.renderer is not None:
                    log.debug("Processing new result set.")
                    self.renderer.render(self.cursor.description, rows)
            if not self._next_result():
                return update_total

    def execute(self, sql: str) -> None:
        if not sql.strip():
            return

        self.counters.total += 1
        log.debug("SQL: %s", sql)
        try:
            update_total = self._run(sql)
        except self.driver.Error as exc:
            log.error("Failed to execute: %s", sql)
            if self.on_error is OnError.ABORT:
                raise StatementError(sql, exc) from exc
            log.error("%s", exc)
            return

        log.debug("%d rows affected", update_total)
        if self.renderer is not None:
            self.renderer.rows_affected(update_total)
        self._log_warnings()
        self.counters.successful += 1
