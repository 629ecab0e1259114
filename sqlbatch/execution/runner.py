from __future__ import annotations

import contextlib
import logging
import pathlib
import sys
import tempfile
import typing as t

from sqlbatch.config import DelimiterType, ExecConfig, OnError
from sqlbatch.constants import WORKDIR_PREFIX
from sqlbatch.credentials import CredentialResolver, Credentials
from sqlbatch.driver import Driver
from sqlbatch.errors import ConnectError, RunFailed, StatementError
from sqlbatch.execution.executor import ExecutionCounters, StatementExecutor
from sqlbatch.execution.render import ResultRenderer
from sqlbatch.parser import DelimiterConfig, split_statements
from sqlbatch.sources import ScriptSource
from sqlbatch.transaction import Transaction, collect_transactions, order_transactions

log = logging.getLogger(__name__)


class ExecutionRunner:
    """
    Replays the configured transactions against every endpoint in turn.

    One run owns one set of counters and one output sink; each endpoint pass
    owns one connection and one cursor shared by all of its transactions.
    """

    def __init__(
        self,
        cfg: ExecConfig,
        *,
        credentials: CredentialResolver | None = None,
        driver: Driver | None = None,
    ) -> None:
        self.cfg = cfg
        self.credentials = credentials or CredentialResolver.from_file(cfg.settings_file)
        self.delimiters = DelimiterConfig.from_config(cfg)
        self._driver = driver

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    @contextlib.contextmanager
    def _output(self, out: t.TextIO | None) -> t.Iterator[t.TextIO]:
        if self.cfg.output_file is None:
            yield out or sys.stdout
            return
        log.debug("Opening output file %s", self.cfg.output_file)
        mode = "a" if self.cfg.append else "w"
        with self.cfg.output_file.open(mode, encoding=self.cfg.encoding) as fh:
            yield fh

    def statements(self, source: ScriptSource) -> t.Iterator[str]:
        if self.cfg.enable_block_mode:
            yield source.read()
            return
        with contextlib.closing(source.lines()) as lines:
            yield from split_statements(lines, self.delimiters)

    def transactions(self, workdir: pathlib.Path) -> list[Transaction]:
        return order_transactions(collect_transactions(self.cfg, workdir), self.cfg.order_file)

    # ------------------------------------------------------------------ #
    # Run
    # ------------------------------------------------------------------ #
    def run(self, out: t.TextIO | None = None, *, dry_run: bool = False) -> ExecutionCounters:
        counters = ExecutionCounters()
        if self.cfg.skip:
            log.info("Skip sql execution")
            return counters

        if dry_run:
            with tempfile.TemporaryDirectory(prefix=WORKDIR_PREFIX) as workdir:
                transactions = self.transactions(pathlib.Path(workdir))
                with self._output(out) as sink:
                    self._print(transactions, sink)
            return counters

        urls = self.cfg.endpoints()
        if self.cfg.urls:
            for url in urls:
                log.info("Including url %s for execution", url)
        # every endpoint's credentials must resolve before the first one runs
        credentials = {url: self.credentials.resolve(self.cfg, url) for url in urls}

        with tempfile.TemporaryDirectory(prefix=WORKDIR_PREFIX) as workdir:
            transactions = self.transactions(pathlib.Path(workdir))
            driver = self._driver or Driver(self.cfg.driver)
            with self._output(out) as sink:
                for url in urls:
                    try:
                        self._run_endpoint(driver, url, credentials[url], transactions, sink, counters)
                    except ConnectError as exc:
                        if not self.cfg.skip_on_connection_error:
                            raise
                        log.warning("%s – skipping remaining endpoints", exc)
                        break

        if self.cfg.on_error is OnError.ABORT_AFTER and counters.failed:
            raise RunFailed("Some SQL statements failed to execute", counters)
        return counters

    def _run_endpoint(
        self,
        driver: Driver,
        url: str,
        creds: Credentials,
        transactions: list[Transaction],
        sink: t.TextIO,
        counters: ExecutionCounters,
    ) -> None:
        renderer = (
            ResultRenderer(sink, delimiter=self.cfg.output_delimiter, show_headers=self.cfg.show_headers)
            if self.cfg.print_result_set
            else None
        )

        with driver.connection(
            url,
            user=creds.username,
            password=creds.password,
            properties=self.cfg.driver_properties,
            autocommit=self.cfg.autocommit,
        ) as conn:
            cursor = conn.cursor()
            executor = StatementExecutor(
                cursor, driver, counters, on_error=self.cfg.on_error, renderer=renderer
            )
            try:
                for tx in transactions:
                    self._run_transaction(tx, executor)
                    if not self.cfg.autocommit:
                        log.debug("Committing transaction")
                        conn.commit()
            except (StatementError, driver.Error) as exc:
                if not self.cfg.autocommit:
                    with contextlib.suppress(driver.Error):
                        conn.rollback()
                raise RunFailed(str(exc), counters) from exc
            finally:
                with contextlib.suppress(driver.Error):
                    cursor.close()
                log.info(counters.summary())

    def _run_transaction(self, tx: Transaction, executor: StatementExecutor) -> None:
        for source in tx.sources():
            log.info("Executing %s", source.describe())
            for stmt in self.statements(source):
                executor.execute(stmt)

    def _print(self, transactions: list[Transaction], sink: t.TextIO) -> None:
        if self.cfg.delimiter_type is DelimiterType.ROW:
            terminator = "\n" + self.cfg.delimiter
        else:
            terminator = self.cfg.delimiter
        for tx in transactions:
            for source in tx.sources():
                sink.write(f"-- {source.describe()}\n")
                for stmt in self.statements(source):
                    sink.write(f"{stmt}{terminator}\n")
