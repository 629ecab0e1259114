from sqlbatch.execution.executor import ExecutionCounters, StatementExecutor
from sqlbatch.execution.render import ResultRenderer, escape_csv
from sqlbatch.execution.runner import ExecutionRunner

__all__ = [
    "ExecutionCounters",
    "ExecutionRunner",
    "ResultRenderer",
    "StatementExecutor",
    "escape_csv",
]
