"""
Statement splitting: :mod:`scanner` finds delimiters line by line and
:mod:`accumulator` assembles lines into statements.
"""
from sqlbatch.parser.accumulator import DelimiterConfig, split_statements, split_text
from sqlbatch.parser.scanner import CLEAN, Overflow, ScanState, scan_line

__all__ = [
    "CLEAN",
    "DelimiterConfig",
    "Overflow",
    "ScanState",
    "scan_line",
    "split_statements",
    "split_text",
]
