import pytest

from sqlbatch.config import DelimiterType
from sqlbatch.errors import ConfigError
from sqlbatch.parser import DelimiterConfig, split_statements, split_text

KEEP = DelimiterConfig(keep_format=True)


def test_simple_statements():
    assert split_text("SELECT 1;\nSELECT 2;") == ["SELECT 1", "SELECT 2"]


def test_lines_are_joined_with_space_and_newline():
    assert split_text("SELECT *\nFROM t;") == ["SELECT *\n FROM t"]


def test_delimiter_inside_literal_does_not_split():
    assert split_text("INSERT INTO t VALUES ('a;b');") == ["INSERT INTO t VALUES ('a;b')"]


def test_missing_trailing_delimiter_still_yields_statement():
    assert split_text("SELECT 1;\nSELECT 2") == ["SELECT 1", "SELECT 2"]


def test_several_statements_on_one_line():
    assert split_text("SELECT 1; SELECT 2; SELECT 3") == ["SELECT 1", "SELECT 2", "SELECT 3"]


@pytest.mark.parametrize(
    "script, expected",
    [
        ("a;\nb;\nc;", 3),
        ("a; b;\n\nc;", 3),
        ("-- x;\na;\n/* y; */ b;", 2),
        ("'q;';\n\"r;\";", 2),
    ],
)
def test_statement_count_matches_unquoted_delimiters(script, expected):
    assert len(split_text(script)) == expected


def test_comment_and_rem_lines_are_skipped():
    script = "-- header\n// note\nrem lower\nREM upper\n  REM indented\nSELECT 1;"
    assert split_text(script) == ["SELECT 1"]


def test_rem_must_be_a_whole_token():
    assert split_text("REMOVE_ME;") == ["REMOVE_ME"]


def test_trailing_comment_is_kept_in_statement():
    assert split_text("SELECT a -- pick;\nFROM t;") == ["SELECT a -- pick;\n FROM t"]


def test_comment_after_delimiter_is_dropped():
    assert split_text("SELECT 1; -- done\nSELECT 2;") == ["SELECT 1", "SELECT 2"]


def test_keep_format_preserves_lines_and_comments():
    script = "-- hint\nSELECT 1\n  FROM t;\n"
    assert split_text(script, KEEP) == ["-- hint\nSELECT 1\n  FROM t"]


def test_keep_format_does_not_filter_rem():
    assert split_text("REM x\nSELECT 1;", KEEP) == ["REM x\nSELECT 1"]


def test_multi_line_literal_is_one_statement():
    stmts = split_text("INSERT INTO t VALUES ('line1\nline2;still');\nSELECT 1;")
    assert stmts == ["INSERT INTO t VALUES ('line1\n line2;still')", "SELECT 1"]


def test_comment_marker_inside_open_literal_is_not_skipped():
    stmts = split_text("INSERT INTO t VALUES ('a\n-- not a comment\nb');")
    assert len(stmts) == 1
    assert "-- not a comment" in stmts[0]


def test_block_comment_across_lines():
    assert split_text("/* a;\n b; */ SELECT 1;") == ["/* a;\n b; */ SELECT 1"]


def test_whitespace_only_statements_are_discarded():
    assert split_text("\n  \n;\n;;\n") == []


@pytest.mark.parametrize("n", [1, 2, 5])
def test_row_mode_splits_on_go_lines(n):
    body = "CREATE PROCEDURE p AS\nSELECT 1; SELECT 'GO';\nGO\n"
    cfg = DelimiterConfig("GO", DelimiterType.ROW)
    assert len(split_text(body * n, cfg)) == n


def test_row_mode_statement_text():
    cfg = DelimiterConfig("GO", DelimiterType.ROW)
    script = "CREATE PROC p AS\nSELECT 1; SELECT 2;\nGO\nSELECT 3\nGO"
    assert split_text(script, cfg) == ["CREATE PROC p AS\n SELECT 1; SELECT 2;", "SELECT 3"]


def test_row_mode_keep_format():
    cfg = DelimiterConfig("GO", DelimiterType.ROW, keep_format=True)
    assert split_text("SELECT 1\n  FROM t\n  GO  \n", cfg) == ["SELECT 1\n  FROM t"]


def test_split_statements_is_lazy():
    consumed = []

    def lines():
        for line in ["SELECT 1;", "SELECT 2;"]:
            consumed.append(line)
            yield line

    it = split_statements(lines())
    assert next(it) == "SELECT 1"
    assert consumed == ["SELECT 1;"]


def test_source_newlines_are_stripped():
    assert split_text("SELECT 1\r\n;\r\n") == ["SELECT 1"]
    assert list(split_statements(["SELECT 1;\r\n"], KEEP)) == ["SELECT 1"]


def test_empty_delimiter_is_rejected():
    with pytest.raises(ConfigError):
        DelimiterConfig("")
