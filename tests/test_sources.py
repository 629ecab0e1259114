import pytest

from sqlbatch.errors import SourceError
from sqlbatch.sources import FilePath, Fileset, InlineText, filter_copy, substitute


def _touch(path, text="SELECT 1;"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def test_fileset_scan_sorted_relative_paths(tmp_path):
    _touch(tmp_path / "b.sql")
    _touch(tmp_path / "a.sql")
    _touch(tmp_path / "nested" / "c.sql")
    _touch(tmp_path / "notes.txt")
    assert Fileset(tmp_path).scan() == ["a.sql", "b.sql", "nested/c.sql"]


def test_fileset_includes_and_excludes(tmp_path):
    _touch(tmp_path / "a.sql")
    _touch(tmp_path / "old" / "x.sql")
    _touch(tmp_path / "seed.data")
    fs = Fileset(tmp_path, includes=["**/*.sql", "*.data"], excludes=["old/*.sql"])
    assert fs.scan() == ["a.sql", "seed.data"]


def test_fileset_directory_exclude_drops_nested_files(tmp_path):
    _touch(tmp_path / "a.sql")
    _touch(tmp_path / "legacy" / "old.sql")
    _touch(tmp_path / "legacy" / "deep" / "older.sql")
    assert Fileset(tmp_path, excludes=["legacy/**"]).scan() == ["a.sql"]
    assert Fileset(tmp_path, excludes=["legacy"]).scan() == ["a.sql"]


def test_fileset_missing_basedir(tmp_path):
    with pytest.raises(SourceError):
        Fileset(tmp_path / "missing").scan()


def test_substitute_properties_then_environment(monkeypatch):
    monkeypatch.setenv("SQLBATCH_SCHEMA", "app")
    text = "INSERT INTO ${SQLBATCH_SCHEMA}.t VALUES (${value}, '${unknown}', $$body$$)"
    assert substitute(text, {"value": "42"}) == "INSERT INTO app.t VALUES (42, '${unknown}', $$body$$)"


def test_filter_copy(tmp_path):
    src = _touch(tmp_path / "seed.sql", "INSERT INTO t VALUES (${n});")
    work = tmp_path / "work"
    work.mkdir()
    copy = filter_copy(src, work, properties={"n": "7"})
    assert copy.parent == work
    assert copy.suffix == ".sql"
    assert copy.read_text() == "INSERT INTO t VALUES (7);"
    assert src.read_text() == "INSERT INTO t VALUES (${n});"


def test_filter_copy_missing_source(tmp_path):
    with pytest.raises(SourceError):
        filter_copy(tmp_path / "nope.sql", tmp_path, properties={})


def test_file_source_honours_encoding(tmp_path):
    path = tmp_path / "latin.sql"
    path.write_bytes("SELECT 'café';\n".encode("latin-1"))
    assert list(FilePath(path, "latin-1").lines()) == ["SELECT 'café';\n"]


def test_inline_text_lines():
    assert list(InlineText("a;\nb;").lines()) == ["a;", "b;"]
    assert InlineText("x").describe() == "commands"
