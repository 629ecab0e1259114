import io

from sqlbatch.execution.render import ResultRenderer, escape_csv

DESCRIPTION = [("id", None, None, None, None, None, None), ("name ", None, None, None, None, None, None)]


def test_escape_csv():
    assert escape_csv("plain") == "plain"
    assert escape_csv("a,b") == '"a,b"'
    assert escape_csv('say "hi"') == '"say ""hi"""'
    assert escape_csv("two\nlines") == '"two\nlines"'


def test_comma_delimiter_quotes_fields():
    out = io.StringIO()
    ResultRenderer(out).render(DESCRIPTION, [(1, "Smith, J"), (2, 'O"Neil')])
    assert out.getvalue() == 'id,name\n1,"Smith, J"\n2,"O""Neil"\n\n'


def test_other_delimiters_are_not_escaped():
    out = io.StringIO()
    ResultRenderer(out, delimiter="|").render(DESCRIPTION, [(1, "a,b")])
    assert out.getvalue() == "id|name\n1|a,b\n\n"


def test_headers_can_be_hidden_and_nulls_rendered():
    out = io.StringIO()
    ResultRenderer(out, show_headers=False).render(DESCRIPTION, [(None, "  padded  ")])
    assert out.getvalue() == "null,padded\n\n"


def test_rows_affected_line():
    out = io.StringIO()
    ResultRenderer(out).rows_affected(3)
    assert out.getvalue() == "3 rows affected\n"
