from __future__ import annotations

from services.csv_rows import CsvRows, locate_header


def test_quoted_delimiters_and_newlines_survive():
    text = 'Name,Note\n"Smith, J","line1\nline2"\n\n\n'
    rows = list(CsvRows(text))
    assert rows == [{"Name": "Smith, J", "Note": "line1\nline2"}]


def test_trailing_blank_lines_are_not_rows():
    rows = list(CsvRows("A,B\n1,2\n\n\n"))
    assert len(rows) == 1


def test_header_order_does_not_matter():
    a = list(CsvRows("First Name,Last Name\nJane,Doe\n"))
    b = list(CsvRows("Last Name,First Name\nDoe,Jane\n"))
    assert a[0]["First Name"] == b[0]["First Name"] == "Jane"
    assert a[0]["Last Name"] == b[0]["Last Name"] == "Doe"


def test_short_row_yields_missing_values():
    rows = list(CsvRows("A,B,C\n1,2\n"))
    assert rows[0]["A"] == "1"
    assert rows[0].get("C") in (None, "")


def test_unbalanced_quote_drops_only_that_line():
    text = 'Name,Title\n"Bad,row\nGood,Engineer\n'
    rows = CsvRows(text)
    out = list(rows)
    assert out == [{"Name": "Good", "Title": "Engineer"}]
    assert len(rows.errors) == 1
    assert rows.errors[0].reason == "unbalanced quotes"
    assert rows.errors[0].line == 2


def test_rows_are_restartable():
    rows = CsvRows("A\n1\n2\n")
    assert list(rows) == list(rows) == [{"A": "1"}, {"A": "2"}]


def test_skip_lines_and_bom():
    text = "\ufeffNotes:\nignored line\nA,B\n1,2\n"
    idx = locate_header(text, "A,")
    assert idx == 2
    assert list(CsvRows(text, skip_lines=idx)) == [{"A": "1", "B": "2"}]


def test_empty_text_yields_nothing():
    assert list(CsvRows("")) == []
    assert list(CsvRows("\n\n")) == []


def test_good_rows_between_two_stray_quotes_survive():
    text = (
        "Name,Company,Position\n"
        'Ann,"Acme,Engineer\n'
        "Bob,Globex,Manager\n"
        "Cat,Initech,Analyst\n"
        'Dan,Umbrella,"Eng\n'
        "Eve,Hooli,Designer\n"
    )
    rows = CsvRows(text)
    assert [r["Name"] for r in rows] == ["Bob", "Cat", "Eve"]
    assert [(e.line, e.reason) for e in rows.errors] == [(2, "unbalanced quotes"), (5, "unbalanced quotes")]


def test_quote_inside_unquoted_field_is_literal():
    text = 'Name,Position\nAnn,Sr. 6" Engineer\nBob,Manager\n'
    rows = CsvRows(text)
    assert list(rows) == [
        {"Name": "Ann", "Position": 'Sr. 6" Engineer'},
        {"Name": "Bob", "Position": "Manager"},
    ]
    assert rows.errors == []


def test_quoted_field_spanning_lines_still_joins_after_a_bad_line():
    text = 'Name,Note\n"Broken,x\nAnn,"first\nsecond"\nBob,plain\n'
    rows = CsvRows(text)
    assert list(rows) == [{"Name": "Ann", "Note": "first\nsecond"}, {"Name": "Bob", "Note": "plain"}]
    assert [e.line for e in rows.errors] == [2]


def test_only_newlines_split_records():
    text = 'First Name,Last Name,Summary,Note\nAnn,Lee,"a\u2028b",c\x0cd\r\nBob,Ray,x,y\n'
    rows = list(CsvRows(text))
    assert len(rows) == 2
    assert rows[0]["Summary"] == "a\u2028b"
    assert rows[0]["Note"] == "c\x0cd"
    assert locate_header("Notes:\u2028more\nFirst Name,Last Name\n", "First Name") == 1


def test_text_after_closing_quote_drops_that_line_only():
    rows = CsvRows('Name,Title\n"Ann"x,Engineer\nBob,Manager\n')
    assert list(rows) == [{"Name": "Bob", "Title": "Manager"}]
    assert [e.line for e in rows.errors] == [2]
