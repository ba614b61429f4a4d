import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from services.capacity_csv import CsvTable, parse_csv_text, split_csv_line


def test_quoted_field_keeps_embedded_comma():
    table = parse_csv_text('A,B,C\nCoal,"1,234.5",Nuclear\n')

    assert table.header == ["A", "B", "C"]
    assert table.rows == [["Coal", "1,234.5", "Nuclear"]]


def test_doubled_quote_is_literal_quote():
    assert split_csv_line('"say ""hi""",x') == ['say "hi"', "x"]


def test_blank_lines_and_crlf_are_skipped():
    table = parse_csv_text("A,B\r\n\r\n1,2\r\n   \n3,4\n\n")

    assert table.header == ["A", "B"]
    assert table.rows == [["1", "2"], ["3", "4"]]


def test_fields_are_trimmed_and_trailing_comma_yields_empty_field():
    assert split_csv_line(" a ,  b  ,") == ["a", "b", ""]


def test_empty_input_is_empty_table():
    for text in ("", "\n \n", None):
        table = parse_csv_text(text)
        assert table.header == []
        assert table.rows == []
        assert table.is_empty


def test_header_only_counts_as_empty():
    assert parse_csv_text("Coal,Solar\n").is_empty


def test_ragged_rows_are_kept_and_cell_guards_missing_index():
    table = parse_csv_text("A,B,C\n1\n1,2,3,4")

    assert table.rows == [["1"], ["1", "2", "3", "4"]]
    assert CsvTable.cell(table.rows[0], 2) is None
    assert CsvTable.cell(table.rows[0], None) is None
    assert CsvTable.cell(table.rows[1], 3) == "4"


def test_column_index_case_rules():
    table = CsvTable(header=[" month ", "Coal", "Oil & Gas"], rows=[["01/2024", "1", "2"]])

    assert table.column_index("Month", case_sensitive=False) == 0
    assert table.column_index("Month") is None
    assert table.column_index("coal") is None
    assert table.column_index("Oil & Gas") == 2
