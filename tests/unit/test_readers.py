"""Unit tests for delimited-text and workbook readers."""
from io import BytesIO

import pandas as pd
import pytest

from hofmetrics.exceptions import SourceUnreadableError
from hofmetrics.ingestion.readers import (
    detect_delimiter,
    detect_source_format,
    read_delimited,
    read_tables,
    read_workbook,
)
from hofmetrics.models import SourceFormat


def _workbook_bytes(sheets):
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for name, df in sheets.items():
            df.to_excel(writer, sheet_name=name, index=False)
    return buffer.getvalue()


@pytest.mark.parametrize(
    "line, expected",
    [
        ("a,b,c", ","),
        ("a;b;c", ";"),
        ("a\tb\tc", "\t"),
        ("a;b,c", ";"),
        ("a\tb;c", "\t"),
        ("a;b;c,d,e,f", ","),
        ("single", ","),
    ],
)
def test_detect_delimiter(line, expected):
    assert detect_delimiter(line + "\n1,2,3") == expected


def test_detect_delimiter_uses_first_non_blank_line():
    assert detect_delimiter("\n   \nx;y;z\na,b,c,d") == ";"


def test_read_delimited_quotes_and_line_endings():
    raw = 'Fecha;Empresa;Nota\r\n2025-01-01;"Marriott; BA";"dijo ""hola"""\r\n\r\n;;\r\n2025-01-02;Maitei;"dos\nlineas"\r\n'
    table = read_delimited(raw.encode("utf-8"), "ops_2025.csv")
    assert table.name == "ops_2025"
    assert table.rows == [
        ["Fecha", "Empresa", "Nota"],
        ["2025-01-01", "Marriott; BA", 'dijo "hola"'],
        ["2025-01-02", "Maitei", "dos\nlineas"],
    ]


def test_read_delimited_strips_bom_and_falls_back_to_cp1252():
    table = read_delimited("\ufeffPaís,Cantidad,Fecha\nEspaña,3,2025-01-01\n".encode("utf-8"))
    assert table.rows[0][0] == "País"
    legacy = read_delimited("País,Cantidad,Fecha\nEspaña,3,2025-01-01\n".encode("cp1252"))
    assert legacy.rows[1][0] == "España"


def test_detect_source_format():
    assert detect_source_format("data/ops.CSV") is SourceFormat.DELIMITED
    assert detect_source_format("data/ops.txt") is SourceFormat.DELIMITED
    assert detect_source_format("data/membresias.xlsx") is SourceFormat.WORKBOOK
    with pytest.raises(SourceUnreadableError):
        detect_source_format("data/ops.pdf")


def test_read_workbook_all_sheets():
    data = _workbook_bytes(
        {
            "2024": pd.DataFrame({"Empresa": ["Marriott"], "Bonvoy": ["Gold"], "Cantidad": [5]}),
            "2025": pd.DataFrame({"Empresa": ["Maitei", None], "Bonvoy": ["Member", None], "Cantidad": [7, None]}),
        }
    )
    tables, names = read_workbook(data, "membership.xlsx")
    assert names == ["2024", "2025"]
    assert [t.name for t in tables] == ["2024", "2025"]
    assert tables[0].rows[0] == ["Empresa", "Bonvoy", "Cantidad"]
    assert tables[0].rows[1][2] == 5
    # blank row dropped
    assert len(tables[1].rows) == 2


def test_read_workbook_selected_sheet():
    data = _workbook_bytes({"A": pd.DataFrame({"x": [1]}), "B": pd.DataFrame({"y": [2]})})
    tables, names = read_tables(data, SourceFormat.WORKBOOK, "book.xlsx", sheet="B")
    assert names == ["A", "B"]
    assert [t.name for t in tables] == ["B"]

    missing, _ = read_tables(data, SourceFormat.WORKBOOK, "book.xlsx", sheet="Z")
    assert missing == []


def test_read_workbook_blank_cells_are_empty_strings():
    data = _workbook_bytes({"S": pd.DataFrame({"a": [1, None], "b": [None, "x"]})})
    tables, _ = read_workbook(data)
    assert tables[0].rows[1] == [1, ""]
    assert tables[0].rows[2] == ["", "x"]


def test_corrupt_workbook_is_unreadable():
    with pytest.raises(SourceUnreadableError) as info:
        read_workbook(b"not a zip archive", "broken.xlsx")
    assert info.value.path == "broken.xlsx"
