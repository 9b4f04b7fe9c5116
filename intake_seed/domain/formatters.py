"""Serializers for generated rows.

Converts a list of generated rows into downloadable text: JSON, CSV, XML,
SQL inserts, pipe-delimited text, and Python/JavaScript/PHP literals.
Tabular formats go through a pandas DataFrame so column order and quoting
are handled in one place.
"""

import csv
import json
import re
import xml.etree.ElementTree as ET
from typing import Optional, Sequence

import pandas as pd

from intake_seed.domain.ports import ValidationError

FORMAT_EXTENSIONS = {
    "json": "json",
    "csv": "csv",
    "xml": "xml",
    "sql": "sql",
    "python": "py",
    "javascript": "js",
    "php": "php",
    "pipe": "txt",
}

SUPPORTED_FORMATS = tuple(FORMAT_EXTENSIONS)

DEFAULT_SQL_TABLE = "table_name"

_SQL_IDENTIFIER = re.compile(r"^[A-Za-z][A-Za-z0-9_$#.]{0,127}$")
_XML_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def file_extension(fmt: str) -> str:
    """Download extension for a format ("txt" for unknown formats)."""
    return FORMAT_EXTENSIONS.get(fmt, "txt")


def _headers(rows: Sequence[dict], headers: Optional[Sequence[str]]) -> list[str]:
    if headers is not None:
        return list(headers)
    seen: dict[str, None] = {}
    for row in rows:
        for key in row:
            seen.setdefault(key, None)
    return list(seen)


def _frame(rows: Sequence[dict], headers: list[str]) -> pd.DataFrame:
    return pd.DataFrame(list(rows), columns=headers).fillna("")


def to_json(rows: Sequence[dict]) -> str:
    return json.dumps(list(rows), indent=2, ensure_ascii=False)


def to_csv(rows: Sequence[dict], headers: list[str]) -> str:
    """Header row bare, every value double-quoted."""
    body = _frame(rows, headers).to_csv(index=False, header=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    lines = [",".join(headers)]
    if body.strip():
        lines.append(body.rstrip("\n"))
    return "\n".join(lines)


def to_pipe(rows: Sequence[dict], headers: list[str]) -> str:
    text = _frame(rows, headers).to_csv(
        index=False,
        sep="|",
        quoting=csv.QUOTE_NONE,
        escapechar="\\",
        lineterminator="\n",
    )
    return text.rstrip("\n")


def _xml_name(key: str) -> str:
    name = _XML_INVALID_NAME_CHARS.sub("_", key) or "field"
    if not (name[0].isalpha() or name[0] == "_"):
        name = f"_{name}"
    return name


def to_xml(rows: Sequence[dict]) -> str:
    root = ET.Element("data")
    for row in rows:
        row_element = ET.SubElement(root, "row")
        for key, value in row.items():
            ET.SubElement(row_element, _xml_name(key)).text = "" if value is None else str(value)
    ET.indent(root, space="  ")
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'


def _sql_literal(value) -> str:
    if value is None:
        return "NULL"
    return "'" + str(value).replace("'", "''") + "'"


def to_sql(rows: Sequence[dict], headers: list[str], table_name: Optional[str] = None) -> str:
    """Render one INSERT statement per row.

    Raises:
        ValidationError: If the table name is not a plain SQL identifier
    """
    table = table_name or DEFAULT_SQL_TABLE
    if not _SQL_IDENTIFIER.match(table):
        raise ValidationError(f"Invalid table name for SQL output: {table}")
    for header in headers:
        if not _SQL_IDENTIFIER.match(header):
            raise ValidationError(f"Invalid column name for SQL output: {header}")

    columns = ", ".join(headers)
    statements = []
    for row in rows:
        values = ", ".join(_sql_literal(row.get(h)) for h in headers)
        statements.append(f"INSERT INTO {table} ({columns}) VALUES ({values});")
    return "\n".join(statements)


def _php_string(value) -> str:
    text = "" if value is None else str(value)
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"').replace("$", "\\$") + '"'


def to_php(rows: Sequence[dict]) -> str:
    entries = []
    for row in rows:
        pairs = ",\n".join(f"        {_php_string(k)} => {_php_string(v)}" for k, v in row.items())
        entries.append(f"    [\n{pairs}\n    ]")
    body = ",\n".join(entries)
    return f"<?php\n$data = [\n{body}\n];\n?>"


def format_rows(
    rows: Sequence[dict],
    fmt: str = "json",
    headers: Optional[Sequence[str]] = None,
    table_name: Optional[str] = None
) -> str:
    """Serialize generated rows.

    Parameters:
        rows: Generated rows (property name -> value)
        fmt: One of SUPPORTED_FORMATS; anything else falls back to JSON
        headers: Column order for tabular formats (defaults to first-seen key order)
        table_name: Target table for the SQL format

    Returns:
        Serialized text
    """
    fmt = (fmt or "json").lower()
    columns = _headers(rows, headers)

    if fmt == "csv":
        return to_csv(rows, columns)
    if fmt == "pipe":
        return to_pipe(rows, columns)
    if fmt == "xml":
        return to_xml(rows)
    if fmt == "sql":
        return to_sql(rows, columns, table_name)
    if fmt == "python":
        return f"data = {to_json(rows)}"
    if fmt == "javascript":
        return f"const data = {to_json(rows)};"
    if fmt == "php":
        return to_php(rows)
    return to_json(rows)
