"""
Column descriptor parser

Reads the staged ``<table>_schema.csv`` files produced by the export step.
Each file has a header row followed by one row per column of the table:

    column_name|udt_name|character_maximum_length
    id|int8|
    "display|name"|varchar|255
"""

import io
import logging
import re
from collections import namedtuple

import pandas as pd

from ..errors import ParseError

logger = logging.getLogger(__name__)

DELIMITER = '|'
QUOTE_CHAR = '"'

NAME_FIELD = 'column_name'
TYPE_FIELD = 'udt_name'
LENGTH_FIELD = 'character_maximum_length'
SCHEMA_FIELDS = (NAME_FIELD, TYPE_FIELD, LENGTH_FIELD)

# pandas reports tokenizer problems as "... in line N, saw M"
_LINE_PATTERN = re.compile(r'line (\d+)')

# max_length of None means unbounded (rendered as MAX)
ColumnDescriptor = namedtuple('ColumnDescriptor', ['name', 'source_type', 'max_length'])


def _find_unterminated_quote(text):
    """Return the 1-based line on which a never-closed quoted field starts, or None"""
    in_quotes = False
    start_line = None

    for line_no, line in enumerate(text.splitlines(), start=1):
        for char in line:
            if char != QUOTE_CHAR:
                continue
            in_quotes = not in_quotes
            if in_quotes:
                start_line = line_no

    return start_line if in_quotes else None


def _text(value):
    """Cell as a string; short rows come back from pandas as NaN"""
    if isinstance(value, str):
        return value
    return '' if pd.isna(value) else str(value)


def _infer_value(value):
    """Numeric-looking values become numbers, empty values become None, anything else stays a string"""
    value = _text(value).strip()
    if value == '':
        return None

    try:
        return int(value)
    except ValueError:
        pass

    try:
        number = float(value)
    except ValueError:
        return value

    return int(number) if number.is_integer() else number


def parse_column_descriptors(text, source=None):
    """
    Parse a schema file's contents into column descriptors

    Args:
        text (str): Pipe delimited schema rows, header first
        source (str, optional): File name used in error messages

    Returns:
        list: ColumnDescriptor tuples in file order

    Raises:
        ParseError: On malformed quoting, bad row shapes or missing fields
    """
    bad_line = _find_unterminated_quote(text)
    if bad_line is not None:
        raise ParseError("Unterminated quoted field", line=bad_line, source=source)

    if not text.strip():
        logger.warning(f"Schema {source or '<schema>'} is empty")
        return []

    try:
        frame = pd.read_csv(
            io.StringIO(text),
            sep=DELIMITER,
            quotechar=QUOTE_CHAR,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.ParserError as e:
        match = _LINE_PATTERN.search(str(e))
        line = int(match.group(1)) if match else None
        raise ParseError(f"Malformed schema row: {e}", line=line, source=source) from e

    missing = [field for field in SCHEMA_FIELDS if field not in frame.columns]
    if missing:
        raise ParseError(f"Missing header fields {missing}", line=1, source=source)

    columns = []
    rows = frame[list(SCHEMA_FIELDS)].itertuples(index=False, name=None)
    for row_no, (name, source_type, max_length) in enumerate(rows, start=1):
        name, source_type = _text(name), _text(source_type)
        if not name or not source_type:
            raise ParseError(f"Row {row_no} is missing {NAME_FIELD} or {TYPE_FIELD}", source=source)

        columns.append(ColumnDescriptor(name, source_type, _infer_value(max_length)))

    logger.debug(f"Parsed {len(columns)} columns from {source or '<schema>'}")
    return columns


def read_schema_file(path):
    """Read and parse a staged schema file from disk"""
    with open(path, 'r', encoding='utf-8', newline='') as f:
        text = f.read()
    return parse_column_descriptors(text, source=str(path))
