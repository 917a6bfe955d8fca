"""
DDL generator

Builds the Redshift CREATE TABLE / DROP TABLE statements for a staged table.
"""

import logging
import numbers

from ..errors import GenerationError
from .type_mapping import DEFAULT_TYPE_MAPPING

logger = logging.getLogger(__name__)

# length token for columns without a character_maximum_length
UNBOUNDED_LENGTH = 'MAX'


def quote_identifier(name):
    """Wrap an identifier in double quotes, doubling any embedded quotes"""
    escaped = str(name).replace('"', '""')
    return f'"{escaped}"'


def _length_token(max_length):
    return UNBOUNDED_LENGTH if max_length is None else max_length


def _check_length(column, target_type):
    """Reject lengths the warehouse would refuse (strict mode only)"""
    length = column.max_length
    if length is None:
        return

    if isinstance(length, bool) or not isinstance(length, numbers.Integral):
        raise GenerationError(
            f"Column {column.name!r} ({target_type}) has a non-integer length: {length!r}"
        )
    if length <= 0:
        raise GenerationError(
            f"Column {column.name!r} ({target_type}) has a non-positive length: {length}"
        )


def render_column(column, type_mapping=None, strict=False):
    """
    Render one column definition, e.g. '"code" CHAR(10)'

    Args:
        column (ColumnDescriptor): Column to render
        type_mapping (TypeMapping, optional): Type lookup, defaults to the standard mapping
        strict (bool): Raise GenerationError for lengths the warehouse would reject
    """
    type_mapping = type_mapping or DEFAULT_TYPE_MAPPING
    target_type = type_mapping.resolve_target_type(column.source_type)

    if not type_mapping.requires_length(target_type):
        rendered_type = target_type.upper()
    else:
        if strict:
            _check_length(column, target_type)
        rendered_type = f"{target_type.upper()}({_length_token(column.max_length)})"

    return f"{quote_identifier(column.name)} {rendered_type}"


def build_create_table(table_name, columns, type_mapping=None, strict=False):
    """
    Build a CREATE TABLE statement from column descriptors

    Columns keep their input order. An empty column list still produces a
    statement unless strict is set.

    Args:
        table_name (str): Target table name
        columns (list): ColumnDescriptor tuples
        type_mapping (TypeMapping, optional): Type lookup
        strict (bool): Fail fast on empty column lists and bad lengths

    Returns:
        str: CREATE TABLE SQL

    Raises:
        GenerationError: In strict mode only
    """
    columns = list(columns)
    if not columns:
        if strict:
            raise GenerationError(f"No columns to create table {table_name!r} with")
        logger.warning(f"Building CREATE TABLE for {table_name} with no columns")

    fields = [render_column(column, type_mapping, strict) for column in columns]
    return f"CREATE TABLE {quote_identifier(table_name)} ({', '.join(fields)})"


def build_drop_table(table_name):
    """DROP statement run before each restore so tables are recreated cleanly"""
    return f"DROP TABLE IF EXISTS {quote_identifier(table_name)}"
