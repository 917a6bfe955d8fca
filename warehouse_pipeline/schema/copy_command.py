"""
COPY command generators

The warehouse side loads staged files with ``COPY ... FROM 's3://...'``; the
source side unloads tables and their column metadata with
``COPY ... TO STDOUT``. Both use the same pipe delimited, header-bearing
CSV format.
"""

from .ddl import quote_identifier
from .parser import DELIMITER, QUOTE_CHAR, SCHEMA_FIELDS

DEFAULT_REGION = 'us-east-1'
DEFAULT_SOURCE_SCHEMA = 'public'


def quote_literal(value):
    """Single-quote a SQL string literal"""
    escaped = str(value).replace("'", "''")
    return f"'{escaped}'"


def staged_object_url(bucket, key):
    """s3:// locator for a staged key"""
    return f"s3://{bucket}/{key}"


def build_load_command(table_name, staged_object_locator, credentials_ref, region=DEFAULT_REGION):
    """
    Build the Redshift COPY command for a staged data file

    The locator is not checked for existence here.

    Args:
        table_name (str): Target table (see naming.derive_target_table_name)
        staged_object_locator (str): s3:// url of the staged CSV
        credentials_ref (str): IAM role ARN Redshift assumes to read the bucket
        region (str): Bucket region

    Returns:
        str: COPY SQL
    """
    return (
        f"COPY {quote_identifier(table_name)} "
        f"FROM {quote_literal(staged_object_locator)} "
        f"IAM_ROLE {quote_literal(credentials_ref)} "
        f"CSV DELIMITER {quote_literal(DELIMITER)} QUOTE {quote_literal(QUOTE_CHAR)} "
        f"REGION {quote_literal(region)} "
        f"DATEFORMAT 'auto' "
        f"IGNOREHEADER 1"
    )


def _unload_options():
    return f"TO STDOUT DELIMITER {quote_literal(DELIMITER)} CSV HEADER"


def build_export_data_sql(table_name, schema=DEFAULT_SOURCE_SCHEMA):
    """Source-side COPY that streams a whole table as staged CSV"""
    return f"COPY {quote_identifier(schema)}.{quote_identifier(table_name)} {_unload_options()}"


def build_export_schema_sql(table_name, schema=DEFAULT_SOURCE_SCHEMA):
    """Source-side COPY that streams a table's column metadata as staged CSV"""
    fields = ', '.join(SCHEMA_FIELDS)
    query = (
        f"SELECT {fields} FROM information_schema.columns "
        f"WHERE table_schema = {quote_literal(schema)} "
        f"AND table_name = {quote_literal(table_name)} "
        f"ORDER BY ordinal_position"
    )
    return f"COPY ({query}) {_unload_options()}"
