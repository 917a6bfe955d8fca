"""
Naming rules shared by the export and restore sides

Staged keys look like ``<app>-warehouse-pipeline/<table>.csv`` (data) and
``<app>-warehouse-pipeline/<table>_schema.csv`` (column metadata). The
warehouse table for either file is ``<app>_<table>_test``.
"""

import posixpath

STAGING_SUFFIX = '-warehouse-pipeline'
SCHEMA_SUFFIX = '_schema'
FILE_EXTENSION = '.csv'
TARGET_TABLE_SUFFIX = '_test'


def staging_prefix(app_prefix):
    """S3 prefix all staged files for an app live under"""
    return f"{app_prefix}{STAGING_SUFFIX}"


def staged_file_name(table_name, schema=False):
    """Local/staged file name for a table's data or schema file"""
    suffix = SCHEMA_SUFFIX if schema else ''
    return f"{table_name}{suffix}{FILE_EXTENSION}"


def staged_key(app_prefix, table_name, schema=False):
    """Full S3 key for a table's data or schema file"""
    return f"{staging_prefix(app_prefix)}/{staged_file_name(table_name, schema)}"


def _stem(staged_file):
    name = posixpath.basename(staged_file)
    if name.endswith(FILE_EXTENSION):
        name = name[:-len(FILE_EXTENSION)]
    return name


def classify_staged_files(staged_files):
    """
    Sort a listing of staged files into data and schema files

    A name ending in ``_schema`` is normally a schema file. It is the data
    file of a source table named ``<x>_schema`` instead when
    ``<x>_schema_schema.csv`` is staged beside it and ``<x>.csv`` is not.

    Args:
        staged_files (list): Keys or file names from one staging prefix

    Returns:
        dict: staged file -> True for schema files, False for data files
    """
    stems = {_stem(staged_file) for staged_file in staged_files}

    kinds = {}
    for staged_file in staged_files:
        stem = _stem(staged_file)
        schema = stem.endswith(SCHEMA_SUFFIX)
        if schema and stem + SCHEMA_SUFFIX in stems and stem[:-len(SCHEMA_SUFFIX)] not in stems:
            schema = False
        kinds[staged_file] = schema
    return kinds


def base_table_name(staged_file, schema=None):
    """
    Source table name for a staged file, e.g. 'prefix/orders_schema.csv' -> 'orders'

    ``schema`` says whether the file is a schema file; left as None it is
    guessed from the name.
    """
    stem = _stem(staged_file)
    if schema is None:
        schema = stem.endswith(SCHEMA_SUFFIX)
    if schema and stem.endswith(SCHEMA_SUFFIX):
        stem = stem[:-len(SCHEMA_SUFFIX)]
    return stem


def derive_target_table_name(app_prefix, staged_file, schema=None):
    """Warehouse table name for a staged data or schema file"""
    return f"{app_prefix}_{base_table_name(staged_file, schema)}{TARGET_TABLE_SUFFIX}"
