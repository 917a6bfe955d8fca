"""
Schema module

Type mapping, schema file parsing and SQL generation for the warehouse.
"""

from .type_mapping import TypeMapping, DEFAULT_TYPE_MAPPING
from .parser import ColumnDescriptor, parse_column_descriptors, read_schema_file
from .ddl import build_create_table, build_drop_table
from .copy_command import (
    build_load_command,
    build_export_data_sql,
    build_export_schema_sql,
    staged_object_url,
)
from .naming import derive_target_table_name, staged_key, staging_prefix
