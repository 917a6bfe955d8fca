"""
Pipeline steps

Export: Dump -> Upload
Restore: Download -> DropTable -> CreateTable -> LoadData -> DeleteStaged
"""

import logging

from ..schema.copy_command import (
    DEFAULT_REGION,
    DEFAULT_SOURCE_SCHEMA,
    build_export_data_sql,
    build_export_schema_sql,
    build_load_command,
    staged_object_url,
)
from ..schema.ddl import build_create_table, build_drop_table
from ..schema.naming import derive_target_table_name
from ..schema.parser import read_schema_file
from .base import PipelineComponent

logger = logging.getLogger(__name__)

# Export

class DumpTableStep(PipelineComponent):
    """Unloads a source table to its local data file, then its column metadata to its schema file"""

    def __init__(self, source_db, schema=DEFAULT_SOURCE_SCHEMA):
        super().__init__("Dump")
        self.source_db = source_db
        self.schema = schema

    def process_table(self, unit):
        self.source_db.copy_to_file(build_export_data_sql(unit.table_name, self.schema), unit.data_file)
        self.source_db.copy_to_file(build_export_schema_sql(unit.table_name, self.schema), unit.schema_file)
        return {'success': True, 'message': f"Dumped {unit.table_name} to {unit.data_file} and {unit.schema_file}"}


class UploadStep(PipelineComponent):
    """Stages a table's data and schema files in S3"""

    def __init__(self, s3_client):
        super().__init__("Upload")
        self.s3_client = s3_client

    def process_table(self, unit):
        self.s3_client.upload_file(unit.data_file, unit.data_key)
        self.s3_client.upload_file(unit.schema_file, unit.schema_key)
        return {'success': True, 'message': f"Uploaded {len(unit.keys)} files"}

# Restore

class DownloadStep(PipelineComponent):
    """Fetches a table's staged files into the work directory"""

    def __init__(self, s3_client):
        super().__init__("Download")
        self.s3_client = s3_client

    def process_table(self, unit):
        for key, path in ((unit.data_key, unit.data_file), (unit.schema_key, unit.schema_file)):
            if not key:
                continue
            self.s3_client.download_file(key, path)
            unit.downloaded.append(path)
        return {'success': True, 'message': f"Downloaded {len(unit.downloaded)} files"}


class DropTableStep(PipelineComponent):
    """Drops the warehouse table so the restore starts clean"""

    def __init__(self, warehouse_db, app_prefix):
        super().__init__("DropTable")
        self.warehouse_db = warehouse_db
        self.app_prefix = app_prefix

    def applies_to(self, unit):
        return unit.data_key is not None

    def process_table(self, unit):
        target = derive_target_table_name(self.app_prefix, unit.data_key, schema=False)
        self.warehouse_db.execute(build_drop_table(target))
        return {'success': True, 'message': f"Dropped {target}", 'target_table': target}


class CreateTableStep(PipelineComponent):
    """Creates the warehouse table from the staged schema file"""

    def __init__(self, warehouse_db, app_prefix, type_mapping=None, strict=False):
        super().__init__("CreateTable")
        self.warehouse_db = warehouse_db
        self.app_prefix = app_prefix
        self.type_mapping = type_mapping
        self.strict = strict

    def applies_to(self, unit):
        return unit.schema_key is not None

    def process_table(self, unit):
        target = derive_target_table_name(self.app_prefix, unit.schema_key, schema=True)
        columns = read_schema_file(unit.schema_file)
        sql = build_create_table(target, columns, self.type_mapping, self.strict)
        self.warehouse_db.execute(sql)
        return {
            'success': True,
            'message': f"Created {target} with {len(columns)} columns",
            'target_table': target,
        }


class LoadDataStep(PipelineComponent):
    """COPYs the staged data file into the warehouse table"""

    def __init__(self, warehouse_db, app_prefix, bucket, iam_role, region=DEFAULT_REGION):
        super().__init__("LoadData")
        self.warehouse_db = warehouse_db
        self.app_prefix = app_prefix
        self.bucket = bucket
        self.iam_role = iam_role
        self.region = region

    def applies_to(self, unit):
        return unit.data_key is not None

    def process_table(self, unit):
        target = derive_target_table_name(self.app_prefix, unit.data_key, schema=False)
        locator = staged_object_url(self.bucket, unit.data_key)
        self.warehouse_db.execute(build_load_command(target, locator, self.iam_role, self.region))
        return {'success': True, 'message': f"Loaded {locator} into {target}", 'target_table': target}


class DeleteStagedStep(PipelineComponent):
    """Removes a restored table's files from the staging bucket"""

    def __init__(self, s3_client):
        super().__init__("DeleteStaged")
        self.s3_client = s3_client

    def process_table(self, unit):
        for key in unit.keys:
            self.s3_client.delete_file(key)
        return {'success': True, 'message': f"Deleted {len(unit.keys)} staged files"}
