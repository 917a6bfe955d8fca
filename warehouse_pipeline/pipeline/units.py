"""
Table export units

One unit per source table, pairing its data file with its schema file both
locally and in the staging bucket.
"""

import logging
import os

from ..schema.naming import (
    FILE_EXTENSION,
    base_table_name,
    classify_staged_files,
    staged_key,
)

logger = logging.getLogger(__name__)

class TableExportUnit:
    """A table and its staged data/schema artifacts"""

    def __init__(self, table_name, data_key=None, schema_key=None, work_dir='.'):
        self.table_name = table_name
        self.data_key = data_key
        self.schema_key = schema_key
        self.work_dir = work_dir
        # local files this run fetched from staging, removed by cleanup
        self.downloaded = []

    @property
    def data_file(self):
        if not self.data_key:
            return None
        return os.path.join(self.work_dir, os.path.basename(self.data_key))

    @property
    def schema_file(self):
        if not self.schema_key:
            return None
        return os.path.join(self.work_dir, os.path.basename(self.schema_key))

    @property
    def keys(self):
        return [key for key in (self.data_key, self.schema_key) if key]

    @classmethod
    def for_table(cls, table_name, app_prefix, work_dir='.'):
        """Unit for a table being exported: both artifacts will exist"""
        return cls(
            table_name,
            data_key=staged_key(app_prefix, table_name),
            schema_key=staged_key(app_prefix, table_name, schema=True),
            work_dir=work_dir,
        )

    @classmethod
    def from_staged_keys(cls, keys, work_dir='.'):
        """
        Group listed staging keys into units

        Args:
            keys (list): S3 keys under the app's staging prefix
            work_dir (str): Local directory files are downloaded into

        Returns:
            list: Units in order of each table's first key
        """
        csv_keys = []
        for key in keys:
            if key.endswith(FILE_EXTENSION):
                csv_keys.append(key)
            else:
                logger.warning(f"Ignoring unexpected staged object: {key}")

        kinds = classify_staged_files(csv_keys)

        units = {}
        for key in csv_keys:
            table_name = base_table_name(key, kinds[key])
            unit = units.get(table_name)
            if unit is None:
                unit = units[table_name] = cls(table_name, work_dir=work_dir)

            if kinds[key]:
                unit.schema_key = key
            else:
                unit.data_key = key

        for unit in units.values():
            if not unit.data_key:
                logger.warning(f"No staged data file for {unit.table_name}")
            if not unit.schema_key:
                logger.warning(f"No staged schema file for {unit.table_name}")

        return list(units.values())

    def __repr__(self):
        return f"TableExportUnit({self.table_name!r}, data_key={self.data_key!r}, schema_key={self.schema_key!r})"
