"""
Main pipeline orchestration module

Runs the export (Postgres -> S3) and restore (S3 -> Redshift) modes. Steps
run one stage at a time across all tables, tables in listing order, one
call at a time.
"""

import json
import logging
import os
import time
import traceback
from datetime import datetime

from ..schema.copy_command import DEFAULT_REGION, DEFAULT_SOURCE_SCHEMA
from ..schema.naming import SCHEMA_SUFFIX, staging_prefix
from ..utils.logging import LoggingManager
from .steps import (
    CreateTableStep,
    DeleteStagedStep,
    DownloadStep,
    DropTableStep,
    DumpTableStep,
    LoadDataStep,
    UploadStep,
)
from .units import TableExportUnit

logger = logging.getLogger(__name__)

# tables to ignore in the export
DEFAULT_IGNORED_TABLES = frozenset([
    "knex_migrations",
    "knex_migrations_lock",
    "awsdms_ddl_audit",
    "authorLabelSets",
    "authorSettings",
    "SequelizeMeta",
])

ON_ERROR_CONTINUE = 'continue'
ON_ERROR_ABORT = 'abort'


def filter_ignored_tables(tables, ignored_tables=DEFAULT_IGNORED_TABLES):
    """Drop bookkeeping tables from a table list, keeping the rest in order"""
    kept = [table for table in tables if table not in ignored_tables]
    skipped = len(tables) - len(kept)
    if skipped:
        logger.info(f"Ignoring {skipped} infrastructure tables")
    return kept


class Pipeline:
    """
    Main pipeline that runs the export or restore steps
    """

    def __init__(self, s3_client, source_db=None, warehouse_db=None, settings=None,
                 type_mapping=None, ignored_tables=DEFAULT_IGNORED_TABLES):
        """
        Args:
            s3_client (S3Client): Staging bucket client
            source_db (DBClient, optional): Source database, needed for export
            warehouse_db (DBClient, optional): Warehouse, needed for restore
            settings (dict, optional): The 'pipeline' config section
            type_mapping (TypeMapping, optional): Overrides the default type mapping
            ignored_tables (iterable): Tables never exported
        """
        self.s3_client = s3_client
        self.source_db = source_db
        self.warehouse_db = warehouse_db
        self.settings = settings or {}
        self.type_mapping = type_mapping
        self.ignored_tables = frozenset(ignored_tables)

        self.app = self.settings.get('app')
        self.work_dir = self.settings.get('work_dir') or '.'
        self.on_error = self.settings.get('on_error') or ON_ERROR_CONTINUE
        self.source_schema = self.settings.get('source_schema') or DEFAULT_SOURCE_SCHEMA

        # Keep track of runs
        self.run_count = 0

    def export_steps(self):
        return [
            DumpTableStep(self.source_db, self.source_schema),
            UploadStep(self.s3_client),
        ]

    def restore_steps(self):
        return [
            DownloadStep(self.s3_client),
            DropTableStep(self.warehouse_db, self.app),
            CreateTableStep(
                self.warehouse_db, self.app,
                type_mapping=self.type_mapping,
                strict=bool(self.settings.get('strict_ddl')),
            ),
            LoadDataStep(
                self.warehouse_db, self.app,
                bucket=self.s3_client.get_bucket_name(),
                iam_role=self.settings.get('iam_role'),
                region=self.settings.get('region') or DEFAULT_REGION,
            ),
            DeleteStagedStep(self.s3_client),
        ]

    @LoggingManager.log_step("List source tables")
    def plan_export(self):
        """Units the export would process"""
        tables = self.source_db.list_tables(self.source_schema)
        tables = filter_ignored_tables(tables, self.ignored_tables)
        for table in tables:
            if table.endswith(SCHEMA_SUFFIX):
                logger.warning(
                    f"Table {table} ends in '{SCHEMA_SUFFIX}'; a restore can only tell its files apart "
                    f"while no table named {table[:-len(SCHEMA_SUFFIX)]} is staged with it"
                )
        return [TableExportUnit.for_table(table, self.app, self.work_dir) for table in tables]

    @LoggingManager.log_step("List staged files")
    def plan_restore(self):
        """Units the restore would process"""
        keys = self.s3_client.list_keys(f"{staging_prefix(self.app)}/")
        return TableExportUnit.from_staged_keys(keys, self.work_dir)

    @LoggingManager.log_execution_time
    def run_export(self):
        """Dump every non-ignored source table and stage it in S3"""
        return self._run('export', self.plan_export, self.export_steps)

    @LoggingManager.log_execution_time
    def run_restore(self):
        """Rebuild every staged table in the warehouse"""
        return self._run('restore', self.plan_restore, self.restore_steps, cleanup=True)

    def _run(self, mode, plan, steps, cleanup=False):
        self.run_count += 1
        run_id = f"{mode}_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{self.run_count}"
        logger.info(f"Starting pipeline run {run_id}")
        start_time = time.time()

        results = {
            'run_id': run_id,
            'mode': mode,
            'app': self.app,
            'tables': [],
            'success': False,
            'start_time': datetime.now().isoformat(),
        }

        units = []
        try:
            os.makedirs(self.work_dir, exist_ok=True)
            units = plan()

            if not units:
                results['message'] = "No tables to process"
                logger.warning(results['message'])
                results['success'] = True
            else:
                logger.info(f"Processing {len(units)} tables: {[u.table_name for u in units]}")
                table_results, aborted = self._run_steps(steps(), units)
                results['tables'] = table_results

                success_count = sum(1 for t in table_results if t['success'])
                failed_count = len(table_results) - success_count
                results['success'] = failed_count == 0 and not aborted
                if aborted:
                    results['message'] = f"Aborted after a failure ({success_count} tables completed)"
                elif failed_count:
                    results['message'] = f"Completed with errors in {failed_count} of {len(table_results)} tables"
                else:
                    results['message'] = f"Successfully processed {success_count} tables"

                results['stats'] = {
                    'total_tables': len(table_results),
                    'successful_tables': success_count,
                    'failed_tables': failed_count,
                }

        except Exception as e:
            logger.error(f"Pipeline error: {str(e)}")
            logger.debug(traceback.format_exc())
            results['message'] = f"Error: {str(e)}"
            results['error'] = str(e)

        finally:
            if cleanup:
                results['cleaned_up'] = self.cleanup_local(units)

        total_time = time.time() - start_time
        results['total_time'] = f"{total_time:.2f}s"
        results['end_time'] = datetime.now().isoformat()
        return results

    def _run_steps(self, steps, units):
        """
        Run each step over every table before starting the next step

        A table whose step fails is skipped by the remaining steps. With
        on_error='abort' nothing further runs after the first failure.

        Returns:
            tuple: (per-table results, whether the run was aborted)
        """
        table_results = {
            unit.table_name: {
                'table': unit.table_name,
                'stages': {},
                'success': True,
            }
            for unit in units
        }

        for step in steps:
            for unit in units:
                entry = table_results[unit.table_name]
                if not step.applies_to(unit):
                    continue

                if not entry['success']:
                    entry['stages'][step.name] = {
                        'success': False,
                        'time': '0.00s',
                        'message': 'Skipped due to previous step failure',
                        'skipped': True,
                    }
                    continue

                step_result = step.process(unit)
                entry['stages'][step.name] = {
                    'success': step_result.get('success', False),
                    'time': step_result.get('time', '0.00s'),
                    'message': step_result.get('message', ''),
                }

                if not step_result.get('success', False):
                    entry['success'] = False
                    logger.warning(f"Table {unit.table_name} failed at {step.name}")

                    if self.on_error == ON_ERROR_ABORT:
                        logger.error(f"Aborting run after {step.name} failed for {unit.table_name}")
                        return list(table_results.values()), True

        return list(table_results.values()), False

    def cleanup_local(self, units):
        """Remove the files this run downloaded"""
        removed = []
        for unit in units:
            for path in unit.downloaded:
                try:
                    os.remove(path)
                    removed.append(path)
                except FileNotFoundError:
                    logger.debug(f"Already gone: {path}")
            unit.downloaded = []

        if removed:
            logger.info(f"Removed {len(removed)} local files")
        return removed


# Helper function to save pipeline results to disk
def save_results(results, output_file):
    """Save pipeline results to a JSON file"""
    output_dir = os.path.dirname(output_file)
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir)

    with open(output_file, 'w') as f:
        json.dump(results, f, indent=2)

    return output_file
