"""
Command line entry point

Exports tables and their schemas to S3 for restore into Redshift, or
restores tables and their data into Redshift from the exported sets in S3.
"""

import argparse
import logging
import sys

from . import __version__
from .config import ConfigLoader
from .db import DBClient
from .errors import PipelineError
from .pipeline import Pipeline, save_results
from .s3 import S3Client
from .utils import LoggingManager

logger = logging.getLogger(__name__)

def parse_args(argv=None):
    """Parse command line args"""
    parser = argparse.ArgumentParser(
        description='Export Postgres tables to S3 and restore them into Redshift',
        epilog='Example: warehouse-pipeline --export --app articulate --s3bucket my-bucket --pgdb app'
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--export', action='store_true',
                      help='Export tables and schemas from the source database to S3')
    mode.add_argument('--restore', action='store_true',
                      help='Restore staged tables from S3 into the warehouse')
    mode.add_argument('--check', action='store_true',
                      help='Check the S3 and database connections and exit')

    parser.add_argument('--app', help='Application prefix for staged keys and table names')
    parser.add_argument('--s3bucket', help='Staging bucket (overrides config)')
    parser.add_argument('--iamrole', help='IAM role Redshift uses to read the bucket')

    parser.add_argument('--pghost', help='Source database host')
    parser.add_argument('--pgport', help='Source database port')
    parser.add_argument('--pguser', help='Source database user')
    parser.add_argument('--pgdb', help='Source database name')

    parser.add_argument('--rshost', help='Warehouse host')
    parser.add_argument('--rsport', help='Warehouse port')
    parser.add_argument('--rsuser', help='Warehouse user')
    parser.add_argument('--rsdb', help='Warehouse database name')

    parser.add_argument('--work-dir', help='Local directory for dumped/downloaded files')
    parser.add_argument('--on-error', choices=['continue', 'abort'],
                        help='Keep going with other tables after a failure, or stop the run')
    parser.add_argument('--strict-ddl', action='store_true', default=None,
                        help='Refuse to create tables with no columns or invalid lengths')

    parser.add_argument('--config-file', '-c', help='Config file path')
    parser.add_argument('--log-file', '-l', help='Log file path')
    parser.add_argument('--output', '-o', help='Output file for results JSON')
    parser.add_argument('--dry-run', action='store_true',
                        help='Show what would be processed without running')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--version', '-v', action='store_true', help='Show version and exit')

    return parser.parse_args(argv)

def apply_overrides(config_loader, args):
    """Fold command line flags into the loaded config"""
    config_loader.override('s3', bucket=args.s3bucket)
    config_loader.override('source', host=args.pghost, port=args.pgport,
                           user=args.pguser, database=args.pgdb)
    config_loader.override('warehouse', host=args.rshost, port=args.rsport,
                           user=args.rsuser, database=args.rsdb)
    config_loader.override('pipeline', app=args.app, iam_role=args.iamrole,
                           work_dir=args.work_dir, on_error=args.on_error,
                           strict_ddl=args.strict_ddl)

def build_pipeline(config_loader):
    """Create clients and the pipeline from config"""
    s3_config = config_loader.get_s3_config()
    source_config = config_loader.get_source_config()

    settings = dict(config_loader.get_pipeline_config())
    settings['region'] = s3_config.get('region')
    settings['source_schema'] = source_config.get('schema')

    return Pipeline(
        S3Client(s3_config),
        source_db=DBClient(source_config, name='source'),
        warehouse_db=DBClient(config_loader.get_warehouse_config(), name='warehouse'),
        settings=settings,
    )

def check_connections(pipeline):
    """Try each collaborator once, returning True if all respond"""
    ok = True
    checks = [
        ('S3', lambda: pipeline.s3_client.list_buckets()),
        ('source', pipeline.source_db.test_connection),
        ('warehouse', pipeline.warehouse_db.test_connection),
    ]
    for label, check in checks:
        try:
            logger.info(f"{label}: {check()}")
        except PipelineError as e:
            logger.error(f"{label} check failed: {e}")
            ok = False
    return ok

def print_summary(results):
    """Print the run summary to the console"""
    print("\n" + "="*60)
    print(f" {results.get('mode', 'pipeline').upper()} SUMMARY ".center(60, "="))
    print("="*60)
    print(f"App       : {results.get('app', 'Unknown')}")
    print(f"Status    : {'SUCCESS' if results.get('success') else 'FAILURE'}")
    print(f"Run time  : {results.get('total_time', 'Unknown')}")
    print(f"Message   : {results.get('message', '')}")
    print("-"*60)

    tables = results.get('tables') or []
    if not tables:
        print("\nNo tables were processed")
    for table in tables:
        print(f"\n  {table['table']}: {'OK' if table['success'] else 'FAILED'}")
        for stage_name, stage in table['stages'].items():
            status = "ok" if stage['success'] else ("skipped" if stage.get('skipped') else "FAILED")
            print(f"    - {stage_name.ljust(14)}: {status.ljust(8)} {stage['time'].ljust(8)} {stage['message']}")

    print("\n" + "="*60)

def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)

    if args.version:
        print(f"warehouse-pipeline v{__version__}")
        return 0

    if not (args.export or args.restore or args.check):
        print("One of --export, --restore or --check is required (see --help)")
        return 2

    try:
        config_loader = ConfigLoader(args.config_file)
        apply_overrides(config_loader, args)
    except (OSError, ValueError) as e:
        print(f"Error loading configuration: {e}")
        return 1

    LoggingManager.setup_logging(
        config=config_loader.get_logging_config(), log_file=args.log_file, debug=args.debug
    )

    logger.info(f"warehouse-pipeline v{__version__} starting up")

    if args.debug or args.dry_run:
        config_loader.print_config_summary()

    pipeline = build_pipeline(config_loader)

    if args.check:
        return 0 if check_connections(pipeline) else 1

    mode = 'export' if args.export else 'restore'
    missing = config_loader.missing_values(mode)
    if missing:
        logger.error(f"Missing required settings for {mode}: {', '.join(missing)}")
        return 1

    if args.dry_run:
        logger.info("DRY RUN MODE - only showing what would be processed")
        try:
            units = pipeline.plan_export() if args.export else pipeline.plan_restore()
        except PipelineError as e:
            logger.error(f"Error in dry run: {e}")
            return 1

        logger.info(f"Would {mode} {len(units)} tables:")
        for unit in units:
            logger.info(f"  - {unit.table_name}: {', '.join(unit.keys)}")
        return 0

    results = pipeline.run_export() if args.export else pipeline.run_restore()

    if args.output:
        try:
            save_results(results, args.output)
            logger.info(f"Results written to {args.output}")
        except OSError as e:
            logger.error(f"Failed to write results to {args.output}: {e}")

    print_summary(results)
    return 0 if results.get('success', False) else 1

def run():
    """Console script wrapper"""
    # Catch Ctrl+C gracefully
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user")
        sys.exit(130)

if __name__ == "__main__":
    run()
