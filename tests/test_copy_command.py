# tests/test_copy_command.py
from warehouse_pipeline.schema.copy_command import (
    build_export_data_sql, build_export_schema_sql, build_load_command, quote_literal, staged_object_url
)
from warehouse_pipeline.schema.naming import derive_target_table_name, staged_key


class TestBuildLoadCommand:
    """Warehouse COPY FROM S3."""

    def test_command(self):
        sql = build_load_command(
            'app_orders_test',
            's3://bucket/app-warehouse-pipeline/orders.csv',
            'arn:aws:iam::123456789012:role/redshift-copy',
        )
        assert sql == (
            'COPY "app_orders_test" '
            "FROM 's3://bucket/app-warehouse-pipeline/orders.csv' "
            "IAM_ROLE 'arn:aws:iam::123456789012:role/redshift-copy' "
            "CSV DELIMITER '|' QUOTE '\"' "
            "REGION 'us-east-1' "
            "DATEFORMAT 'auto' "
            "IGNOREHEADER 1"
        )

    def test_region_override(self):
        sql = build_load_command('t', 's3://b/k.csv', 'role', region='eu-west-1')
        assert "REGION 'eu-west-1'" in sql

    def test_uses_same_table_name_as_create_path(self):
        data_key = staged_key('app', 'orders')
        schema_key = staged_key('app', 'orders', schema=True)
        target = derive_target_table_name('app', data_key)

        assert target == derive_target_table_name('app', schema_key)
        sql = build_load_command(target, staged_object_url('bucket', data_key), 'role')
        assert sql.startswith('COPY "app_orders_test" FROM')

    def test_locator_quotes_escaped(self):
        sql = build_load_command('t', "s3://b/it's.csv", 'role')
        assert "FROM 's3://b/it''s.csv'" in sql


class TestExportSql:
    """Source side unload statements."""

    def test_data(self):
        assert build_export_data_sql('orders') == (
            'COPY "public"."orders" TO STDOUT DELIMITER \'|\' CSV HEADER'
        )

    def test_schema(self):
        sql = build_export_schema_sql('orders')
        assert sql.startswith(
            'COPY (SELECT column_name, udt_name, character_maximum_length '
            'FROM information_schema.columns'
        )
        assert "table_schema = 'public'" in sql
        assert "table_name = 'orders'" in sql
        assert 'ORDER BY ordinal_position' in sql
        assert sql.endswith("TO STDOUT DELIMITER '|' CSV HEADER")

    def test_schema_name_literal_escaped(self):
        assert "table_name = 'o''brien'" in build_export_schema_sql("o'brien")


def test_quote_literal():
    assert quote_literal("a'b") == "'a''b'"


def test_staged_object_url():
    assert staged_object_url('bucket', 'app-warehouse-pipeline/orders.csv') == (
        's3://bucket/app-warehouse-pipeline/orders.csv'
    )
