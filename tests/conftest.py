# tests/conftest.py
"""
Shared test fixtures for pytest.
"""

import os
from unittest.mock import Mock

import pytest

SCHEMA_HEADER = "column_name|udt_name|character_maximum_length\n"

ORDERS_SCHEMA = SCHEMA_HEADER + (
    "id|int8|\n"
    "payload|jsonb|\n"
    "code|char|10\n"
)

USERS_SCHEMA = SCHEMA_HEADER + (
    "id|uuid|\n"
    "\"display|name\"|varchar|255\n"
    "active|bool|\n"
)


@pytest.fixture
def calls():
    """Ordered log of every collaborator call made during a test."""
    return []


@pytest.fixture
def staged_objects():
    """S3 contents keyed by object key."""
    return {
        'app-warehouse-pipeline/orders.csv': "id|payload|code\n1|{}|ABC\n",
        'app-warehouse-pipeline/orders_schema.csv': ORDERS_SCHEMA,
        'app-warehouse-pipeline/users.csv': "id|display|name|active\n",
        'app-warehouse-pipeline/users_schema.csv': USERS_SCHEMA,
    }


@pytest.fixture
def s3_client(calls, staged_objects):
    """Mock S3Client backed by the staged_objects dict."""
    client = Mock()
    client.get_bucket_name.return_value = 'bucket'
    client.list_keys.side_effect = lambda prefix: [k for k in staged_objects if k.startswith(prefix)]

    def download(key, path):
        calls.append(('download', key))
        with open(path, 'w') as f:
            f.write(staged_objects[key])
        return path

    def upload(path, key):
        calls.append(('upload', key))
        assert os.path.exists(path)
        return key

    client.download_file.side_effect = download
    client.upload_file.side_effect = upload
    client.delete_file.side_effect = lambda key: calls.append(('delete', key))
    return client


@pytest.fixture
def warehouse_db(calls):
    """Mock warehouse DBClient recording executed SQL."""
    db = Mock()
    db.execute.side_effect = lambda sql: calls.append(('warehouse', sql))
    return db


@pytest.fixture
def source_db(calls):
    """Mock source DBClient whose unloads write small files."""
    db = Mock()
    db.list_tables.return_value = ['users', 'knex_migrations', 'orders']

    def copy_to_file(sql, path):
        calls.append(('unload', os.path.basename(path)))
        with open(path, 'w') as f:
            f.write(SCHEMA_HEADER)
        return path

    db.copy_to_file.side_effect = copy_to_file
    return db


@pytest.fixture
def settings(tmp_path):
    """Pipeline settings writing into a temp work dir."""
    return {
        'app': 'app',
        'iam_role': 'arn:aws:iam::123456789012:role/redshift-copy',
        'work_dir': str(tmp_path / 'work'),
        'on_error': 'continue',
        'strict_ddl': False,
        'region': 'us-east-1',
    }
