"""
S3 Client module for AWS operations
"""
import boto3
import logging
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError
import os
import time  # For retry backoff

from ..errors import ExternalCommandFailure

logger = logging.getLogger(__name__)

# Max retries for S3 operations
MAX_RETRIES = 3

# upload_file wraps ClientError in S3UploadFailedError
RETRYABLE_ERRORS = (ClientError, BotoCoreError, S3UploadFailedError)

class S3Client:
    """AWS S3 operations wrapper for the staging bucket"""

    def __init__(self, config):
        """Initialize with S3 config"""
        self.config = config
        self._client = None  # Lazy initialization
        self.bucket = config.get('bucket')

    @property
    def client(self):
        """Get the boto3 client - lazy loaded on first use"""
        if not self._client:
            self._create_client()
        return self._client

    def _create_client(self):
        """Create the S3 client"""
        # Use credentials if provided, otherwise rely on environment/instance profile
        kwargs = {'region_name': self.config.get('region', 'us-east-1')}

        # Only add credentials if both are provided
        key_id = self.config.get('aws_access_key_id')
        secret_key = self.config.get('aws_secret_access_key')

        if key_id and secret_key:
            kwargs.update({
                'aws_access_key_id': key_id,
                'aws_secret_access_key': secret_key
            })
            logger.debug("Using provided AWS credentials")
        else:
            logger.debug("Using environment/instance profile for AWS credentials")

        self._client = boto3.client('s3', **kwargs)

    def _with_retries(self, operation, target, func):
        """
        Call func, retrying AWS errors with exponential backoff

        Local problems (a missing file, a bad argument) are not retried and
        propagate as raised.

        Raises:
            ExternalCommandFailure: Once MAX_RETRIES attempts have failed
        """
        for attempt in range(MAX_RETRIES):
            try:
                return func()
            except RETRYABLE_ERRORS as e:
                if attempt < MAX_RETRIES - 1:
                    sleep_time = 2 ** attempt
                    logger.warning(f"S3 {operation} error (attempt {attempt+1}/{MAX_RETRIES}): {e}. Retrying in {sleep_time}s...")
                    time.sleep(sleep_time)
                else:
                    logger.error(f"Failed to {operation} {target} after {MAX_RETRIES} attempts: {e}")
                    raise ExternalCommandFailure(operation, target, e) from e

    def list_buckets(self):
        """Get list of available S3 buckets"""
        response = self._with_retries('list buckets', 's3', self.client.list_buckets)
        return [bucket['Name'] for bucket in response['Buckets']]

    def get_bucket_name(self):
        """Get the configured bucket name"""
        return self.bucket

    def list_keys(self, prefix):
        """All object keys under a prefix, in listing order"""
        def _list():
            keys = []
            paginator = self.client.get_paginator('list_objects_v2')
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for item in page.get('Contents', []):
                    keys.append(item['Key'])
            return keys

        keys = self._with_retries('list', f"s3://{self.bucket}/{prefix}", _list)
        if not keys:
            logger.warning(f"No files found under s3://{self.bucket}/{prefix}")
        else:
            logger.info(f"Found {len(keys)} files under s3://{self.bucket}/{prefix}")
        return keys

    def upload_file(self, local_path, key):
        """Upload a local file, overwriting any existing object"""
        start_time = time.time()
        self._with_retries(
            'upload', key,
            lambda: self.client.upload_file(local_path, self.bucket, key)
        )

        upload_time = time.time() - start_time
        file_size_mb = os.path.getsize(local_path) / (1024 * 1024)
        logger.info(f"Uploaded {local_path} to s3://{self.bucket}/{key} ({file_size_mb:.2f} MB in {upload_time:.2f}s)")
        return key

    def download_file(self, key, local_path):
        """Download an object to a local file"""
        logger.debug(f"Downloading {key}...")
        start_time = time.time()
        self._with_retries(
            'download', key,
            lambda: self.client.download_file(self.bucket, key, local_path)
        )

        download_time = time.time() - start_time
        file_size_mb = os.path.getsize(local_path) / (1024 * 1024)
        logger.info(f"Downloaded {file_size_mb:.2f} MB in {download_time:.2f}s to {local_path}")
        return local_path

    def delete_file(self, key):
        """Delete an object"""
        self._with_retries(
            'delete', key,
            lambda: self.client.delete_object(Bucket=self.bucket, Key=key)
        )
        logger.info(f"Deleted s3://{self.bucket}/{key}")

