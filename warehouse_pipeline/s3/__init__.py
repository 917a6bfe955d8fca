"""
S3 module

Staging bucket access.
"""

from .s3_client import S3Client
