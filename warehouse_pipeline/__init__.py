"""
Postgres to Redshift Warehouse Pipeline

Exports PostgreSQL tables and their column metadata to S3, then rebuilds
them as Redshift tables and loads them with COPY.
"""

__version__ = '0.1.0'
