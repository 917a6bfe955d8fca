"""
Database module

Provides functionality for interacting with PostgreSQL and Redshift.
"""

from .db_client import DBClient
