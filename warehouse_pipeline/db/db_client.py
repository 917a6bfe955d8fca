"""
Database client module for PostgreSQL and Redshift operations.

The same client talks to the source database and the warehouse; Redshift
speaks the PostgreSQL wire protocol so psycopg2 handles both.
"""
import psycopg2
import logging
import urllib.parse
from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import SQLAlchemyError
import traceback

from ..errors import ExternalCommandFailure

logger = logging.getLogger(__name__)

class DBClient:
    """Handles database connections and operations"""

    def __init__(self, config, name='database'):
        """
        Initialize with database config

        Args:
            config (dict): host, port, user, password, database
            name (str): Label used in log messages ('source' or 'warehouse')
        """
        self.config = config
        self.name = name
        self._engine = None

    def get_connection(self):
        """Gets a new database connection"""
        try:
            conn = psycopg2.connect(
                host=self.config.get('host', 'localhost'),
                database=self.config.get('database'),
                user=self.config.get('user'),
                password=self.config.get('password'),
                port=self.config.get('port', '5432')
            )
            return conn
        except psycopg2.Error as e:
            logger.error(f"{self.name} connection error: {e}")
            # Include stack trace for connection errors - helpful for debugging
            logger.debug(traceback.format_exc())
            raise ExternalCommandFailure('connect', self.describe(), e) from e

    def describe(self):
        """host:port/database, for logs"""
        return (f"{self.config.get('host', 'localhost')}:{self.config.get('port', '5432')}"
                f"/{self.config.get('database')}")

    # SQLAlchemy engine, only used for catalog inspection
    def get_sqlalchemy_engine(self):
        if self._engine is not None:
            return self._engine

        pw_encoded = urllib.parse.quote_plus(self.config.get('password') or '')
        user = urllib.parse.quote_plus(self.config.get('user') or '')
        host = self.config.get('host', 'localhost')
        port = self.config.get('port', '5432')
        db = self.config.get('database')

        conn_str = f"postgresql+psycopg2://{user}:{pw_encoded}@{host}:{port}/{db}"

        self._engine = create_engine(conn_str)
        return self._engine

    def execute_query(self, query, params=None):
        """Run a query and get all rows back"""
        conn = self.get_connection()
        cursor = None

        try:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()
        except psycopg2.Error as e:
            logger.error(f"Query failed: {e}")
            logger.error(f"Query was: {query}")
            raise ExternalCommandFailure('query', self.name, e) from e
        finally:
            if cursor:
                cursor.close()
            conn.close()

    def execute(self, statement):
        """
        Run a statement that returns no rows (DDL, COPY FROM S3) and commit it

        Raises:
            ExternalCommandFailure: If the statement fails; the transaction is rolled back
        """
        conn = self.get_connection()
        cursor = None

        try:
            cursor = conn.cursor()
            logger.debug(f"[{self.name}] {statement}")
            cursor.execute(statement)
            conn.commit()
            return True
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Statement failed on {self.name}: {e}")
            logger.error(f"Statement was: {statement}")
            raise ExternalCommandFailure('execute', self.name, e) from e
        finally:
            if cursor:
                cursor.close()
            conn.close()

    def copy_to_file(self, copy_sql, path):
        """
        Stream the output of a COPY ... TO STDOUT statement into a local file

        Args:
            copy_sql (str): COPY statement writing to STDOUT
            path (str): Local file to write

        Returns:
            str: The path written
        """
        conn = self.get_connection()
        cursor = None

        try:
            cursor = conn.cursor()
            with open(path, 'w', encoding='utf-8', newline='') as f:
                cursor.copy_expert(copy_sql, f)
            logger.debug(f"Wrote {path} from {self.name}")
            return path
        except (psycopg2.Error, OSError) as e:
            logger.error(f"Unload to {path} failed: {e}")
            raise ExternalCommandFailure('unload', path, e) from e
        finally:
            if cursor:
                cursor.close()
            conn.close()

    def list_tables(self, schema='public'):
        """Names of the tables in a schema"""
        try:
            inspector = inspect(self.get_sqlalchemy_engine())
            tables = inspector.get_table_names(schema=schema)
        except SQLAlchemyError as e:
            logger.error(f"Failed to list tables in {schema}: {e}")
            raise ExternalCommandFailure('list tables', f"{self.name}.{schema}", e) from e

        logger.info(f"Found {len(tables)} tables in {self.name}.{schema}")
        return tables

    def test_connection(self):
        """Run SELECT version() and return the server version string"""
        result = self.execute_query("SELECT version();")
        return result[0][0] if result else None
