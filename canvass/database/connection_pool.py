"""Database connection pooling for the canvassing store"""

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor
from contextlib import contextmanager
from typing import Optional
import structlog

from canvass.utils.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

class DatabasePool:
    """Thread-safe connection pool for PostgreSQL

    Constructed once per application and handed to the store; there is no
    module-level instance.
    """

    def __init__(self, dsn: str, minconn: int = 2, maxconn: int = 20):
        if not dsn:
            raise ConfigurationError("DATABASE_URL is required")

        self.dsn = dsn
        try:
            self._pool = psycopg2.pool.ThreadedConnectionPool(
                minconn=minconn,
                maxconn=maxconn,
                dsn=dsn,
                cursor_factory=RealDictCursor
            )
            logger.info("Database connection pool created",
                       min_connections=minconn,
                       max_connections=maxconn)
        except psycopg2.Error as e:
            logger.error("Failed to create connection pool", error=str(e))
            raise

    @contextmanager
    def get_connection(self):
        """Get a connection from the pool; commit on success, roll back on error"""
        conn = None
        try:
            conn = self._pool.getconn()
            yield conn
            conn.commit()
        except Exception as e:
            if conn:
                conn.rollback()
            logger.error("Database error", error=str(e))
            raise
        finally:
            if conn:
                self._pool.putconn(conn)

    @contextmanager
    def get_cursor(self):
        """Get a cursor with automatic connection management"""
        with self.get_connection() as conn:
            cursor = conn.cursor(cursor_factory=RealDictCursor)
            try:
                yield cursor
            finally:
                cursor.close()

    def execute_query(self, query: str, params: tuple = None) -> list:
        """Execute a query and return results"""
        with self.get_cursor() as cursor:
            cursor.execute(query, params)
            return cursor.fetchall()

    def execute_one(self, query: str, params: tuple = None) -> Optional[dict]:
        """Execute a query and return single result"""
        with self.get_cursor() as cursor:
            cursor.execute(query, params)
            return cursor.fetchone()
