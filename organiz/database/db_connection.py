"""
PostgreSQL connection helper.
Provides a bounded connection pool and get_db() for use by services.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

import psycopg2
from psycopg2.extras import DictCursor
from psycopg2.pool import ThreadedConnectionPool
from flask import current_app


class ConnectionPool:
    """
    Thread-safe pool capped at `max_connections` open connections.

    Callers beyond the cap wait for a connection to be returned instead of
    failing. The underlying psycopg2 pool is opened on first use so the app
    can start before the database is reachable.
    """

    def __init__(self, dsn: str, max_connections: int = 10) -> None:
        self.dsn = dsn
        self.max_connections = max_connections
        self._slots = threading.BoundedSemaphore(max_connections)
        self._lock = threading.Lock()
        self._pool: Optional[ThreadedConnectionPool] = None

    def _get_pool(self) -> ThreadedConnectionPool:
        with self._lock:
            if self._pool is None:
                # Rows come back with dictionary access, e.g. row["email"]
                self._pool = ThreadedConnectionPool(
                    1, self.max_connections, self.dsn, cursor_factory=DictCursor
                )
            return self._pool

    def getconn(self) -> "psycopg2.extensions.connection":
        self._slots.acquire()
        try:
            return self._get_pool().getconn()
        except Exception:
            self._slots.release()
            raise

    def putconn(self, conn: "psycopg2.extensions.connection") -> None:
        try:
            self._get_pool().putconn(conn)
        finally:
            self._slots.release()

    def closeall(self) -> None:
        with self._lock:
            if self._pool is not None:
                self._pool.closeall()
                self._pool = None


@contextmanager
def get_db() -> Iterator["psycopg2.extensions.connection"]:
    """
    Borrow a connection from the app's pool for the duration of a block.

    Usage:
        with get_db() as conn:
            with conn.cursor() as cur:
                cur.execute(...)
            conn.commit()

    Uncommitted work is rolled back if the block raises.

    Raises:
        psycopg2.Error: If the connection or a query fails.
    """
    pool: ConnectionPool = current_app.extensions["db_pool"]
    conn = pool.getconn()
    try:
        yield conn
    except Exception:
        try:
            conn.rollback()
        except psycopg2.Error:
            logging.exception("[DB] Rollback failed")
        raise
    finally:
        pool.putconn(conn)
