"""Database schema and connection management for SQLite."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Union

from common.exceptions import TransactionError
from common.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_BUSY_TIMEOUT_SECONDS = 5.0


SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS files (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        object_id TEXT NOT NULL,
        created_at INTEGER NOT NULL,
        updated_at INTEGER NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS log (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        file_id INTEGER NOT NULL,
        object_id TEXT NOT NULL,
        updated_at INTEGER NOT NULL,
        FOREIGN KEY(file_id) REFERENCES files(id)
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_log_file_id ON log(file_id, updated_at)
    """,
)


class Database:
    """
    Handle on the SQLite index file. Connections are opened per unit of work.
    """

    def __init__(self, path: Union[str, Path], timeout: float = DEFAULT_BUSY_TIMEOUT_SECONDS):
        self.path = Path(path)
        self.timeout = timeout

    def init_schema(self) -> None:
        """
        Create tables if they don't exist.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with self.connection() as conn:
            try:
                cursor = conn.cursor()
                for statement in SCHEMA_STATEMENTS:
                    cursor.execute(statement)
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise TransactionError("init schema", cause=e) from e

        logger.debug(f"Index schema ready at {self.path}")

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Context manager for database connections.
        """
        try:
            conn = sqlite3.connect(str(self.path), timeout=self.timeout)
        except sqlite3.Error as e:
            raise TransactionError("connect", cause=e) from e
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

