"""File repository for database operations."""

import sqlite3
from typing import List, Optional

from common.logging_config import get_logger
from common.types import LogicalFile

logger = get_logger(__name__)


def _row_to_file(row: sqlite3.Row) -> LogicalFile:
    return LogicalFile(
        id=row["id"],
        object_id=row["object_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class FileRepository:
    @staticmethod
    def insert_file(conn: sqlite3.Connection, object_id: str, timestamp: int) -> int:
        """
        Insert a logical file row. Does not commit.

        Returns:
            The allocated file id
        """
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO files (object_id, created_at, updated_at) VALUES (?, ?, ?)",
            (object_id, timestamp, timestamp)
        )
        return cursor.lastrowid

    @staticmethod
    def set_current_object(conn: sqlite3.Connection, file_id: int, object_id: str, timestamp: int) -> bool:
        """
        Point a logical file at a new object. Does not commit.

        Returns:
            True if a row was updated, False if file_id is unknown
        """
        cursor = conn.cursor()
        cursor.execute(
            "UPDATE files SET object_id = ?, updated_at = ? WHERE id = ?",
            (object_id, timestamp, file_id)
        )
        return cursor.rowcount > 0

    @staticmethod
    def exists(conn: sqlite3.Connection, file_id: int) -> bool:
        cursor = conn.cursor()
        cursor.execute("SELECT 1 FROM files WHERE id = ?", (file_id,))
        return cursor.fetchone() is not None

    @staticmethod
    def get_by_id(conn: sqlite3.Connection, file_id: int) -> Optional[LogicalFile]:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id, object_id, created_at, updated_at FROM files WHERE id = ?",
            (file_id,)
        )
        row = cursor.fetchone()

        if row is None:
            return None

        return _row_to_file(row)

    @staticmethod
    def list_files(conn: sqlite3.Connection) -> List[LogicalFile]:
        cursor = conn.cursor()
        cursor.execute("SELECT id, object_id, created_at, updated_at FROM files ORDER BY id")
        return [_row_to_file(row) for row in cursor.fetchall()]
