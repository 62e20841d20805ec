"""Revision log repository. The log is append-only: no update or delete here."""

import sqlite3
from typing import List, Set

from common.types import RevisionEntry


class LogRepository:
    @staticmethod
    def append(conn: sqlite3.Connection, file_id: int, object_id: str, timestamp: int) -> None:
        """
        Append a revision entry. Does not commit.
        """
        conn.execute(
            "INSERT INTO log (file_id, object_id, updated_at) VALUES (?, ?, ?)",
            (file_id, object_id, timestamp)
        )

    @staticmethod
    def get_entries(conn: sqlite3.Connection, file_id: int) -> List[RevisionEntry]:
        """
        All entries for a file, oldest first. Ties on the second-resolution
        timestamp are broken by insertion order.
        """
        cursor = conn.cursor()
        cursor.execute(
            "SELECT file_id, object_id, updated_at FROM log WHERE file_id = ? ORDER BY updated_at, id",
            (file_id,)
        )
        return [
            RevisionEntry(
                file_id=row["file_id"],
                object_id=row["object_id"],
                updated_at=row["updated_at"],
            )
            for row in cursor.fetchall()
        ]


    @staticmethod
    def referenced_object_ids(conn: sqlite3.Connection) -> Set[str]:
        """Every object id any file has ever pointed at."""
        cursor = conn.cursor()
        cursor.execute("SELECT DISTINCT object_id FROM log")
        return {row["object_id"] for row in cursor.fetchall()}
