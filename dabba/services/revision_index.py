"""Revision index: logical file rows plus the append-only revision log."""

import sqlite3
import time
from contextlib import contextmanager
from typing import Callable, Generator, List, Optional, Set

from common.exceptions import NotFoundError, TransactionError
from common.logging_config import get_logger, short_hash
from common.types import LogicalFile, RevisionEntry
from dabba.database import Database
from dabba.repositories.file_repository import FileRepository
from dabba.repositories.log_repository import LogRepository

logger = get_logger(__name__)


class RevisionIndex:
    """
    Maps logical file ids to their current object hash and records every hash
    a file has pointed at.

    Each mutation runs in one ``BEGIN IMMEDIATE`` transaction: the row change
    and its log entry become visible together or not at all. The index never
    checks that an object exists on disk; write the object first.
    """

    def __init__(self, database: Database, clock: Callable[[], float] = time.time):
        self.database = database
        self.clock = clock
        self.file_repo = FileRepository()
        self.log_repo = LogRepository()

    def _now(self) -> int:
        return int(self.clock())

    @contextmanager
    def _transaction(self, operation: str, file_id: Optional[int] = None) -> Generator[sqlite3.Connection, None, None]:
        with self.database.connection() as conn:
            try:
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise TransactionError(f"begin {operation}", file_id, e) from e

            try:
                yield conn
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                logger.error(f"Transaction failed, rolled back [operation={operation}, file_id={file_id}]: {e}")
                raise TransactionError(operation, file_id, e) from e
            except Exception:
                conn.rollback()
                raise

    def create(self, object_id: str) -> int:
        """
        Create a logical file pointing at object_id and log its first revision.

        Returns:
            The new file id
        """
        now = self._now()
        with self._transaction("create") as conn:
            file_id = self.file_repo.insert_file(conn, object_id, now)
            self.log_repo.append(conn, file_id, object_id, now)

        logger.info(f"Created file [file_id={file_id}, object_id={short_hash(object_id)}]")
        return file_id

    def update(self, file_id: int, object_id: str) -> None:
        """
        Point an existing logical file at a new object and log the change.

        Raises:
            NotFoundError: If file_id does not exist; nothing is written
            TransactionError: If the index store fails; nothing is written
        """
        with self._transaction("update", file_id) as conn:
            current = self.file_repo.get_by_id(conn, file_id)
            if current is None:
                raise NotFoundError(f"file {file_id} not found")

            # keep the log ordered even if the wall clock stepped backwards
            now = max(self._now(), current.updated_at)

            self.log_repo.append(conn, file_id, object_id, now)
            if not self.file_repo.set_current_object(conn, file_id, object_id, now):
                raise NotFoundError(f"file {file_id} not found")

        logger.info(f"Updated file [file_id={file_id}, object_id={short_hash(object_id)}]")

    def resolve(self, file_id: int) -> LogicalFile:
        """
        Read the current row for a logical file.

        Raises:
            NotFoundError: If no row matches
        """
        with self.database.connection() as conn:
            try:
                logical_file = self.file_repo.get_by_id(conn, file_id)
            except sqlite3.Error as e:
                raise TransactionError("resolve", file_id, e) from e

        if logical_file is None:
            raise NotFoundError(f"file {file_id} not found")
        return logical_file

    def history(self, file_id: int) -> List[RevisionEntry]:
        """
        Every revision of a file, oldest first.

        Raises:
            NotFoundError: If the file does not exist
        """
        with self.database.connection() as conn:
            try:
                if not self.file_repo.exists(conn, file_id):
                    raise NotFoundError(f"file {file_id} not found")
                return self.log_repo.get_entries(conn, file_id)
            except sqlite3.Error as e:
                raise TransactionError("history", file_id, e) from e

    def list_files(self) -> List[LogicalFile]:
        with self.database.connection() as conn:
            try:
                return self.file_repo.list_files(conn)
            except sqlite3.Error as e:
                raise TransactionError("list files", cause=e) from e

    def referenced_objects(self) -> Set[str]:
        with self.database.connection() as conn:
            try:
                return self.log_repo.referenced_object_ids(conn)
            except sqlite3.Error as e:
                raise TransactionError("referenced objects", cause=e) from e
