"""Pydantic schemas for logical file results."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from common.types import LogicalFile, RevisionEntry, from_epoch


class FileResponse(BaseModel):
    """Result record for a logical file.

    ``content`` is filled only for ``text/plain`` objects; for anything else
    callers dereference ``object_id`` themselves.
    """
    id: int
    object_id: str
    created_at: datetime
    updated_at: datetime
    tags: List[str] = Field(default_factory=list)
    type: str = ""
    content: str = ""

    @classmethod
    def from_logical_file(cls, logical_file: LogicalFile, type: str = "", content: str = "") -> "FileResponse":
        return cls(
            id=logical_file.id,
            object_id=logical_file.object_id,
            created_at=from_epoch(logical_file.created_at),
            updated_at=from_epoch(logical_file.updated_at),
            tags=list(logical_file.tags),
            type=type,
            content=content,
        )


class RevisionResponse(BaseModel):
    """Response model for one revision log entry."""
    file_id: int
    object_id: str
    updated_at: datetime

    @classmethod
    def from_entry(cls, entry: RevisionEntry) -> "RevisionResponse":
        return cls(
            file_id=entry.file_id,
            object_id=entry.object_id,
            updated_at=from_epoch(entry.updated_at),
        )
