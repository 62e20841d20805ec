"""Shared data type definitions (LogicalFile, RevisionEntry)."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List


def from_epoch(seconds: int) -> datetime:
    """Convert stored epoch seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


@dataclass(frozen=True)
class LogicalFile:
    """
    Durable identity pointing at the object holding its latest revision.
    """
    id: int
    object_id: str
    created_at: int
    updated_at: int
    tags: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RevisionEntry:
    """
    One row of the append-only revision log.
    """
    file_id: int
    object_id: str
    updated_at: int
