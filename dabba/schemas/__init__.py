"""Pydantic schemas for records surfaced to callers."""

from dabba.schemas.files import FileResponse, RevisionResponse

__all__ = ["FileResponse", "RevisionResponse"]
