"""Service layer for business logic."""

from dabba.services.file_service import FileService
from dabba.services.revision_index import RevisionIndex

__all__ = ["FileService", "RevisionIndex"]
