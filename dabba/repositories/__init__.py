"""Repository layer for database operations."""

from dabba.repositories.file_repository import FileRepository
from dabba.repositories.log_repository import LogRepository

__all__ = ["FileRepository", "LogRepository"]
