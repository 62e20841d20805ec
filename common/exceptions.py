"""Custom exception classes for the store."""

from typing import Optional


class StoreError(Exception):
    """
    Base exception class for all store-related errors.
    """
    pass


class StorageIOError(StoreError):
    """
    Raised when a filesystem operation (open, mkdir, write, read) fails.
    """

    def __init__(self, phase: str, target: str, cause: Optional[BaseException] = None):
        self.phase = phase
        self.target = target
        self.cause = cause
        message = f"{phase} {target}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class HashError(StoreError):
    """
    Raised when digest computation or the rewind after it fails.
    """

    def __init__(self, phase: str, cause: Optional[BaseException] = None):
        self.phase = phase
        self.cause = cause
        message = f"{phase} failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class NotFoundError(StoreError):
    """
    Raised when a logical file, an indexed object or a named record is missing.
    """
    pass


class CorruptMetaError(StoreError):
    """
    Raised when a meta file line has no key/value separator.
    """

    def __init__(self, name: str, line_number: int, line: str):
        self.name = name
        self.line_number = line_number
        self.line = line
        super().__init__(f"meta file {name!r} corrupted on line {line_number}: {line}")


class TransactionError(StoreError):
    """
    Raised when an index transaction cannot begin, execute or commit.
    """

    def __init__(self, operation: str, file_id: Optional[int] = None, cause: Optional[BaseException] = None):
        self.operation = operation
        self.file_id = file_id
        self.cause = cause
        message = operation if file_id is None else f"{operation} [file_id={file_id}]"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ConfigError(StoreError):
    """
    Raised when the store's config.json cannot be read or decoded.
    """
    pass


class StoreClosedError(StoreError):
    """
    Raised when a closed store handle is used.
    """
    pass
