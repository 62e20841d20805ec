"""Manages content-addressed object files on disk: write, open, verify."""

import re
import shutil
from pathlib import Path
from typing import BinaryIO, Optional, Union

from common.constants import (
    COPY_PIECE_SIZE_BYTES,
    HASH_HEX_LENGTH,
    OBJECTS_DIR,
    SHARD_PREFIX_LENGTH,
)
from common.exceptions import NotFoundError, StorageIOError
from common.logging_config import get_logger, short_hash
from objectstore.checksum import compute_stream_digest

logger = get_logger(__name__)

_HASH_RE = re.compile(r"^[0-9a-f]{%d}$" % HASH_HEX_LENGTH)


def is_valid_hash(object_id: str) -> bool:
    return isinstance(object_id, str) and bool(_HASH_RE.match(object_id))


class ObjectStorage:
    """
    Hash-addressed blob storage rooted at ``<root>/objects``.

    Objects are immutable: identical bytes always land on the same path and
    nothing here deletes them.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.objects_dir = self.root / OBJECTS_DIR

    def ensure_objects_directory(self) -> None:
        """Ensure objects directory exists."""
        try:
            self.objects_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError("mkdir", str(self.objects_dir), e) from e

    def get_object_path(self, object_id: str) -> Path:
        """
        Get file path for an object.

        Args:
            object_id: 40 character lowercase hex SHA-1 digest

        Returns:
            ``objects/<first two chars>/<remaining chars>`` under the root

        Raises:
            ValueError: If object_id is not a valid digest
        """
        if not is_valid_hash(object_id):
            raise ValueError(f"invalid object id: {object_id!r}")
        return self.objects_dir / object_id[:SHARD_PREFIX_LENGTH] / object_id[SHARD_PREFIX_LENGTH:]

    def write_object(self, stream: BinaryIO) -> str:
        """
        Hash a stream and persist it under its digest.

        The stream is read twice: once to hash, once to copy. Writing the same
        bytes again truncates and rewrites an identical file.

        Args:
            stream: Seekable binary stream positioned at its start

        Returns:
            Hex digest of the stream content

        Raises:
            HashError: If hashing or the rewind fails
            StorageIOError: phase "mkdir" or "write"
        """
        object_id = compute_stream_digest(stream)
        path = self.get_object_path(object_id)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create shard directory [path={path.parent}]: {e}")
            raise StorageIOError("mkdir", str(path.parent), e) from e

        try:
            with open(path, 'wb') as out:
                shutil.copyfileobj(stream, out, COPY_PIECE_SIZE_BYTES)
        except OSError as e:
            logger.error(f"Failed to write object [object_id={object_id}]: {e}")
            raise StorageIOError("write", str(path), e) from e

        logger.debug(f"Wrote object {short_hash(object_id)} to {path}")
        return object_id

    def open_object(self, object_id: str) -> BinaryIO:
        """
        Open an object for reading. The caller owns the returned handle.

        Raises:
            NotFoundError: If no object file exists for the digest
            StorageIOError: If the file exists but cannot be opened
        """
        path = self.get_object_path(object_id)
        try:
            return open(path, 'rb')
        except FileNotFoundError as e:
            raise NotFoundError(f"object {object_id} not found at {path}") from e
        except OSError as e:
            raise StorageIOError("open", str(path), e) from e

    def verify_object(self, object_id: str) -> bool:
        """
        Re-hash an object and compare against its address.

        Returns:
            True if the bytes on disk still hash to object_id

        Raises:
            NotFoundError: If object does not exist
        """
        with self.open_object(object_id) as f:
            actual = compute_stream_digest(f, rewind=False)
        if actual != object_id:
            logger.warning(f"Object digest mismatch [object_id={object_id}, actual={actual}]")
            return False
        return True

    def list_objects(self) -> list[str]:
        """
        List all object ids in storage, reassembled from shard paths.

        Named-variant files (``objects/<name>.dabba``) are not included.
        """
        if not self.objects_dir.exists():
            return []

        object_ids = []
        for shard in sorted(self.objects_dir.iterdir()):
            if not shard.is_dir() or len(shard.name) != SHARD_PREFIX_LENGTH:
                continue
            for path in sorted(shard.iterdir()):
                candidate = shard.name + path.name
                if path.is_file() and is_valid_hash(candidate):
                    object_ids.append(candidate)
        return object_ids
