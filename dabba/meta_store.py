"""Named file store with ``key:value`` sidecar metadata files.

Content lives at ``objects/<name>.dabba`` and metadata at
``meta/<name>.meta``. The two writes are independent: a crash between them
leaves one side stale. Use the revision index when atomicity matters.
"""

import shutil
from pathlib import Path
from typing import BinaryIO, Dict, Mapping, Optional, Union

from common.constants import (
    COPY_PIECE_SIZE_BYTES,
    META_DIR,
    META_SUFFIX,
    NAMED_OBJECT_SUFFIX,
    OBJECTS_DIR,
)
from common.exceptions import CorruptMetaError, NotFoundError, StorageIOError
from common.logging_config import get_logger
from objectstore.content_type import classify, decode_text, is_image, is_text

logger = get_logger(__name__)

Meta = Dict[str, str]

META_SEPARATOR = ":"
META_COMMENT = "#"


def parse_meta(raw: str, name: str = "") -> Meta:
    """
    Parse sidecar text into a mapping.

    Blank lines and ``#`` comments are skipped; the first colon splits key
    from value; a repeated key keeps its last value.

    Raises:
        CorruptMetaError: On a line without a colon, with its 1-based number
    """
    meta: Meta = {}
    for line_number, line in enumerate(raw.split("\n"), start=1):
        if line.endswith("\r"):
            line = line[:-1]
        if not line or line.startswith(META_COMMENT):
            continue
        key, sep, value = line.partition(META_SEPARATOR)
        if not sep:
            raise CorruptMetaError(name, line_number, line)
        meta[key] = value
    return meta


def serialize_meta(meta: Mapping[str, str]) -> str:
    """
    Render a mapping as one ``key:value`` line per entry.

    Raises:
        ValueError: If a key or value can't round-trip through parse_meta
    """
    lines = []
    for key, value in meta.items():
        key, value = str(key), str(value)
        if not key or META_SEPARATOR in key or key.startswith(META_COMMENT):
            raise ValueError(f"invalid meta key: {key!r}")
        if "\n" in key or "\r" in key or "\n" in value or "\r" in value:
            raise ValueError(f"meta entry {key!r} contains a line break")
        lines.append(f"{key}{META_SEPARATOR}{value}\n")
    return "".join(lines)


class NamedFile:
    """
    An open named file with its sniffed type and metadata.

    Use as a context manager, or call close().
    """

    def __init__(self, name: str, stream: BinaryIO, content_type: str, meta: Meta, path: Path):
        self.name = name
        self.stream = stream
        self.type = content_type
        self.meta = meta
        self.path = path

    def __enter__(self) -> "NamedFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.stream.close()

    def read(self, size: int = -1) -> bytes:
        return self.stream.read(size)

    def seek_start(self) -> None:
        try:
            self.stream.seek(0)
        except (OSError, ValueError) as e:
            raise StorageIOError("seek", str(self.path), e) from e

    def is_text(self) -> bool:
        return is_text(self.type)

    def is_image(self) -> bool:
        return is_image(self.type)

    def content(self) -> str:
        """Read the remaining bytes as text."""
        try:
            return decode_text(self.stream.read())
        except OSError as e:
            raise StorageIOError("read", str(self.path), e) from e


class MetaStore:
    """Files keyed by caller-supplied names, each paired with a meta sidecar."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.objects_dir = self.root / OBJECTS_DIR
        self.meta_dir = self.root / META_DIR

    def ensure_directories(self) -> None:
        for directory in (self.objects_dir, self.meta_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageIOError("mkdir", str(directory), e) from e

    @staticmethod
    def _check_name(name: str) -> None:
        if not name or name in (".", "..") or "/" in name or "\\" in name or "\0" in name:
            raise ValueError(f"invalid name: {name!r}")

    def path(self, name: str) -> Path:
        self._check_name(name)
        return self.objects_dir / f"{name}{NAMED_OBJECT_SUFFIX}"

    def meta_path(self, name: str) -> Path:
        self._check_name(name)
        return self.meta_dir / f"{name}{META_SUFFIX}"

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    def get_meta(self, name: str) -> Meta:
        """
        Read and parse the sidecar for name.

        Raises:
            NotFoundError: If there is no meta file
            CorruptMetaError: If a line has no separator
        """
        meta_path = self.meta_path(name)
        try:
            raw = meta_path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise NotFoundError(f"meta file {name!r} not found") from e
        except OSError as e:
            raise StorageIOError("read", str(meta_path), e) from e
        return parse_meta(raw, name)

    def write_meta(self, name: str, meta: Mapping[str, str]) -> None:
        meta_path = self.meta_path(name)
        payload = serialize_meta(meta)
        try:
            meta_path.parent.mkdir(parents=True, exist_ok=True)
            meta_path.write_text(payload, encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write meta file [name={name}]: {e}")
            raise StorageIOError("write", str(meta_path), e) from e

    def write(self, name: str, file_data: BinaryIO, meta: Optional[Mapping[str, str]] = None) -> None:
        """
        Persist content, then metadata. Not atomic across the two files.
        """
        path = self.path(name)
        # reject bad metadata before the content is touched
        serialize_meta(meta or {})
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'wb') as out:
                shutil.copyfileobj(file_data, out, COPY_PIECE_SIZE_BYTES)
        except OSError as e:
            logger.error(f"Failed to write named file [name={name}]: {e}")
            raise StorageIOError("write", str(path), e) from e

        self.write_meta(name, meta or {})
        logger.debug(f"Wrote named file {name}")

    def get(self, name: str) -> NamedFile:
        """
        Open a named file with its type and metadata. The caller closes it.

        Raises:
            NotFoundError: If the content or meta file is missing
        """
        path = self.path(name)
        try:
            stream = open(path, 'rb')
        except FileNotFoundError as e:
            raise NotFoundError(f"file {name!r} not found") from e
        except OSError as e:
            raise StorageIOError("open", str(path), e) from e

        try:
            meta = self.get_meta(name)
            content_type = classify(stream)
        except Exception:
            stream.close()
            raise

        return NamedFile(name, stream, content_type, meta, path)
