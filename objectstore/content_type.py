"""Content sniffing: derive a MIME type from the first bytes of an object."""

import codecs
from functools import lru_cache
from typing import BinaryIO, Optional

import magic

from common.constants import (
    BINARY_DATA_BYTES,
    COPY_PIECE_SIZE_BYTES,
    IMAGE_MIME_TYPES,
    SIGNATURE_MIME_TYPES,
    SNIFF_LENGTH_BYTES,
    TEXT_MIME_PREFIX,
)
from common.exceptions import StorageIOError

EMPTY_CONTENT_TYPE = "text/plain"
BINARY_CONTENT_TYPE = "application/octet-stream"

# libmagic answers that carry no usable character set
_NON_TEXT_CHARSETS = frozenset({"binary", "unknown-8bit", "ebcdic"})


@lru_cache(maxsize=1)
def _encoding_detector() -> magic.Magic:
    return magic.Magic(mime_encoding=True)


def normalize_media_type(content_type: str) -> str:
    """Strip parameters such as ``; charset=utf-8`` and lowercase the type."""
    return content_type.split(";", 1)[0].strip().lower()


def has_binary_data(head: bytes) -> bool:
    """True if the prefix contains a control byte that never appears in text."""
    return any(byte in BINARY_DATA_BYTES for byte in head)


def detect_content_type(head: bytes) -> str:
    """
    Sniff a MIME type from a content prefix.

    libmagic decides image and other signature-based formats. Anything else
    whose prefix is free of binary control bytes is ``text/plain``, so JSON,
    CSV and scripts are all returned as text. A prefix with control bytes is
    never reported as plain text.

    Args:
        head: Up to the first 512 bytes of the content

    Returns:
        Normalized MIME type without parameters
    """
    head = head[:SNIFF_LENGTH_BYTES]
    if not head:
        return EMPTY_CONTENT_TYPE

    sniffed = normalize_media_type(str(magic.from_buffer(head, mime=True)))
    if sniffed in IMAGE_MIME_TYPES or sniffed in SIGNATURE_MIME_TYPES:
        return sniffed
    if not has_binary_data(head):
        return TEXT_MIME_PREFIX
    if sniffed.startswith("text/"):
        return BINARY_CONTENT_TYPE
    return sniffed


def detect_charset(data: bytes) -> Optional[str]:
    """
    Ask libmagic for the character set of a text sample.

    Returns:
        A codec name Python knows, or None
    """
    charset = str(_encoding_detector().from_buffer(data[:COPY_PIECE_SIZE_BYTES])).strip().lower()
    if not charset or charset in _NON_TEXT_CHARSETS:
        return None
    try:
        return codecs.lookup(charset).name
    except LookupError:
        return None


def decode_text(data: bytes) -> str:
    """
    Decode text content without losing bytes.

    UTF-8 first, then the charset libmagic reports, then latin-1, which maps
    every byte to one code point so ``content.encode("latin-1")`` gives the
    stored bytes back.
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        pass

    charset = detect_charset(data)
    if charset is not None:
        try:
            return data.decode(charset)
        except UnicodeDecodeError:
            pass
    return data.decode("latin-1")


def classify(stream: BinaryIO) -> str:
    """
    Read at most 512 bytes from the stream and sniff its type.

    The stream is put back where it was, so sniffing leaves it intact for
    subsequent readers.

    Raises:
        StorageIOError: If reading or repositioning the stream fails
    """
    try:
        position = stream.tell()
        head = stream.read(SNIFF_LENGTH_BYTES)
        stream.seek(position)
    except (OSError, ValueError) as e:
        raise StorageIOError("sniff", str(getattr(stream, "name", "<stream>")), e) from e
    return detect_content_type(head)


def is_text(content_type: str) -> bool:
    return (content_type or "").startswith(TEXT_MIME_PREFIX)


def is_image(content_type: str) -> bool:
    return content_type in IMAGE_MIME_TYPES
