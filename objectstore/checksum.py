"""Streaming SHA-1 digest helpers for objects."""

import hashlib
from typing import BinaryIO

from common.constants import COPY_PIECE_SIZE_BYTES
from common.exceptions import HashError


class IncrementalChecksumCalculator:
    """
    Calculate SHA-1 digest incrementally for streaming data.

    Usage:
        calculator = IncrementalChecksumCalculator()
        calculator.update(piece1)
        calculator.update(piece2)
        digest = calculator.finalize()
    """

    def __init__(self):
        self._hasher = hashlib.sha1()
        self._finalized = False

    def update(self, data: bytes) -> None:
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)

    def finalize(self) -> str:
        self._finalized = True
        return self._hasher.hexdigest()


def compute_stream_digest(stream: BinaryIO, rewind: bool = True) -> str:
    """
    Hash a stream from its current position to EOF, then seek back to 0.

    Callers read the same stream twice (hash, then persist), so the rewind
    is part of the contract.

    Args:
        stream: Seekable binary stream
        rewind: Seek to the start after hashing

    Returns:
        Hex SHA-1 digest of the consumed bytes

    Raises:
        HashError: phase "hash" when reading fails, "seek" when rewinding fails
    """
    calculator = IncrementalChecksumCalculator()
    try:
        while True:
            piece = stream.read(COPY_PIECE_SIZE_BYTES)
            if not piece:
                break
            calculator.update(piece)
    except (OSError, ValueError) as e:
        raise HashError("hash", e) from e

    if rewind:
        try:
            stream.seek(0)
        except (OSError, ValueError) as e:
            raise HashError("seek", e) from e

    return calculator.finalize()
