"""Shared pytest fixtures for all tests."""

import io

import pytest

from dabba.database import Database
from dabba.meta_store import MetaStore
from dabba.services.revision_index import RevisionIndex
from dabba.store import open_store
from objectstore.object_storage import ObjectStorage


PNG_HEADER = (
    b"\x89PNG\r\n\x1a\n"
    b"\x00\x00\x00\rIHDR"
    b"\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
    b"\x1f\x15\xc4\x89"
)


class FakeClock:
    """
    Deterministic epoch-seconds clock for revision ordering tests.
    """

    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: int = 1) -> None:
        self.now += seconds


@pytest.fixture
def store_root(tmp_path):
    """
    Create temporary store root directory.

    Returns:
        Path to an empty store root
    """
    root = tmp_path / 'store'
    root.mkdir()
    return root


@pytest.fixture
def store(store_root):
    """
    Open a fresh store and close it after the test.
    """
    handle = open_store(store_root)
    yield handle
    handle.close()


@pytest.fixture
def objects(store_root):
    return ObjectStorage(store_root)


@pytest.fixture
def database(store_root):
    db = Database(store_root / 'index.db')
    db.init_schema()
    return db


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def revisions(database, clock):
    return RevisionIndex(database, clock=clock)


@pytest.fixture
def meta_store(store_root):
    store = MetaStore(store_root)
    store.ensure_directories()
    return store


@pytest.fixture
def text_stream():
    return io.BytesIO(b"hello world")


@pytest.fixture
def png_bytes():
    return PNG_HEADER + b"\x00" * 64
