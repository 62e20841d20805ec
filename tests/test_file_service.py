"""Tests for the file service: write-then-index and read assembly."""

import io
import sqlite3
from datetime import datetime

import pytest

from common.exceptions import NotFoundError, StorageIOError, TransactionError
from dabba.repositories.log_repository import LogRepository
from dabba.schemas.files import FileResponse

HELLO_WORLD_SHA1 = "2aae6c35c94fcfb415dbe95f408b9ce91ee846ed"


class TestCreateAndRead:
    """Create a logical file and read it back."""

    def test_hello_world_scenario(self, store, text_stream):
        file_id = store.files.create_file(text_stream)
        assert file_id == 1

        result = store.files.read(1)
        assert isinstance(result, FileResponse)
        assert result.id == 1
        assert result.object_id == HELLO_WORLD_SHA1
        assert result.content == "hello world"
        assert result.type.startswith("text/plain")
        assert result.tags == []
        assert isinstance(result.created_at, datetime)
        assert result.created_at == result.updated_at

    def test_object_written_before_index(self, store, text_stream):
        file_id = store.files.create_file(text_stream)
        logical_file = store.revisions.resolve(file_id)
        assert store.objects.get_object_path(logical_file.object_id).read_bytes() == b"hello world"

    @pytest.mark.parametrize("data", [
        b"just text",
        b"line one\nline two\n",
        "unicode text: café naïve".encode("utf-8"),
        b"",
    ])
    def test_text_round_trip(self, store, data):
        file_id = store.files.create_file(io.BytesIO(data))
        result = store.files.read(file_id)
        assert result.type.startswith("text/plain")
        assert result.content == data.decode("utf-8")

    @pytest.mark.parametrize("data", [
        b'{"name": "ana", "age": 31}',
        b"name,age\nana,31\n",
        b"#!/bin/sh\necho hello\n",
        b"x",
    ])
    def test_text_like_content_is_inlined(self, store, data):
        file_id = store.files.create_file(io.BytesIO(data))
        result = store.files.read(file_id)
        assert result.type == "text/plain"
        assert result.content == data.decode("ascii")

    def test_latin1_text_keeps_characters(self, store):
        data = "caf\u00e9 latin".encode("latin-1")
        file_id = store.files.create_file(io.BytesIO(data))
        result = store.files.read(file_id)
        assert result.type == "text/plain"
        assert result.content == "caf\u00e9 latin"

    def test_text_larger_than_sniff_window(self, store):
        data = ("lorem ipsum dolor sit amet\n" * 200).encode("ascii")
        file_id = store.files.create_file(io.BytesIO(data))
        assert store.files.read(file_id).content == data.decode("ascii")

    def test_image_is_returned_by_reference(self, store, png_bytes):
        file_id = store.files.create_file(io.BytesIO(png_bytes))
        result = store.files.read(file_id)
        assert result.type == "image/png"
        assert result.content == ""

        with store.files.open_content(file_id) as f:
            assert f.read() == png_bytes

    def test_binary_has_type_and_no_content(self, store):
        file_id = store.files.create_file(io.BytesIO(bytes(range(256)) * 4))
        result = store.files.read(file_id)
        assert result.type
        assert not result.type.startswith("text/plain")
        assert result.content == ""

    def test_same_content_two_files_share_object(self, store):
        first = store.files.create_file(io.BytesIO(b"shared"))
        second = store.files.create_file(io.BytesIO(b"shared"))
        assert first != second
        assert store.files.read(first).object_id == store.files.read(second).object_id
        assert len(store.objects.list_objects()) == 1

    def test_read_unknown_id(self, store):
        with pytest.raises(NotFoundError):
            store.files.read(404)

    def test_read_missing_object(self, store, text_stream):
        file_id = store.files.create_file(text_stream)
        store.objects.get_object_path(HELLO_WORLD_SHA1).unlink()
        with pytest.raises(NotFoundError):
            store.files.read(file_id)

    def test_json_serialization(self, store, text_stream):
        file_id = store.files.create_file(text_stream)
        payload = store.files.read(file_id).model_dump(mode="json")
        assert set(payload) == {"id", "object_id", "created_at", "updated_at", "tags", "type", "content"}
        assert payload["tags"] == []


class TestUpdate:
    """Update a logical file's content."""

    def test_update_preserves_id(self, store):
        file_id = store.files.create_file(io.BytesIO(b"first draft"))
        object_id = store.files.update_file(file_id, io.BytesIO(b"second draft"))

        result = store.files.read(file_id)
        assert result.id == file_id
        assert result.object_id == object_id
        assert result.content == "second draft"
        assert len(store.files.history(file_id)) == 2

    def test_superseded_object_kept_on_disk(self, store):
        file_id = store.files.create_file(io.BytesIO(b"v1"))
        old_object = store.files.read(file_id).object_id
        store.files.update_file(file_id, io.BytesIO(b"v2"))
        assert store.objects.get_object_path(old_object).read_bytes() == b"v1"

    def test_history_lists_every_revision(self, store):
        file_id = store.files.create_file(io.BytesIO(b"v1"))
        store.files.update_file(file_id, io.BytesIO(b"v2"))
        store.files.update_file(file_id, io.BytesIO(b"v3"))

        history = store.files.history(file_id)
        contents = [store.objects.get_object_path(entry.object_id).read_bytes() for entry in history]
        assert contents == [b"v1", b"v2", b"v3"]
        assert all(entry.file_id == file_id for entry in history)

    def test_update_unknown_id_leaves_orphan_object(self, store):
        with pytest.raises(NotFoundError):
            store.files.update_file(77, io.BytesIO(b"orphan"))
        assert len(store.objects.list_objects()) == 1

    def test_failed_commit_can_be_retried(self, store, monkeypatch):
        original_append = LogRepository.append
        calls = {"count": 0}

        def flaky_append(conn, file_id, object_id, timestamp):
            calls["count"] += 1
            if calls["count"] == 1:
                raise sqlite3.OperationalError("disk I/O error")
            original_append(conn, file_id, object_id, timestamp)

        monkeypatch.setattr(LogRepository, "append", staticmethod(flaky_append))

        with pytest.raises(TransactionError):
            store.files.create_file(io.BytesIO(b"retry me"))
        file_id = store.files.create_file(io.BytesIO(b"retry me"))

        assert store.files.read(file_id).content == "retry me"
        assert len(store.objects.list_objects()) == 1
        assert [f.id for f in store.revisions.list_files()] == [file_id]

    def test_write_failure_leaves_index_untouched(self, store, monkeypatch):
        file_id = store.files.create_file(io.BytesIO(b"v1"))

        def broken_copy(*args, **kwargs):
            raise OSError("No space left on device")

        monkeypatch.setattr("objectstore.object_storage.shutil.copyfileobj", broken_copy)
        with pytest.raises(StorageIOError):
            store.files.update_file(file_id, io.BytesIO(b"v2"))

        assert len(store.files.history(file_id)) == 1


class TestIntegrity:
    """Verify stored objects and report unreferenced ones."""

    def test_verify_current_object(self, store):
        file_id = store.files.create_file(io.BytesIO(b"intact"))
        assert store.files.verify(file_id)

        object_id = store.files.read(file_id).object_id
        store.objects.get_object_path(object_id).write_bytes(b"bit rot")
        assert not store.files.verify(file_id)

    def test_verify_unknown_file(self, store):
        with pytest.raises(NotFoundError):
            store.files.verify(5)

    def test_unreferenced_objects_after_failed_update(self, store):
        file_id = store.files.create_file(io.BytesIO(b"v1"))
        store.files.update_file(file_id, io.BytesIO(b"v2"))
        assert store.files.unreferenced_objects() == []

        with pytest.raises(NotFoundError):
            store.files.update_file(999, io.BytesIO(b"lost"))

        orphans = store.files.unreferenced_objects()
        assert len(orphans) == 1
        assert store.objects.get_object_path(orphans[0]).read_bytes() == b"lost"
