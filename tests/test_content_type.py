"""Tests for content sniffing and type predicates."""

import io

import pytest

from objectstore.content_type import (
    SNIFF_LENGTH_BYTES,
    classify,
    decode_text,
    detect_content_type,
    has_binary_data,
    is_image,
    is_text,
    normalize_media_type,
)


class CountingStream(io.BytesIO):
    def __init__(self, data: bytes):
        super().__init__(data)
        self.requested = []

    def read(self, size=-1):
        self.requested.append(size)
        return super().read(size)


class TestClassify:
    """Test classify() against real content prefixes."""

    def test_plain_text(self):
        assert classify(io.BytesIO(b"hello world")) == "text/plain"

    def test_png(self, png_bytes):
        assert classify(io.BytesIO(png_bytes)) == "image/png"

    def test_gif(self):
        assert classify(io.BytesIO(b"GIF89a\x01\x00\x01\x00\x80\x00\x00" + b"\x00" * 32)) == "image/gif"

    def test_binary_is_not_text(self):
        content_type = classify(io.BytesIO(bytes(range(256)) * 4))
        assert not is_text(content_type)

    def test_empty_is_text(self):
        assert classify(io.BytesIO(b"")) == "text/plain"

    def test_reads_at_most_512_bytes(self):
        stream = CountingStream(b"a" * 10_000)
        classify(stream)
        assert stream.requested == [SNIFF_LENGTH_BYTES]

    def test_restores_stream_position(self):
        stream = io.BytesIO(b"hello world")
        classify(stream)
        assert stream.read() == b"hello world"

    def test_restores_non_zero_position(self):
        stream = io.BytesIO(b"prefix:hello world")
        stream.seek(7)
        classify(stream)
        assert stream.tell() == 7

    def test_detect_uses_only_prefix(self):
        head = b"plain words " * 40
        assert detect_content_type(head) == "text/plain"


class TestTextFallback:
    """Text-like content without binary control bytes sniffs as text/plain."""

    @pytest.mark.parametrize("data", [
        b'{"a": 1, "b": [true, null]}',
        b"name,age\nana,31\nbo,42\n",
        b"#!/bin/sh\necho hello\n",
        b"x",
        "caf\u00e9 latin".encode("latin-1"),
    ])
    def test_text_like_content(self, data):
        assert detect_content_type(data) == "text/plain"

    def test_control_bytes_keep_binary_type(self):
        data = b"almost text\x01\x02 but not"
        assert has_binary_data(data)
        assert not detect_content_type(data).startswith("text/")

    @pytest.mark.parametrize("byte", [0x00, 0x08, 0x0B, 0x0E, 0x1A, 0x1C, 0x1F])
    def test_binary_data_bytes(self, byte):
        assert has_binary_data(b"text" + bytes([byte]))

    @pytest.mark.parametrize("byte", [0x09, 0x0A, 0x0C, 0x0D, 0x1B, 0x20, 0xE9])
    def test_text_bytes(self, byte):
        assert not has_binary_data(b"text" + bytes([byte]))

    def test_png_stays_image(self, png_bytes):
        assert detect_content_type(png_bytes) == "image/png"


class TestDecodeText:
    """Decoding keeps every stored byte recoverable."""

    def test_utf8(self):
        assert decode_text("na\u00efve \u2713".encode("utf-8")) == "na\u00efve \u2713"

    def test_latin1(self):
        data = "caf\u00e9 latin".encode("latin-1")
        content = decode_text(data)
        assert "\ufffd" not in content
        assert content == "caf\u00e9 latin"

    def test_unmapped_bytes_decode_without_replacement(self):
        content = decode_text(b"plain \x80\x81\x9d text")
        assert "\ufffd" not in content
        assert content.startswith("plain ")


class TestTypePredicates:
    """Test is_text/is_image and normalization."""

    @pytest.mark.parametrize("value, expected", [
        ("text/plain; charset=utf-8", "text/plain"),
        ("TEXT/HTML", "text/html"),
        ("image/png", "image/png"),
        ("", ""),
    ])
    def test_normalize(self, value, expected):
        assert normalize_media_type(value) == expected

    @pytest.mark.parametrize("content_type", ["text/plain", "text/plain; charset=utf-8"])
    def test_is_text_true(self, content_type):
        assert is_text(content_type)

    @pytest.mark.parametrize("content_type", ["", "text", "text/pl", "text/html", "image/png", None])
    def test_is_text_tolerates_short_and_other_types(self, content_type):
        assert not is_text(content_type)

    @pytest.mark.parametrize("content_type", [
        "image/avif", "image/gif", "image/jpeg", "image/png", "image/svg+xml", "image/webp",
    ])
    def test_is_image_allow_list(self, content_type):
        assert is_image(content_type)

    @pytest.mark.parametrize("content_type", ["", "image/", "image/bmp", "image/png; x=y", "text/plain"])
    def test_is_image_rejects_others(self, content_type):
        assert not is_image(content_type)
