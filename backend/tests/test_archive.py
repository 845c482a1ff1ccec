"""Tests for archive decoding and logical-path normalization."""

import io
import os

import pytest

from pagehost.core.errors import FormatError
from pagehost.ingest import extract_archive, normalize_path
from tests.utils import make_archive, make_tar


def _entries(data: bytes) -> list[tuple[str, bytes]]:
    return [(entry.name, entry.content) for entry in extract_archive(io.BytesIO(data))]


class TestExtractArchive:
    def test_files_in_archive_order(self):
        data = make_archive({"index.html": b"<h1>hi</h1>", "img/logo.png": b"\x89PNG\r\n"})

        assert _entries(data) == [
            ("index.html", b"<h1>hi</h1>"),
            ("img/logo.png", b"\x89PNG\r\n"),
        ]

    def test_directories_are_skipped(self):
        data = make_archive({"img/logo.png": b"png"}, directories=("img",))

        assert _entries(data) == [("img/logo.png", b"png")]

    def test_symlinks_are_skipped(self):
        data = make_archive({"a.txt": b"a"}, symlinks={"b.txt": "a.txt"})

        assert _entries(data) == [("a.txt", b"a")]

    def test_empty_file(self):
        assert _entries(make_archive({"empty.txt": b""})) == [("empty.txt", b"")]

    def test_entries_are_produced_lazily(self):
        data = make_archive({"a.txt": b"a", "b.txt": b"b"})
        entries = extract_archive(io.BytesIO(data))

        assert next(entries).name == "a.txt"
        assert next(entries).name == "b.txt"
        with pytest.raises(StopIteration):
            next(entries)

    def test_not_gzip(self):
        with pytest.raises(FormatError):
            _entries(b"this is not an archive")

    def test_uncompressed_tar_is_rejected(self):
        with pytest.raises(FormatError):
            _entries(make_tar({"index.html": b"hi"}))

    def test_truncated_stream(self):
        data = make_archive({"index.html": b"hi", "big.bin": os.urandom(200_000)})
        entries = extract_archive(io.BytesIO(data[: len(data) // 2]))

        assert next(entries).name == "index.html"
        with pytest.raises(FormatError):
            next(entries)

    def test_corrupted_checksum(self):
        data = bytearray(make_archive({"index.html": b"hi"}))
        # gzip trailer: CRC32 then ISIZE
        data[-8] ^= 0xFF

        with pytest.raises(FormatError):
            _entries(bytes(data))


class TestNormalizePath:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("index.html", "/"),
            ("./index.html", "/"),
            ("a/index.html", "/a/"),
            ("a/b/index.html", "/a/b/"),
            ("img/logo.png", "/img/logo.png"),
            ("./img/logo.png", "/img/logo.png"),
            ("/abs/style.css", "/abs/style.css"),
            ("about.html", "/about.html"),
            ("a/index.htm", "/a/index.htm"),
            ("a/my-index.html", "/a/my-index.html"),
        ],
    )
    def test_normalize(self, name, expected):
        assert normalize_path(name) == expected
