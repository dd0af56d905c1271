"""Test reading and atomically writing documents."""

import os

import pytest
from unittest.mock import patch

from pledit.errors import InvalidEncoding
from pledit.storage import decode_lines, encode_lines, read_lines, write_lines


@pytest.mark.parametrize("data,lines", [
    (b"", [""]),
    (b"a", ["a"]),
    (b"a\n", ["a"]),
    (b"a\n\n", ["a", ""]),
    (b"a\r\nb\r\n", ["a", "b"]),
    ("é\n".encode("utf-8"), ["é"]),
])
def test_decode_lines(data, lines):
    assert decode_lines(data) == lines


def test_decode_invalid_names_line():
    with pytest.raises(InvalidEncoding, match="doc.txt: invalid UTF-8 sequence at line 2"):
        decode_lines(b"ok\nbad \xff\n", "doc.txt")


def test_encode_lines():
    assert encode_lines(["a", "", "é"]) == "a\n\né\n".encode("utf-8")


def test_read_lines(tmp_path):
    path = tmp_path / "doc.txt"
    path.write_bytes(b"one\ntwo\n")
    assert read_lines(str(path)) == ["one", "two"]


def test_read_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_lines(str(tmp_path / "missing.txt"))


def test_write_lines(tmp_path):
    path = tmp_path / "out.txt"
    write_lines(str(path), ["abc", "d"])
    assert path.read_bytes() == b"abc\nd\n"
    assert os.listdir(tmp_path) == ["out.txt"]


def test_write_replaces_existing(tmp_path):
    path = tmp_path / "out.txt"
    path.write_text("old\n", encoding="utf-8")
    write_lines(str(path), ["new"])
    assert path.read_text(encoding="utf-8") == "new\n"


def test_write_round_trip(tmp_path):
    path = tmp_path / "out.txt"
    lines = ["tab\there", "", "ünïcödé"]
    write_lines(str(path), lines)
    assert read_lines(str(path)) == lines


def test_failed_write_keeps_original(tmp_path):
    path = tmp_path / "out.txt"
    path.write_text("original\n", encoding="utf-8")
    with patch("pledit.storage.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(OSError, match="disk full"):
            write_lines(str(path), ["new"])
    assert path.read_text(encoding="utf-8") == "original\n"
    assert os.listdir(tmp_path) == ["out.txt"]
