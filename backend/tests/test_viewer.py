"""Tests for inline preview."""

import pytest

from fsbrowse.core.errors import FileTooLargeError, NotFoundError, ValidationError
from fsbrowse.services.viewer import DEFAULT_MAX_BYTES, read_preview


def test_text_file(root):
    (root / "hello.txt").write_text("héllo\r\nworld", encoding="utf-8")
    preview = read_preview(root / "hello.txt")
    assert preview.text == "héllo\r\nworld"
    assert preview.size == len("héllo\r\nworld".encode())
    assert not preview.binary


def test_binary_file_gets_placeholder(root):
    (root / "blob.bin").write_bytes(b"\xff\xfe\x00\x81" * 4)
    preview = read_preview(root / "blob.bin")
    assert preview.text == "[Binary file - 16 bytes]"
    assert preview.binary


def test_exactly_at_limit_succeeds(root):
    (root / "big.txt").write_bytes(b"a" * DEFAULT_MAX_BYTES)
    assert read_preview(root / "big.txt").size == 5 * 1024 * 1024


def test_one_byte_over_limit_is_too_large(root):
    (root / "big.txt").write_bytes(b"a" * (DEFAULT_MAX_BYTES + 1))
    with pytest.raises(FileTooLargeError) as exc:
        read_preview(root / "big.txt")
    assert exc.value.code == "FILE_TOO_LARGE"
    assert exc.value.status_code == 413


def test_directory_rejected(root):
    with pytest.raises(ValidationError) as exc:
        read_preview(root)
    assert exc.value.code == "IS_DIRECTORY"


def test_missing_file(root):
    with pytest.raises(NotFoundError):
        read_preview(root / "ghost.txt")
