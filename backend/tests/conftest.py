"""Shared test fixtures for backend tests."""

import pytest
from fastapi.testclient import TestClient

from fsbrowse.core.config import Settings
from fsbrowse.core.sandbox import Sandbox


@pytest.fixture
def root(tmp_path):
    """Empty sandbox root directory, with a sibling that must never be reachable."""
    base = tmp_path / "files"
    base.mkdir()
    (tmp_path / "files-other").mkdir()
    (tmp_path / "secret.txt").write_text("outside the sandbox")
    return base


@pytest.fixture
def sandbox(root):
    return Sandbox.from_directory(root)


@pytest.fixture
def settings(root):
    return Settings(base_dir=root, base_path="/files")


@pytest.fixture
def client(settings):
    """FastAPI TestClient serving the temporary root under /files."""
    from fsbrowse.main import create_app

    with TestClient(create_app(settings)) as c:
        yield c


def multipart_body(boundary: str, parts: list[tuple[str, str | None, bytes]]) -> bytes:
    """Build a multipart/form-data body from (field name, filename or None, data) parts."""
    out = b""
    for name, filename, data in parts:
        disposition = f'form-data; name="{name}"'
        if filename is not None:
            disposition += f'; filename="{filename}"'
        out += f"--{boundary}\r\nContent-Disposition: {disposition}\r\n".encode()
        if filename is not None:
            out += b"Content-Type: application/octet-stream\r\n"
        out += b"\r\n" + data + b"\r\n"
    out += f"--{boundary}--\r\n".encode()
    return out
