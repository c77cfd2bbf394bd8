"""Tests for directory listing and entry enrichment."""

import asyncio
import json
import os

import pytest

from fsbrowse.core.errors import NotFoundError
from fsbrowse.core.sandbox import UPLOAD_TEMP_PREFIX
from fsbrowse.models.entry import FileType
from fsbrowse.services.lister import describe, parent_of, wire_name


def test_directories_sort_first_then_by_name(root):
    (root / "b.txt").write_text("b")
    (root / "A").mkdir()
    (root / "a.txt").write_text("a")

    entry = asyncio.run(describe(root, "./"))

    assert [c.name for c in entry.children] == ["A", "a.txt", "b.txt"]
    assert entry.type == FileType.DIR
    assert entry.size is None


def test_ordering_is_case_insensitive_with_dirs_grouped(root):
    for name in ["zeta", "Beta", "alpha"]:
        (root / name).mkdir()
    for name in ["Zulu.md", "bravo.md", "Alpha.md"]:
        (root / name).write_text("")

    entry = asyncio.run(describe(root, "./"))

    assert [c.name for c in entry.children] == [
        "alpha", "Beta", "zeta", "Alpha.md", "bravo.md", "Zulu.md",
    ]


def test_children_are_enriched(root):
    (root / "docs").mkdir()
    (root / "docs" / "notes.md").write_text("hello")

    entry = asyncio.run(describe(root / "docs", "docs"))
    child = entry.children[0]

    assert child.name == "notes.md"
    assert child.path == "docs/notes.md"
    assert child.parent_path == "docs"
    assert child.type == FileType.TEXT
    assert child.permissions == ["read", "write"]
    assert child.size == 5
    assert child.time is not None and child.time.modified.endswith("+00:00")


def test_listing_is_not_recursive(root):
    (root / "a" / "b").mkdir(parents=True)
    (root / "a" / "b" / "deep.txt").write_text("")

    entry = asyncio.run(describe(root, "./"))

    assert [c.name for c in entry.children] == ["a"]
    assert entry.children[0].children is None


def test_unstattable_child_still_listed(root):
    (root / "ok.txt").write_text("ok")
    (root / "dangling").symlink_to(root / "missing-target")

    entry = asyncio.run(describe(root, "./"))
    dangling = next(c for c in entry.children if c.name == "dangling")

    assert dangling.type == FileType.SYMLINK
    assert dangling.permissions == "EACCES"
    assert dangling.size == 0
    assert dangling.time is None
    assert len(entry.children) == 2


def test_describe_single_file(root):
    (root / "photo.PNG").write_bytes(b"\x89PNG")

    entry = asyncio.run(describe(root / "photo.PNG", "photo.PNG"))

    assert entry.children is None
    assert entry.type == FileType.IMAGE
    assert entry.size == 4
    assert entry.parent_path == "."


def test_describe_missing_path(root):
    with pytest.raises(NotFoundError) as exc:
        asyncio.run(describe(root / "nope", "nope"))
    assert exc.value.code == "ENOENT"


def test_wire_format_uses_camel_case_and_drops_absent_fields(root):
    (root / "a.txt").write_text("a")

    wire = asyncio.run(describe(root, "./")).to_wire()

    assert wire["parentPath"] == "."
    assert "size" not in wire and "permissions" not in wire
    assert wire["children"][0]["parentPath"] == "./"
    assert set(wire["children"][0]["time"]) == {"create", "access", "modified"}


def test_parent_of():
    assert parent_of("./") == "."
    assert parent_of("a") == "."
    assert parent_of("a/b/") == "a"


def test_wire_name_replaces_undecodable_bytes():
    assert wire_name(os.fsdecode(b"bad\xff.txt")) == "bad\ufffd.txt"
    assert wire_name("café.txt") == "café.txt"


def test_non_utf8_child_name_is_listed(root):
    with open(os.path.join(os.fsencode(root), b"bad\xff.txt"), "wb") as f:
        f.write(b"raw")
    (root / "ok.txt").write_text("ok")

    entry = asyncio.run(describe(root, "./"))

    assert [c.name for c in entry.children] == ["bad\ufffd.txt", "ok.txt"]
    bad = entry.children[0]
    assert bad.path == "bad\ufffd.txt"
    assert bad.size == 3
    json.dumps(entry.to_wire(), ensure_ascii=False).encode("utf-8")


def test_upload_temp_files_are_hidden(root):
    (root / f"{UPLOAD_TEMP_PREFIX}0123abcd").write_bytes(b"partial")
    (root / "done.txt").write_text("done")

    entry = asyncio.run(describe(root, "./"))

    assert [c.name for c in entry.children] == ["done.txt"]
