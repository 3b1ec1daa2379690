"""Tests for constgen.filer."""

from __future__ import annotations

from pathlib import Path

import pytest

from constgen.filer import DirectoryFiler, FilerError, MemoryFiler, is_java_identifier


def test_directory_filer_writes_under_package_path(tmp_path: Path) -> None:
    filer = DirectoryFiler(tmp_path / "out")

    source_file = filer.create_source_file("com.example.FooConstants")
    with source_file.open_writer() as writer:
        writer.write("class FooConstants {}\n")

    path = tmp_path / "out" / "com" / "example" / "FooConstants.java"
    assert path.read_text(encoding="utf-8") == "class FooConstants {}\n"


def test_directory_filer_default_package(tmp_path: Path) -> None:
    filer = DirectoryFiler(tmp_path)

    assert filer.path_for("Lookup") == tmp_path / "Lookup.java"


def test_directory_filer_overwrites_previous_runs(tmp_path: Path) -> None:
    target = tmp_path / "a" / "B.java"
    target.parent.mkdir(parents=True)
    target.write_text("stale", encoding="utf-8")

    with DirectoryFiler(tmp_path).create_source_file("a.B").open_writer() as writer:
        writer.write("fresh")

    assert target.read_text(encoding="utf-8") == "fresh"


def test_recreating_a_type_fails(tmp_path: Path) -> None:
    filer = DirectoryFiler(tmp_path)
    filer.create_source_file("a.B")

    with pytest.raises(FilerError, match="recreate"):
        filer.create_source_file("a.B")


@pytest.mark.parametrize("name", ["", "a..B", "a.class.B", "a.1B", "a.B-C", "a.B "])
def test_invalid_names_are_rejected(name: str) -> None:
    with pytest.raises(FilerError, match="Invalid type name"):
        MemoryFiler().create_source_file(name)


def test_writer_is_closed_when_writing_fails(tmp_path: Path) -> None:
    source_file = DirectoryFiler(tmp_path).create_source_file("a.B")
    captured = []

    with pytest.raises(RuntimeError):
        with source_file.open_writer() as writer:
            captured.append(writer)
            writer.write("partial")
            raise RuntimeError("boom")

    assert captured[0].closed


def test_memory_filer_records_only_completed_writes() -> None:
    filer = MemoryFiler()

    with filer.create_source_file("a.Done").open_writer() as writer:
        writer.write("done")
    with pytest.raises(RuntimeError):
        with filer.create_source_file("a.Broken").open_writer() as writer:
            writer.write("half")
            raise RuntimeError("boom")

    assert filer.outputs == {"a.Done": "done"}


def test_java_identifiers() -> None:
    assert is_java_identifier("Foo$Bar")
    assert is_java_identifier("_private")
    assert not is_java_identifier("_")
    assert not is_java_identifier("enum")
