"""Tests for constgen.scanner."""

from __future__ import annotations

from pathlib import Path

import pytest

from constgen.config import ConstGenConfig, load_config
from constgen.scanner import SourceScanner, build_ignore_rule


def _touch(path: Path, content: str = "class X {}\n") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_scanner_finds_java_sources_sorted(tmp_path: Path) -> None:
    _touch(tmp_path / "src" / "b" / "B.java")
    _touch(tmp_path / "src" / "a" / "A.java")
    _touch(tmp_path / "src" / "a" / "notes.txt")

    files = SourceScanner(ConstGenConfig(root=tmp_path, source_roots=[tmp_path / "src"])).scan()

    assert files == [
        (tmp_path / "src" / "a" / "A.java").resolve(),
        (tmp_path / "src" / "b" / "B.java").resolve(),
    ]


def test_scanner_skips_build_dirs_and_ignored_paths(tmp_path: Path) -> None:
    _touch(tmp_path / "src" / "Keep.java")
    _touch(tmp_path / "target" / "generated-sources" / "Gen.java")
    _touch(tmp_path / "legacy" / "Old.java")
    _touch(tmp_path / "src" / "Scratch.java")
    _touch(tmp_path / "src" / "KeepScratch.java")
    (tmp_path / ".gitignore").write_text("*Scratch.java\n!KeepScratch.java\n", encoding="utf-8")
    (tmp_path / ".constgen.yml").write_text("exclude_paths: [legacy/]\n", encoding="utf-8")

    files = SourceScanner(load_config(tmp_path)).scan()

    names = [path.name for path in files]
    assert names == ["Keep.java", "KeepScratch.java"]
    assert "Gen.java" not in names
    assert "Old.java" not in names
    assert "Scratch.java" not in names


def test_scanner_keeps_packages_named_like_build_dirs(tmp_path: Path) -> None:
    _touch(tmp_path / "src" / "com" / "example" / "build" / "Foo.java")
    _touch(tmp_path / "src" / "com" / "example" / "target" / "Bar.java")
    _touch(tmp_path / "build" / "classes" / "Stale.java")

    files = SourceScanner(ConstGenConfig(root=tmp_path)).scan()

    relative = [path.relative_to(tmp_path.resolve()).as_posix() for path in files]
    assert relative == [
        "src/com/example/build/Foo.java",
        "src/com/example/target/Bar.java",
    ]


def test_scanner_skips_configured_output_dir(tmp_path: Path) -> None:
    _touch(tmp_path / "src" / "Keep.java")
    _touch(tmp_path / "src" / "generated" / "FooConstants.java")
    config = ConstGenConfig(root=tmp_path, output_dir=tmp_path / "src" / "generated")

    files = SourceScanner(config).scan()

    assert [path.name for path in files] == ["Keep.java"]


def test_scanner_missing_root(tmp_path: Path) -> None:
    config = ConstGenConfig(root=tmp_path, source_roots=[tmp_path / "missing"])

    with pytest.raises(FileNotFoundError):
        SourceScanner(config).scan()


def test_ignore_rule_semantics() -> None:
    directory_rule = build_ignore_rule("generated/")
    anchored_rule = build_ignore_rule("/src/Only.java")

    assert directory_rule is not None and anchored_rule is not None
    assert directory_rule.matches("a/generated", True)
    assert not directory_rule.matches("a/generated", False)
    assert anchored_rule.matches("src/Only.java", False)
    assert not anchored_rule.matches("other/src/Only.java", False)
    assert build_ignore_rule("   ") is None
