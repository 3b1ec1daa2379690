"""Helper utilities for constructing throwaway Java projects in tests."""

from __future__ import annotations

import re
import textwrap
from pathlib import Path
from typing import Dict, Mapping

from constgen.sources.java import unescape_java

_PUT_RE = re.compile(r'^\s*map\.put\("((?:[^"\\]|\\.)*)", "((?:[^"\\]|\\.)*)"\);$')


class SourceTreeBuilder:
    """Writes Java sources under ``src/main/java`` of a temporary project."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.source_root = self.root / "src" / "main" / "java"
        self.source_root.mkdir(parents=True)

    def write(self, files: Mapping[str, str]) -> None:
        """Write `relative path -> contents` entries below the source root."""
        for relative, content in files.items():
            path = self.source_root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")

    def write_config(self, content: str) -> Path:
        path = self.root / ".constgen.yml"
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    def files(self) -> list[Path]:
        return sorted(self.source_root.rglob("*.java"))


def read_lookup_table(source: str) -> Dict[str, str]:
    """Return the name -> value table populated by a generated lookup class."""
    table: Dict[str, str] = {}
    for line in source.splitlines():
        match = _PUT_RE.match(line)
        if match:
            table[unescape_java(match.group(1))] = unescape_java(match.group(2))
    return table


def lookup(source: str, key: str) -> str | None:
    """Mirror the generated ``lookup(key)`` accessor."""
    return read_lookup_table(source).get(key)


__all__ = ["SourceTreeBuilder", "lookup", "read_lookup_table"]
