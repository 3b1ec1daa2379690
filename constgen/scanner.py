"""Java source discovery under the configured source roots."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .config import ConstGenConfig

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    ".gradle",
    ".idea",
    "node_modules",
    "__pycache__",
}

# Build tool output, skipped only directly below the project root.
_BUILD_OUTPUT_DIRS = {"target", "build"}

_JAVA_SUFFIX = ".java"


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .constgen.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        rule = build_ignore_rule(line[1:] if negate else line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class SourceScanner:
    """Finds the Java sources a generation pass should read."""

    def __init__(self, config: ConstGenConfig) -> None:
        self.config = config
        self.rules = _parse_gitignore(config.root / ".gitignore")
        for pattern in config.exclude_paths:
            rule = build_ignore_rule(pattern)
            if rule is not None:
                self.rules.append(rule)

    def scan(self) -> List[Path]:
        """Return every non-ignored ``.java`` file, sorted for stable reads."""
        found = set()
        for source_root in self.config.source_roots:
            root = source_root.expanduser().resolve()
            if not root.exists():
                raise FileNotFoundError(f"Source root not found: {source_root}")
            if root.is_file():
                if root.suffix == _JAVA_SUFFIX:
                    found.add(root)
                continue
            found.update(self._iter_java_files(root))
        return sorted(found)

    def _iter_java_files(self, root: Path) -> Iterator[Path]:
        project_root = self.config.root.resolve()
        output_dir = self.config.output_dir.resolve() if self.config.output_dir else None
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            dirnames[:] = sorted(
                name
                for name in dirnames
                if not self._skip_dir(current_dir / name, project_root, output_dir)
            )
            for filename in filenames:
                if not filename.endswith(_JAVA_SUFFIX):
                    continue
                path = current_dir / filename
                if _should_ignore(self._relative(path, project_root), False, self.rules):
                    continue
                yield path

    def _skip_dir(self, path: Path, project_root: Path, output_dir: Path | None) -> bool:
        if path.name in _EXCLUDED_DIRS:
            return True
        if path.name in _BUILD_OUTPUT_DIRS and path.parent == project_root:
            return True
        if output_dir is not None and path == output_dir:
            return True
        return _should_ignore(self._relative(path, project_root), True, self.rules)

    @staticmethod
    def _relative(path: Path, project_root: Path) -> str:
        try:
            return path.relative_to(project_root).as_posix()
        except ValueError:
            return path.as_posix()


__all__ = ["IgnoreRule", "SourceScanner", "build_ignore_rule"]
