"""Creation of generated Java source files."""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import ContextManager, Dict, Iterator, Set, TextIO

from .models import split_qualified_name

JAVA_KEYWORDS = frozenset(
    {
        "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
        "class", "const", "continue", "default", "do", "double", "else", "enum",
        "extends", "final", "finally", "float", "for", "goto", "if", "implements",
        "import", "instanceof", "int", "interface", "long", "native", "new",
        "package", "private", "protected", "public", "return", "short", "static",
        "strictfp", "super", "switch", "synchronized", "this", "throw", "throws",
        "transient", "try", "void", "volatile", "while", "true", "false", "null",
        "_",
    }
)


class FilerError(OSError):
    """Raised when a source file cannot be created."""


def is_java_identifier(name: str) -> bool:
    if not name or name in JAVA_KEYWORDS:
        return False
    return name.replace("$", "_").isidentifier()


def validate_qualified_name(name: str) -> None:
    """Raise FilerError unless every segment of ``name`` is a Java identifier."""
    segments = name.split(".")
    invalid = [segment for segment in segments if not is_java_identifier(segment)]
    if invalid:
        raise FilerError(f"Invalid type name '{name}'")


class SourceFile(ABC):
    """Handle to one generated source file."""

    def __init__(self, qualified_name: str) -> None:
        self.qualified_name = qualified_name

    @abstractmethod
    def open_writer(self) -> ContextManager[TextIO]:
        """Return a context manager yielding a writer closed on every exit path."""


class Filer(ABC):
    """Creates source files, refusing to create the same type twice per run."""

    def __init__(self) -> None:
        self._created: Set[str] = set()

    def create_source_file(self, qualified_name: str) -> SourceFile:
        validate_qualified_name(qualified_name)
        if qualified_name in self._created:
            raise FilerError(f"Attempt to recreate a file for type '{qualified_name}'")
        source_file = self._create(qualified_name)
        self._created.add(qualified_name)
        return source_file

    @abstractmethod
    def _create(self, qualified_name: str) -> SourceFile:
        ...


class _PathSourceFile(SourceFile):
    def __init__(self, qualified_name: str, path: Path) -> None:
        super().__init__(qualified_name)
        self.path = path

    @contextmanager
    def open_writer(self) -> Iterator[TextIO]:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8", newline="\n") as handle:
            yield handle


class DirectoryFiler(Filer):
    """Writes ``<root>/<package path>/<Simple>.java`` files."""

    def __init__(self, root: Path) -> None:
        super().__init__()
        self.root = root

    def path_for(self, qualified_name: str) -> Path:
        package, simple = split_qualified_name(qualified_name)
        directory = self.root.joinpath(*package.split(".")) if package else self.root
        return directory / f"{simple}.java"

    def _create(self, qualified_name: str) -> SourceFile:
        return _PathSourceFile(qualified_name, self.path_for(qualified_name))


class _MemorySourceFile(SourceFile):
    def __init__(self, qualified_name: str, outputs: Dict[str, str]) -> None:
        super().__init__(qualified_name)
        self._outputs = outputs

    @contextmanager
    def open_writer(self) -> Iterator[TextIO]:
        buffer = io.StringIO()
        try:
            yield buffer
            self._outputs[self.qualified_name] = buffer.getvalue()
        finally:
            buffer.close()


class MemoryFiler(Filer):
    """Keeps generated sources in memory, keyed by qualified name."""

    def __init__(self) -> None:
        super().__init__()
        self.outputs: Dict[str, str] = {}

    def _create(self, qualified_name: str) -> SourceFile:
        return _MemorySourceFile(qualified_name, self.outputs)


__all__ = [
    "DirectoryFiler",
    "Filer",
    "FilerError",
    "MemoryFiler",
    "SourceFile",
    "is_java_identifier",
    "validate_qualified_name",
]
