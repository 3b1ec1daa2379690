"""Declaration sources feeding the constant-provider processor."""

from .base import DeclarationSource, SourceError
from .java import JavaSourceReader
from .memory import InMemorySource

__all__ = ["DeclarationSource", "InMemorySource", "JavaSourceReader", "SourceError"]
