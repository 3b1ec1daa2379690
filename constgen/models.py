"""Core data models shared across constgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

STRING_TYPE = "java.lang.String"

TYPE_KINDS = frozenset({"class", "interface", "enum", "record", "annotation"})


class ConstGenError(RuntimeError):
    """Base class for failures that abort a whole generation pass."""


class MissingAnnotationValueError(ConstGenError):
    """Raised when an annotation lacks a required element value."""


@dataclass(frozen=True)
class AnnotationValue:
    """An annotation usage with its resolved element values."""

    name: str
    values: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def value(self, key: str = "value") -> Any:
        try:
            return self.values[key]
        except KeyError:
            raise MissingAnnotationValueError(
                f"@{self.name} is missing required element '{key}'"
            ) from None


@dataclass(frozen=True)
class FieldElement:
    """A field declared directly in a type body."""

    name: str
    type_name: str
    constant_value: Optional[Any] = None


@dataclass
class Element:
    """Declaration view handed to the processor by a declaration source."""

    kind: str
    qualified_name: str
    annotations: List[AnnotationValue] = field(default_factory=list)
    nested: bool = False
    fields: List[FieldElement] = field(default_factory=list)
    origin: Optional[str] = None

    @property
    def is_type(self) -> bool:
        return self.kind in TYPE_KINDS

    def annotation(self, name: str) -> Optional[AnnotationValue]:
        for annotation in self.annotations:
            if annotation.name == name:
                return annotation
        return None


@dataclass(frozen=True)
class AnnotatedClass:
    """A discovered top-level type carrying the marker annotation."""

    qualified_name: str
    target_identifier: str
    element: Element = field(hash=False, compare=False)


@dataclass(frozen=True)
class ConstantField:
    """A string constant collected from an annotated class."""

    name: str
    value: str


@dataclass
class GeneratedUnit:
    """The lookup class to emit for one annotated class."""

    target_identifier: str
    source_name: str
    entries: List[ConstantField] = field(default_factory=list)

    @property
    def package_name(self) -> str:
        return split_qualified_name(self.target_identifier)[0]

    @property
    def simple_class_name(self) -> str:
        return split_qualified_name(self.target_identifier)[1]


class DiagnosticKind(str, Enum):
    ERROR = "ERROR"
    WARNING = "WARNING"
    NOTE = "NOTE"


@dataclass(frozen=True)
class Diagnostic:
    """A build-time message attributed to an optional element."""

    kind: DiagnosticKind
    message: str
    element: Optional[str] = None


def canonical_class_name(name: str) -> str:
    """Normalise binary-name separators (``$``) to source-name separators."""
    return name.replace("$", ".")


def split_qualified_name(name: str) -> Tuple[str, str]:
    """Split ``a.b.C`` into ``("a.b", "C")``; the default package is ``""``."""
    package, _, simple = name.rpartition(".")
    return package, simple


__all__ = [
    "AnnotatedClass",
    "AnnotationValue",
    "ConstGenError",
    "ConstantField",
    "Diagnostic",
    "DiagnosticKind",
    "Element",
    "FieldElement",
    "GeneratedUnit",
    "MissingAnnotationValueError",
    "STRING_TYPE",
    "TYPE_KINDS",
    "canonical_class_name",
    "split_qualified_name",
]
