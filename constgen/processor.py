"""Constant-provider processing: discovery, extraction, ordering, generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Sequence

from .config import DEFAULT_MARKER
from .diagnostics import ErrorLog, Messager
from .filer import Filer
from .generator import SourceGenerator
from .logging import get_logger
from .models import (
    STRING_TYPE,
    AnnotatedClass,
    ConstantField,
    DiagnosticKind,
    Element,
    FieldElement,
    GeneratedUnit,
    canonical_class_name,
)
from .sources.base import DeclarationSource


def accept_all(element: Element) -> bool:
    return True


@dataclass
class ProcessingResult:
    """Outcome of one processing pass."""

    generated: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class ConstantProviderProcessor:
    """Generates a static lookup class for every marked top-level type.

    Each marked type names the class to generate in its marker payload. Its
    directly declared ``String`` constants become entries of a lookup table;
    types without any such constant produce nothing.
    """

    def __init__(
        self,
        filer: Filer,
        messager: Messager | None = None,
        error_log: ErrorLog | None = None,
        *,
        marker: str = DEFAULT_MARKER,
        generator: SourceGenerator | None = None,
        accept_class: Callable[[Element], bool] = accept_all,
    ) -> None:
        self.filer = filer
        self.messager = messager or Messager()
        self.error_log = error_log
        self.marker = marker
        self.generator = generator or SourceGenerator()
        self.accept_class = accept_class
        self.logger = get_logger("processor")

    def process(self, source: DeclarationSource) -> ProcessingResult:
        """Run discovery through generation for every marked declaration."""
        discovered = self.discover(source.elements_annotated_with(self.marker))
        self.logger.debug("Discovered %d constant provider classes", len(discovered))

        result = ProcessingResult()
        units: List[GeneratedUnit] = []
        for annotated in self.annotated_classes(discovered):
            unit = self.extract(annotated)
            if unit.entries:
                units.append(unit)
            else:
                self.logger.debug("No string constants on %s; skipping", annotated.qualified_name)
                result.skipped.append(annotated.qualified_name)

        for unit in order_units(units):
            if self.generate(unit):
                result.generated.append(unit.target_identifier)
            else:
                result.failed.append(unit.target_identifier)
        return result

    def discover(self, elements: Iterable[Element]) -> Dict[str, Element]:
        """Return marked top-level types keyed by canonical name, in ascending order."""
        found: Dict[str, Element] = {}
        for element in elements:
            # only top-level types are supported, not nested ones
            if element.is_type and not element.nested and self.accept_class(element):
                found[canonical_class_name(element.qualified_name)] = element
        return {name: found[name] for name in sorted(found)}

    def annotated_classes(self, discovered: Dict[str, Element]) -> List[AnnotatedClass]:
        classes: List[AnnotatedClass] = []
        for name, element in discovered.items():
            annotation = element.annotation(self.marker)
            if annotation is None:
                continue
            classes.append(
                AnnotatedClass(
                    qualified_name=name,
                    target_identifier=str(annotation.value()),
                    element=element,
                )
            )
        return classes

    def extract(self, annotated: AnnotatedClass) -> GeneratedUnit:
        """Collect the string constants of one class in case-insensitive name order."""
        collected: Dict[str, ConstantField] = {}
        for field_element in dict.fromkeys(annotated.element.fields):
            if not _is_string_constant(field_element):
                continue
            key = ignore_case_key(field_element.name)
            previous = collected.get(key)
            if previous is not None and previous.name != field_element.name:
                self.messager.print_message(
                    DiagnosticKind.WARNING,
                    f"Constants {previous.name} and {field_element.name} on "
                    f"{annotated.qualified_name} differ only by case; keeping {field_element.name}",
                    element=annotated.qualified_name,
                )
            collected[key] = ConstantField(name=field_element.name, value=field_element.constant_value)
        entries = [collected[key] for key in sorted(collected)]
        return GeneratedUnit(
            target_identifier=annotated.target_identifier,
            source_name=annotated.qualified_name,
            entries=entries,
        )

    def generate(self, unit: GeneratedUnit) -> bool:
        """Write the lookup class for ``unit``; failures are reported, not raised."""
        fqn = unit.target_identifier
        try:
            source_file = self.filer.create_source_file(fqn)
            with source_file.open_writer() as writer:
                writer.write(self.generator.render(unit))
        except Exception as exc:
            message = f"Unable to generate source code file: {fqn}"
            self.messager.print_message(
                DiagnosticKind.ERROR, f"{message}: {exc}", element=unit.source_name
            )
            if self.error_log is not None:
                self.error_log.dump(message, exc)
            return False
        self.logger.info("Generated %s (%d constants)", fqn, len(unit.entries))
        return True


def order_units(units: Sequence[GeneratedUnit]) -> List[GeneratedUnit]:
    """Order units by target identifier, then by the source class name."""
    return sorted(units, key=lambda unit: (unit.target_identifier, unit.source_name))


def ignore_case_key(name: str) -> str:
    """Key that orders and equates names the way Java's ``compareToIgnoreCase`` does.

    Each character is upper-cased and then lower-cased on its own, so
    characters whose case mapping expands (``ß``, ``İ``) fold to one
    character instead of several.
    """
    return "".join(_fold_char(char) for char in name)


def _fold_char(char: str) -> str:
    upper = char.upper()
    if len(upper) != 1:
        upper = char
    return upper.lower()[0]


def _is_string_constant(field_element: FieldElement) -> bool:
    return field_element.type_name == STRING_TYPE and isinstance(
        field_element.constant_value, str
    )


__all__ = [
    "ConstantProviderProcessor",
    "ProcessingResult",
    "accept_all",
    "ignore_case_key",
    "order_units",
]
