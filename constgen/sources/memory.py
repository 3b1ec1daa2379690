"""Declaration source backed by an explicit element list."""

from __future__ import annotations

from typing import Iterable, List

from .base import DeclarationSource
from ..models import Element


class InMemorySource(DeclarationSource):
    """Serves a fixed, caller-supplied set of declarations."""

    def __init__(self, elements: Iterable[Element] = ()) -> None:
        self._elements: List[Element] = list(elements)

    def add(self, element: Element) -> None:
        self._elements.append(element)

    def elements(self) -> List[Element]:
        return list(self._elements)


__all__ = ["InMemorySource"]
