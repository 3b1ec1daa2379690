"""Base classes for declaration sources."""

from abc import ABC, abstractmethod
from typing import List

from ..models import ConstGenError, Element


class SourceError(ConstGenError):
    """Raised when the program model cannot be built from the inputs."""


class DeclarationSource(ABC):
    """Contract for components that expose the program model to the processor."""

    @abstractmethod
    def elements(self) -> List[Element]:
        """Return every declaration known to this source."""

    def elements_annotated_with(self, annotation_name: str) -> List[Element]:
        """Return the declarations carrying ``annotation_name``, in source order."""
        return [
            element
            for element in self.elements()
            if element.annotation(annotation_name) is not None
        ]
