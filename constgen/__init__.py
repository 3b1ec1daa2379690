"""Build-time generator of static constant lookup classes for Java types."""

from .models import ConstGenError
from .processor import ConstantProviderProcessor, ProcessingResult

__version__ = "0.1.0"

__all__ = ["ConstGenError", "ConstantProviderProcessor", "ProcessingResult", "__version__"]
