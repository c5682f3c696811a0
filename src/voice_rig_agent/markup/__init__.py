"""KML extraction, validation and generation."""

from .document import MarkupDocument
from .extractor import extract_markup, strip_code_fences, validate_markup
from .generator import MarkupGenerator

__all__ = ["MarkupDocument", "MarkupGenerator", "extract_markup", "strip_code_fences", "validate_markup"]
