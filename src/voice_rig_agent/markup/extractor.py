"""Cleaning and validation of KML returned by a language model."""

import logging
import xml.etree.ElementTree as ET
from typing import Optional

from ..errors import MarkupValidationError

logger = logging.getLogger(__name__)

START_TOKENS = ("<?xml", "<kml")
END_TOKEN = "</kml>"


def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence (```xml ... ``` or ``` ... ```)."""
    content = text.strip()
    if not content.startswith("```"):
        return content

    logger.debug("Detected Markdown fence around model output, removing it")
    newline = content.find("\n")
    # The opening fence line may carry a language tag (```xml, ```json).
    body = content[newline + 1:] if newline != -1 else content[3:]
    body = body.rstrip()
    if body.endswith("```"):
        body = body[:-3]
    return body.strip()


def _find_start(content: str) -> int:
    positions = [p for p in (content.find(token) for token in START_TOKENS) if p != -1]
    return min(positions) if positions else -1


def extract_markup(raw_text: str, log: Optional[logging.Logger] = None) -> str:
    """Best-effort extraction of the KML document from noisy model output.

    Never fails: when no document boundaries are found the cleaned text is
    returned as-is and rejection is left to ``validate_markup``.
    """
    log = log or logger
    content = strip_code_fences(raw_text)

    start = _find_start(content)
    if start == -1:
        log.warning("Could not find a KML start tag in model output")
        return content
    if start > 0:
        log.warning("Discarding %d characters of text before the KML start tag", start)
        content = content[start:]

    end = content.rfind(END_TOKEN)
    if end == -1:
        log.warning("Could not find closing %s tag in model output", END_TOKEN)
        return content

    extracted = content[:end + len(END_TOKEN)]
    log.debug("Extracted KML block (%d chars)", len(extracted))
    return extracted


def validate_markup(document: str) -> None:
    """Raise ``MarkupValidationError`` unless ``document`` is a well-formed KML tree."""
    trimmed = document.strip()
    if not trimmed.startswith(START_TOKENS) or not trimmed.endswith(END_TOKEN):
        raise MarkupValidationError("KML content missing valid start/end tags.")

    try:
        root = ET.fromstring(trimmed)
    except ET.ParseError as e:
        raise MarkupValidationError(f"Invalid KML XML structure: {e}") from e

    # Namespaced roots look like "{http://www.opengis.net/kml/2.2}kml".
    if root.tag.rsplit("}", 1)[-1] != "kml":
        raise MarkupValidationError(f"Unexpected root element {root.tag!r}; expected kml")
