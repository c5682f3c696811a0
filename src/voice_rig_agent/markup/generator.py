"""Turns a natural-language query into a validated KML document."""

import logging
from contextlib import aclosing
from typing import AsyncIterator, Optional

from ..errors import EmptyResponseError, GenerationFailedError, MarkupValidationError
from ..llm.base import BaseLLMClient
from ..llm.types import GenerationConfig
from .document import MarkupDocument
from .extractor import extract_markup, validate_markup
from .prompts import KML_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class MarkupGenerator:
    """KML generation on top of any ``BaseLLMClient``.

    Provider and transport errors propagate unchanged; only output that fails
    validation is wrapped in ``GenerationFailedError``.
    """

    def __init__(
        self,
        llm: BaseLLMClient,
        system_prompt: str = KML_SYSTEM_PROMPT,
        config: Optional[GenerationConfig] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.llm = llm
        self.system_prompt = system_prompt
        self.config = config
        self.log = log or logger

    async def generate(self, query: str) -> MarkupDocument:
        self.log.info("Generating KML for query: %r", query)
        messages = self.llm.build_messages(self.system_prompt, query)
        response = await self.llm.generate(messages, self.config)

        if not response.text.strip():
            self.log.warning("KML generation returned empty content")
            raise EmptyResponseError("Received empty content from the model for KML generation.")
        return self._finalize(response.text)

    async def generate_stream(self, query: str) -> AsyncIterator[MarkupDocument]:
        """Stream variant kept for symmetry with ``generate``.

        Only the finished document is yielded; intermediate text is consumed
        but never surfaced, so this yields exactly one item.
        """
        self.log.info("Generating KML stream for query: %r", query)
        messages = self.llm.build_messages(self.system_prompt, query)

        accumulated = ""
        async with aclosing(self.llm.generate_stream(messages, self.config)) as stream:
            async for chunk in stream:
                accumulated = chunk.text
                if chunk.is_final:
                    break

        if not accumulated.strip():
            self.log.warning("KML stream finished with empty content")
            raise EmptyResponseError("Received empty content from the model for KML generation.")
        yield self._finalize(accumulated)

    def _finalize(self, raw_text: str) -> MarkupDocument:
        candidate = extract_markup(raw_text, self.log)
        try:
            validate_markup(candidate)
        except MarkupValidationError as e:
            self.log.error("KML validation failed after generation: %s", e)
            raise GenerationFailedError(f"Generated content failed KML validation: {e}") from e

        document = MarkupDocument.from_validated(candidate)
        self.log.info("KML generated and validated (%d chars, %d coordinates)",
                      len(document.text), len(document.coordinates))
        return document
