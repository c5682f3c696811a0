"""Classifies a voice transcript into an ``IntentResult``."""

import json
import logging
from typing import Any, Optional

from ..errors import ClassificationFormatError, EmptyResponseError
from ..llm.base import BaseLLMClient
from ..llm.types import GenerationConfig
from ..markup.extractor import strip_code_fences
from .prompts import INTENT_SYSTEM_PROMPT
from .types import Intent, IntentResult

logger = logging.getLogger(__name__)


def _optional_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


class IntentClassifier:
    def __init__(
        self,
        llm: BaseLLMClient,
        system_prompt: str = INTENT_SYSTEM_PROMPT,
        config: Optional[GenerationConfig] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.llm = llm
        self.system_prompt = system_prompt
        self.config = config
        self.log = log or logger

    async def classify(self, transcript: str) -> IntentResult:
        """Classify one transcript.

        Raises:
            EmptyResponseError: the model answered with nothing.
            ClassificationFormatError: the answer was not a JSON object.

        A JSON object without a usable ``intent`` string is not an error; it
        comes back as ``Intent.UNKNOWN`` with ``error`` set.
        """
        self.log.info("Classifying intent for command: %r", transcript)
        messages = self.llm.build_messages(self.system_prompt, transcript)
        response = await self.llm.generate(messages, self.config)

        raw_text = response.text
        cleaned = strip_code_fences(raw_text)
        self.log.debug("Cleaned intent response: %s", cleaned)
        if not cleaned:
            raise EmptyResponseError("Received empty content from the model for intent classification.")

        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            self.log.error("Failed to parse intent JSON: %r", cleaned)
            raise ClassificationFormatError(
                f"Model returned invalid JSON for intent: {e}", raw_text=raw_text, cleaned_text=cleaned
            ) from e
        if not isinstance(data, dict):
            raise ClassificationFormatError(
                "Model returned JSON that is not an object", raw_text=raw_text, cleaned_text=cleaned
            )

        value = data.get("intent")
        if not isinstance(value, str):
            self.log.warning("Intent JSON lacks a string 'intent' key: %s", data)
            return IntentResult(
                intent=Intent.UNKNOWN,
                error="LLM response missing valid intent key.",
                raw=data,
                raw_text=raw_text,
            )

        intent = Intent.from_wire(value)
        if intent is None:
            self.log.warning("Model returned unrecognized intent %r", value)
            return IntentResult(
                intent=Intent.UNKNOWN,
                error=f"Unrecognized intent {value!r}.",
                raw=data,
                raw_text=raw_text,
            )

        self.log.info("Intent classified as %s", intent.value)
        return IntentResult(
            intent=intent,
            query=_optional_str(data.get("query")),
            location_name=_optional_str(data.get("location_name")),
            camera_view=_optional_str(data.get("lookAt")),
            original_query=_optional_str(data.get("original_query")),
            raw=data,
            raw_text=raw_text,
        )
