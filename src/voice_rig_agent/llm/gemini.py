"""Client for the Gemini generateContent / streamGenerateContent API."""

from typing import Any, Sequence

from .base import BaseLLMClient
from .parsers import GeminiParser
from .types import GenerationConfig, Message


class GeminiClient(BaseLLMClient):
    """LLM client for Google's Gemini-native request shape.

    Gemini has no ``system`` role inside ``contents``; system messages are
    sent as ``systemInstruction`` and assistant turns use the ``model`` role.
    """

    parser = GeminiParser()

    def model_url(self, stream: bool) -> str:
        version = self.profile.api_version or "v1beta"
        action = "streamGenerateContent?alt=sse" if stream else "generateContent"
        return f"{self.profile.base_url.rstrip('/')}/{version}/models/{self.model}:{action}"

    def _build_request(
        self,
        messages: Sequence[Message],
        config: GenerationConfig,
        stream: bool,
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        system_text = "\n\n".join(m.text for m in messages if m.role == "system")
        contents = [
            {
                "role": "model" if m.role == "assistant" else "user",
                "parts": [{"text": m.text}],
            }
            for m in messages
            if m.role != "system"
        ]
        body: dict[str, Any] = {
            "contents": contents,
            "generationConfig": {
                "temperature": config.temperature,
                "topP": config.top_p,
                "maxOutputTokens": self.max_tokens(config),
            },
        }
        if system_text:
            body["systemInstruction"] = {"parts": [{"text": system_text}]}

        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }
        return self.model_url(stream), headers, body
