"""Client for OpenAI-compatible chat-completions endpoints (NVIDIA, Groq, OpenRouter)."""

from typing import Any, Optional, Sequence

from .base import BaseLLMClient
from .parsers import OpenAIChatParser
from .types import GenerationConfig, Message, ProviderProfile


class OpenAICompatibleClient(BaseLLMClient):
    """LLM client that talks to a ``/chat/completions`` endpoint."""

    parser = OpenAIChatParser()

    def __init__(
        self,
        profile: ProviderProfile,
        api_key: str,
        model: Optional[str] = None,
        *,
        extra_headers: Optional[dict[str, str]] = None,
        **kwargs,
    ):
        super().__init__(profile, api_key, model, **kwargs)
        # Drop unset optional headers (e.g. OpenRouter attribution).
        self.extra_headers = {k: v for k, v in (extra_headers or {}).items() if v}

    @property
    def chat_url(self) -> str:
        return f"{self.profile.base_url.rstrip('/')}/chat/completions"

    def _build_request(
        self,
        messages: Sequence[Message],
        config: GenerationConfig,
        stream: bool,
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream" if stream else "application/json",
            **self.extra_headers,
        }
        body = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.text} for m in messages],
            "temperature": config.temperature,
            "top_p": config.top_p,
            "max_tokens": self.max_tokens(config),
            "stream": stream,
        }
        return self.chat_url, headers, body
