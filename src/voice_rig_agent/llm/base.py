"""Abstract base class for LLM clients.

Subclasses only describe how to build a request for their wire format; the
request/response handling, streaming and error mapping live here so every
provider behaves the same way.
"""

import json
import logging
from abc import ABC, abstractmethod
from contextlib import aclosing
from typing import Any, AsyncIterator, Optional, Sequence

import httpx

from ..errors import ProviderError, RequestTimeoutError
from .parsers import ResponseParser
from .sse import SSELineBuffer, event_data
from .types import GeneratedText, GenerationConfig, Message, ProviderProfile

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 90.0

# Separator used when a model has no system role and the prompt is folded into the user turn.
PROMPT_SEPARATOR = "\n\n---\n\nUser Request:\n"


def check_messages(messages: Sequence[Message]) -> None:
    if not messages:
        raise ValueError("messages must not be empty")
    if not any(m.role == "user" for m in messages):
        raise ValueError("at least one user message is required")


class BaseLLMClient(ABC):
    """Interface for LLM backends.

    Configuration is read-only after construction, so one client can serve
    concurrent calls. Each call issues its own HTTP request.
    """

    parser: ResponseParser

    def __init__(
        self,
        profile: ProviderProfile,
        api_key: str,
        model: Optional[str] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.profile = profile
        self.api_key = api_key
        self.model = model or profile.default_model
        self.timeout = timeout
        self.log = log or logger
        self._client = http_client

    @property
    def provider_id(self) -> str:
        return self.profile.provider_id

    @property
    def supports_system_role(self) -> bool:
        return self.profile.supports_system_role(self.model)

    def build_messages(self, system_prompt: str, user_text: str) -> list[Message]:
        """Pair a fixed prompt with user input, honouring the system-role quirk."""
        if self.supports_system_role:
            return [Message.system(system_prompt), Message.user(user_text)]
        self.log.warning(
            "%s model %s has no system role: combining prompt into user message",
            self.provider_id, self.model,
        )
        return [Message.user(f"{system_prompt}{PROMPT_SEPARATOR}{user_text}")]

    def max_tokens(self, config: GenerationConfig) -> int:
        return config.max_output_tokens or self.profile.max_output_tokens

    @abstractmethod
    def _build_request(
        self,
        messages: Sequence[Message],
        config: GenerationConfig,
        stream: bool,
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Return ``(url, headers, json_body)`` for one request."""
        ...

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    def _request_timeout(self) -> httpx.Timeout:
        # One duration bounds connect and every read, including each stream chunk.
        return httpx.Timeout(self.timeout)

    async def generate(
        self,
        messages: Sequence[Message],
        config: Optional[GenerationConfig] = None,
    ) -> GeneratedText:
        """Generate a complete response in a single request."""
        check_messages(messages)
        cfg = config or GenerationConfig()
        url, headers, body = self._build_request(messages, cfg, stream=False)
        self.log.debug("%s request: model=%s messages=%d", self.provider_id, self.model, len(messages))

        client = await self._get_client()
        try:
            response = await client.post(url, json=body, headers=headers, timeout=self._request_timeout())
        except httpx.TimeoutException as e:
            self.log.error("%s request timed out after %ss", self.provider_id, self.timeout)
            raise RequestTimeoutError(f"{self.provider_id} request timed out") from e
        except httpx.HTTPError as e:
            self.log.error("%s request failed: %s", self.provider_id, e)
            raise ProviderError(f"{self.provider_id} request failed: {e}") from e

        self.log.debug("%s response status: %s", self.provider_id, response.status_code)
        if not response.is_success:
            self.log.error("%s error (%s): %s", self.provider_id, response.status_code, response.text[:500])
            raise ProviderError(
                f"{self.provider_id} failed to generate content",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                f"{self.provider_id} returned a non-JSON body",
                status_code=response.status_code,
                body=response.text,
            ) from e

        text = self.parser.extract_text(data)
        if text is None:
            self.log.warning("%s response missing expected content structure: %s", self.provider_id, str(data)[:500])
            text = ""
        return GeneratedText(text=text, is_final=True, raw=data)

    async def generate_stream(
        self,
        messages: Sequence[Message],
        config: Optional[GenerationConfig] = None,
    ) -> AsyncIterator[GeneratedText]:
        """Stream a response as growing prefixes, ending with exactly one final item.

        Each call re-issues the request. Closing the iterator early releases
        the underlying connection.
        """
        check_messages(messages)
        cfg = config or GenerationConfig()
        url, headers, body = self._build_request(messages, cfg, stream=True)
        self.log.debug("%s streaming request: model=%s", self.provider_id, self.model)

        client = await self._get_client()
        accumulated = ""
        try:
            async with client.stream(
                "POST", url, json=body, headers=headers, timeout=self._request_timeout()
            ) as response:
                self.log.debug("%s stream response status: %s", self.provider_id, response.status_code)
                if not response.is_success:
                    await response.aread()
                    self.log.error("%s stream error (%s): %s", self.provider_id, response.status_code, response.text[:500])
                    raise ProviderError(
                        f"{self.provider_id} failed to initiate stream",
                        status_code=response.status_code,
                        body=response.text,
                    )

                async with aclosing(self._iter_lines(response)) as lines:
                    async for line in lines:
                        done, fragment, payload = self._parse_event(line)
                        if done:
                            self.log.debug("%s stream received [DONE] marker", self.provider_id)
                            yield GeneratedText(text=accumulated, is_final=True)
                            return
                        if fragment is not None:
                            accumulated += fragment
                            yield GeneratedText(text=accumulated, is_final=False, raw=payload)

        except httpx.TimeoutException as e:
            self.log.error("%s stream timed out after %ss of inactivity", self.provider_id, self.timeout)
            raise RequestTimeoutError(f"{self.provider_id} stream timed out") from e
        except httpx.HTTPError as e:
            self.log.error("%s stream failed: %s", self.provider_id, e)
            raise ProviderError(f"{self.provider_id} stream failed: {e}") from e

        self.log.debug("%s stream ended without [DONE] marker, yielding final content", self.provider_id)
        yield GeneratedText(text=accumulated, is_final=True)

    @staticmethod
    async def _iter_lines(response: httpx.Response) -> AsyncIterator[str]:
        buffer = SSELineBuffer()
        async for chunk in response.aiter_bytes():
            for line in buffer.feed(chunk):
                yield line
        for line in buffer.flush():
            yield line

    def _parse_event(self, line: str) -> tuple[bool, Optional[str], Any]:
        """Return ``(done, fragment, payload)`` for one stream line."""
        data = event_data(line)
        if data is None:
            return False, None, None
        data = data.strip()
        if not data:
            return False, None, None
        if self.parser.done_marker is not None and data == self.parser.done_marker:
            return True, None, None
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            self.log.warning("%s stream: failed to decode event %r: %s", self.provider_id, data[:200], e)
            return False, None, None

        reason = self.parser.finish_reason(payload)
        if reason:
            self.log.debug("%s stream finish reason: %s", self.provider_id, reason)
        return False, self.parser.extract_delta(payload), payload

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None
