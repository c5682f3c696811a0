"""Per-shape response parsers.

Each parser knows where a provider puts the generated text, both in a full
response and in a single streamed event. Missing fields yield ``None`` rather
than raising; the caller decides what an absent field means.
"""

from typing import Any, Optional


class ResponseParser:
    """Strategy interface selected by ``ProviderProfile.shape``."""

    #: Literal ``data:`` payload that terminates a stream, if the shape has one.
    done_marker: Optional[str] = None

    def extract_text(self, payload: Any) -> Optional[str]:
        raise NotImplementedError

    def extract_delta(self, payload: Any) -> Optional[str]:
        raise NotImplementedError

    def finish_reason(self, payload: Any) -> Optional[str]:
        return None


def _first(items: Any) -> Optional[dict]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


class OpenAIChatParser(ResponseParser):
    """``choices[0].message.content`` / ``choices[0].delta.content``."""

    done_marker = "[DONE]"

    def extract_text(self, payload: Any) -> Optional[str]:
        if not isinstance(payload, dict):
            return None
        choice = _first(payload.get("choices"))
        if choice is None:
            return None
        message = choice.get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        return content if isinstance(content, str) else None

    def extract_delta(self, payload: Any) -> Optional[str]:
        if not isinstance(payload, dict):
            return None
        choice = _first(payload.get("choices"))
        if choice is None:
            return None
        delta = choice.get("delta")
        if not isinstance(delta, dict):
            return None
        content = delta.get("content")
        return content if isinstance(content, str) else None

    def finish_reason(self, payload: Any) -> Optional[str]:
        choice = _first(payload.get("choices")) if isinstance(payload, dict) else None
        return choice.get("finish_reason") if choice else None


class GeminiParser(ResponseParser):
    """``candidates[0].content.parts[0].text`` for both full and streamed payloads."""

    def extract_text(self, payload: Any) -> Optional[str]:
        if not isinstance(payload, dict):
            return None
        candidate = _first(payload.get("candidates"))
        if candidate is None:
            return None
        content = candidate.get("content")
        if not isinstance(content, dict):
            return None
        part = _first(content.get("parts"))
        if part is None:
            return None
        text = part.get("text")
        return text if isinstance(text, str) else None

    # Each streamed event carries the next fragment in the same place.
    extract_delta = extract_text

    def finish_reason(self, payload: Any) -> Optional[str]:
        candidate = _first(payload.get("candidates")) if isinstance(payload, dict) else None
        return candidate.get("finishReason") if candidate else None
