"""Types for the LLM abstraction layer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class Message:
    """A message in a chat conversation."""
    role: str  # "system", "user", or "assistant"
    text: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}")

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls("system", text)

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls("user", text)

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls("assistant", text)


@dataclass
class GenerationConfig:
    """Configuration for LLM generation."""
    temperature: float = 0.7
    top_p: float = 0.95
    max_output_tokens: Optional[int] = None  # None -> provider profile default


@dataclass(frozen=True)
class GeneratedText:
    """Text produced by a model.

    For streams, successive instances carry growing prefixes of one response;
    exactly one instance per stream has ``is_final`` set.
    """
    text: str
    is_final: bool = True
    raw: Optional[Any] = field(default=None, compare=False, repr=False)


class ResponseShape(Enum):
    """Request/response wire format spoken by a provider."""
    OPENAI_CHAT = "openai_chat"
    GEMINI = "gemini"


@dataclass(frozen=True)
class ProviderProfile:
    """Static description of one language-model backend."""
    provider_id: str
    base_url: str
    default_model: str
    shape: ResponseShape
    max_output_tokens: int = 2048
    api_version: str = ""
    # Models on this provider that reject a distinct system role.
    system_role_unsupported: frozenset = frozenset()

    def supports_system_role(self, model: str) -> bool:
        return model not in self.system_role_unsupported
