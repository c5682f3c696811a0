"""Provider profiles and the client factory."""

import logging
from typing import Optional

import httpx

from ..config import settings
from ..errors import ConfigurationError
from .base import DEFAULT_TIMEOUT, BaseLLMClient
from .gemini import GeminiClient
from .openai_compat import OpenAICompatibleClient
from .types import ProviderProfile, ResponseShape

logger = logging.getLogger(__name__)


PROVIDER_PROFILES: dict[str, ProviderProfile] = {
    "nvidia": ProviderProfile(
        provider_id="nvidia",
        base_url="https://integrate.api.nvidia.com/v1",
        default_model="google/gemma-2-27b-it",
        shape=ResponseShape.OPENAI_CHAT,
        max_output_tokens=1024,
        system_role_unsupported=frozenset({"google/gemma-2-27b-it"}),
    ),
    "groq": ProviderProfile(
        provider_id="groq",
        base_url="https://api.groq.com/openai/v1",
        default_model="gemma2-9b-it",
        shape=ResponseShape.OPENAI_CHAT,
    ),
    "gemini": ProviderProfile(
        provider_id="gemini",
        base_url="https://generativelanguage.googleapis.com",
        default_model="gemini-1.5-flash-latest",
        shape=ResponseShape.GEMINI,
        api_version="v1beta",
    ),
    "openrouter": ProviderProfile(
        provider_id="openrouter",
        base_url="https://openrouter.ai/api/v1",
        default_model="google/gemma-2-9b-it",
        shape=ResponseShape.OPENAI_CHAT,
    ),
}


def get_profile(provider: str) -> ProviderProfile:
    try:
        return PROVIDER_PROFILES[provider]
    except KeyError:
        raise ConfigurationError(
            f"Unknown LLM provider {provider!r}; expected one of {sorted(PROVIDER_PROFILES)}"
        ) from None


def create_client(
    provider: str,
    api_key: str,
    model: Optional[str] = None,
    *,
    timeout: Optional[float] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> BaseLLMClient:
    """Build the client for ``provider`` based on its response shape."""
    profile = get_profile(provider)
    kwargs = {
        "timeout": timeout or DEFAULT_TIMEOUT,
        "http_client": http_client,
    }
    logger.info("Creating LLM client for provider %s (model=%s)", provider, model or profile.default_model)

    if profile.shape is ResponseShape.GEMINI:
        return GeminiClient(profile, api_key, model, **kwargs)

    extra_headers = {}
    if provider == "openrouter":
        extra_headers = {
            "HTTP-Referer": settings.openrouter_site_url,
            "X-Title": settings.openrouter_site_title,
        }
    return OpenAICompatibleClient(profile, api_key, model, extra_headers=extra_headers, **kwargs)
