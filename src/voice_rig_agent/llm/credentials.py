"""API key storage and active-provider selection."""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Protocol

from ..config import settings
from ..errors import ConfigurationError, CredentialError
from .base import BaseLLMClient
from .providers import PROVIDER_PROFILES, create_client, get_profile

logger = logging.getLogger(__name__)

ACTIVE_PROVIDER_KEY = "active_provider"


class CredentialStore(Protocol):
    """Key-value secret storage keyed by provider id."""

    def get(self, provider: str) -> Optional[str]: ...

    def set(self, provider: str, secret: str) -> None: ...

    def get_active_provider(self) -> Optional[str]: ...

    def set_active_provider(self, provider: str) -> None: ...


class JsonCredentialStore:
    """Stores keys in a JSON file readable only by the current user.

    ``get`` falls back to ``<PROVIDER>_API_KEY`` in the environment when the
    file has no entry.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read credential file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def get(self, provider: str) -> Optional[str]:
        get_profile(provider)
        key = self._read().get("keys", {}).get(provider) or os.getenv(f"{provider.upper()}_API_KEY")
        logger.debug("API key for %s: %s", provider, "exists" if key else "not found")
        return key or None

    def set(self, provider: str, secret: str) -> None:
        get_profile(provider)
        if not secret:
            raise ConfigurationError("API key cannot be empty.")
        data = self._read()
        data.setdefault("keys", {})[provider] = secret
        self._write(data)
        logger.info("API key saved for provider %s", provider)

    def get_active_provider(self) -> Optional[str]:
        provider = self._read().get(ACTIVE_PROVIDER_KEY) or settings.llm_provider or None
        if provider and provider not in PROVIDER_PROFILES:
            logger.warning("Invalid active provider %r found; no provider selected", provider)
            return None
        return provider

    def set_active_provider(self, provider: str) -> None:
        get_profile(provider)
        data = self._read()
        data[ACTIVE_PROVIDER_KEY] = provider
        self._write(data)
        logger.info("Active LLM provider set to %s", provider)


class ProviderSelector:
    """Builds the model client for whichever provider is currently active."""

    def __init__(self, store: CredentialStore, model: Optional[str] = None, timeout: Optional[float] = None):
        self.store = store
        self.model = model
        self.timeout = timeout

    def active_client(self) -> BaseLLMClient:
        provider = self.store.get_active_provider()
        if provider is None:
            raise CredentialError("No active LLM provider configured. Please select one in Settings.")

        api_key = self.store.get(provider)
        if not api_key:
            raise CredentialError(f"API key for the selected provider ({provider}) is not set.")
        return create_client(provider, api_key, self.model, timeout=self.timeout)

    def switch_provider(self, provider: str) -> BaseLLMClient:
        if not self.store.get(provider):
            raise CredentialError(f"API key for provider {provider} is not set. Please add it in Settings.")
        self.store.set_active_provider(provider)
        logger.info("Switched LLM provider to %s", provider)
        return self.active_client()
