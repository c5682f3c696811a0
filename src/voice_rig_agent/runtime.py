"""Long-lived objects shared by the HTTP routes."""

import logging
from dataclasses import dataclass

from .cluster.config_store import ClusterConfigStore
from .cluster.session import ClusterSession
from .config import AppSettings
from .dispatcher import CommandExecutor, VoiceTurn
from .intent.classifier import IntentClassifier
from .intent.processor import CommandProcessor
from .llm.base import BaseLLMClient
from .llm.credentials import JsonCredentialStore, ProviderSelector
from .markup.generator import MarkupGenerator

logger = logging.getLogger(__name__)


@dataclass
class RigRuntime:
    session: ClusterSession
    config_store: ClusterConfigStore
    credentials: JsonCredentialStore
    selector: ProviderSelector

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "RigRuntime":
        config_store = ClusterConfigStore(settings.cluster_config_path)
        credentials = JsonCredentialStore(settings.credentials_path)
        session = ClusterSession(
            config_store.load(),
            connect_timeout=settings.cluster_connect_timeout,
            logo_path=settings.logo_path,
        )
        selector = ProviderSelector(credentials, model=settings.llm_model or None, timeout=settings.llm_timeout)
        return cls(session=session, config_store=config_store, credentials=credentials, selector=selector)

    def build_turn(self, llm: BaseLLMClient) -> VoiceTurn:
        """Wire a voice turn around ``llm``. The caller owns and closes the client."""
        generator = MarkupGenerator(llm)
        processor = CommandProcessor(IntentClassifier(llm), generator)
        return VoiceTurn(processor, CommandExecutor(self.session, generator))


_runtime: RigRuntime = None  # type: ignore


def get_runtime() -> RigRuntime:
    """Get the runtime set at app startup."""
    return _runtime


def set_runtime(runtime: RigRuntime) -> None:
    global _runtime
    _runtime = runtime
