import pytest

from voice_rig_agent.errors import ConfigurationError, CredentialError
from voice_rig_agent.llm.credentials import JsonCredentialStore, ProviderSelector


@pytest.fixture
def store(tmp_path):
    return JsonCredentialStore(str(tmp_path / "credentials.json"))


def test_set_and_get(store):
    assert store.get("groq") is None
    store.set("groq", "gsk-123")
    assert store.get("groq") == "gsk-123"


def test_env_fallback(store, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    assert store.get("gemini") == "from-env"


def test_unknown_provider(store):
    with pytest.raises(ConfigurationError):
        store.set("mystery", "k")


def test_empty_key_rejected(store):
    with pytest.raises(ConfigurationError):
        store.set("groq", "")


def test_selector_without_active_provider(store):
    with pytest.raises(CredentialError):
        ProviderSelector(store).active_client()


def test_switch_requires_key(store):
    with pytest.raises(CredentialError):
        ProviderSelector(store).switch_provider("nvidia")
    assert store.get_active_provider() is None


async def test_switch_provider(store):
    store.set("openrouter", "or-key")
    selector = ProviderSelector(store, timeout=5.0)

    client = selector.switch_provider("openrouter")

    assert client.provider_id == "openrouter"
    assert client.timeout == 5.0
    assert store.get_active_provider() == "openrouter"
    active = selector.active_client()
    assert active.api_key == "or-key"
    await client.close()
    await active.close()
