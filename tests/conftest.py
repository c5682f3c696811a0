"""Shared fakes for the model, the SSH transport and sequence delays."""

import io
from contextlib import contextmanager

import httpx
import pytest

from voice_rig_agent.cluster.session import ClusterSession
from voice_rig_agent.cluster.transport import CommandOutput
from voice_rig_agent.cluster.types import ClusterConnectionConfig
from voice_rig_agent.config import settings
from voice_rig_agent.llm.providers import create_client
from voice_rig_agent.llm.types import GeneratedText, Message


EIFFEL_KML = """<?xml version="1.0" encoding="UTF-8"?>
<kml xmlns="http://www.opengis.net/kml/2.2">
  <Document>
    <name>Eiffel Tower</name>
    <Placemark>
      <name>Eiffel Tower</name>
      <Point><coordinates>2.2945,48.8584,0</coordinates></Point>
    </Placemark>
  </Document>
</kml>"""


class FakeLLM:
    """Returns queued responses in order; exceptions in the queue are raised."""

    provider_id = "fake"
    model = "fake-model"

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def build_messages(self, system_prompt, user_text):
        return [Message.system(system_prompt), Message.user(user_text)]

    async def generate(self, messages, config=None):
        self.calls.append(list(messages))
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return GeneratedText(text=item)

    async def generate_stream(self, messages, config=None):
        text = (await self.generate(messages, config)).text
        for end in range(10, len(text), 10):
            yield GeneratedText(text=text[:end], is_final=False)
        yield GeneratedText(text=text, is_final=True)

    async def close(self):
        self.closed = True


class FakeTransport:
    """In-memory stand-in for ``SSHTransport`` that logs into a shared event list.

    ``responses`` maps a command substring to a ``CommandOutput`` to return or
    an exception to raise.
    """

    def __init__(self, events):
        self.events = events
        self.responses = {}
        self.uploads = {}
        self.remote_handles = []
        self.writer_factory = io.BytesIO
        self.connect_error = None
        self.active = False
        self.closed = False

    def connect(self):
        if self.connect_error is not None:
            raise self.connect_error
        self.active = True

    def run(self, command):
        self.events.append(("run", command))
        for marker, outcome in self.responses.items():
            if marker in command:
                if isinstance(outcome, BaseException):
                    raise outcome
                return outcome
        return CommandOutput(stdout="", stderr="", exit_status=0)

    @contextmanager
    def open_remote(self, path, mode="wb"):
        self.events.append(("upload", path))
        handle = self.writer_factory()
        self.remote_handles.append(handle)
        try:
            yield handle
            self.uploads[path] = handle.getvalue()
        finally:
            handle.close()

    def is_active(self):
        return self.active

    def close(self):
        self.active = False
        self.closed = True


@pytest.fixture(autouse=True)
def no_env_provider(monkeypatch):
    monkeypatch.setattr(settings, "llm_provider", "")
    for provider in ("NVIDIA", "GROQ", "GEMINI", "OPENROUTER"):
        monkeypatch.delenv(f"{provider}_API_KEY", raising=False)


@pytest.fixture
def events():
    return []


@pytest.fixture
def recording_sleep(events):
    async def sleep(seconds):
        events.append(("sleep", seconds))
    return sleep


@pytest.fixture
def rig_config():
    return ClusterConnectionConfig(host="10.0.0.5", port=22, username="lg", secret="s3cret", node_count=3)


@pytest.fixture
def transport(events):
    return FakeTransport(events)


@pytest.fixture
def session(rig_config, transport, recording_sleep, tmp_path):
    return ClusterSession(
        rig_config,
        transport_factory=lambda config, timeout: transport,
        on_connect=(),
        sleep=recording_sleep,
        temp_dir=str(tmp_path),
    )


@pytest.fixture
async def connected_session(session, events):
    await session.connect()
    events.clear()
    return session


@pytest.fixture
def make_client():
    """Build a real provider client whose HTTP goes to ``handler``."""
    def factory(provider, handler, model=None, timeout=90.0):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return create_client(provider, "test-key", model, timeout=timeout, http_client=http_client)
    return factory
