import json
import os
import stat

import pytest

from voice_rig_agent.cluster.config_store import ClusterConfigStore, parse_connection_descriptor
from voice_rig_agent.cluster.types import ClusterConnectionConfig
from voice_rig_agent.errors import ConfigurationError


def test_parse_descriptor_with_string_numbers():
    text = json.dumps({"lg_ip": "192.168.1.10", "lg_port": "2222", "lg_user": "lg", "lg_pass": "pw", "lg_screens": "5"})
    config = parse_connection_descriptor(text)
    assert config == ClusterConnectionConfig(host="192.168.1.10", port=2222, username="lg", secret="pw", node_count=5)


def test_parse_descriptor_with_int_numbers():
    text = json.dumps({"lg_ip": "h", "lg_port": 22, "lg_user": "u", "lg_pass": "p", "lg_screens": 3})
    assert parse_connection_descriptor(text).node_count == 3


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[1, 2]",
        json.dumps({"lg_ip": "h", "lg_port": 22, "lg_user": "u", "lg_pass": "p"}),
        json.dumps({"lg_ip": "h", "lg_port": "ssh", "lg_user": "u", "lg_pass": "p", "lg_screens": 3}),
        json.dumps({"lg_ip": "", "lg_port": 22, "lg_user": "u", "lg_pass": "p", "lg_screens": 3}),
    ],
)
def test_parse_descriptor_rejects(text):
    with pytest.raises(ConfigurationError):
        parse_connection_descriptor(text)


def test_save_and_load(tmp_path, rig_config):
    store = ClusterConfigStore(str(tmp_path / "cluster.json"))
    assert store.load() is None

    store.save(rig_config)
    assert store.load() == rig_config
    assert stat.S_IMODE(os.stat(store.path).st_mode) == 0o600

    store.clear()
    assert store.load() is None
    store.clear()


def test_load_incomplete_returns_none(tmp_path):
    path = tmp_path / "cluster.json"
    path.write_text(json.dumps({"host": "h", "port": 22, "username": "u", "secret": "", "node_count": 3}))
    assert ClusterConfigStore(str(path)).load() is None

    path.write_text("{broken")
    assert ClusterConfigStore(str(path)).load() is None
