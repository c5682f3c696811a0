"""Persisted cluster connection details and the QR connection descriptor."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from ..errors import ConfigurationError
from .types import ClusterConnectionConfig

logger = logging.getLogger(__name__)

DESCRIPTOR_KEYS = ("lg_ip", "lg_port", "lg_user", "lg_pass", "lg_screens")


def _to_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e


def parse_connection_descriptor(text: str) -> ClusterConnectionConfig:
    """Parse the JSON descriptor carried by a connection QR code.

    Example::

        {"lg_ip": "192.168.1.10", "lg_port": "22", "lg_user": "lg",
         "lg_pass": "lg", "lg_screens": 3}
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Connection descriptor is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError("Connection descriptor must be a JSON object")

    missing = [key for key in DESCRIPTOR_KEYS if data.get(key) in (None, "")]
    if missing:
        raise ConfigurationError(f"Connection descriptor is missing fields: {', '.join(missing)}")

    return ClusterConnectionConfig(
        host=str(data["lg_ip"]).strip(),
        port=_to_int(data["lg_port"], "lg_port"),
        username=str(data["lg_user"]),
        secret=str(data["lg_pass"]),
        node_count=_to_int(data["lg_screens"], "lg_screens"),
    )


class ClusterConfigStore:
    """JSON file holding the last saved connection details."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> Optional[ClusterConnectionConfig]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read cluster config %s: %s", self.path, e)
            return None
        try:
            config = ClusterConnectionConfig(
                host=data.get("host", ""),
                port=int(data.get("port") or 0),
                username=data.get("username", ""),
                secret=data.get("secret", ""),
                node_count=int(data.get("node_count") or 0),
            )
        except (TypeError, ValueError) as e:
            logger.warning("Invalid cluster config in %s: %s", self.path, e)
            return None
        return config if config.is_complete else None

    def save(self, config: ClusterConnectionConfig) -> None:
        payload = {
            "host": config.host,
            "port": config.port,
            "username": config.username,
            "secret": config.secret,
            "node_count": config.node_count,
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        logger.info("Saved cluster config for %s", config.host)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
