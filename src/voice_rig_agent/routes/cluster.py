"""Cluster connection and maintenance endpoints."""

import json
import logging

from fastapi import APIRouter, Request

from ..cluster.config_store import parse_connection_descriptor
from ..cluster.types import ClusterConnectionConfig
from ..errors import ConfigurationError
from ..runtime import get_runtime

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cluster", tags=["cluster"])


def config_from_payload(text: str) -> ClusterConnectionConfig:
    """Accept either the QR descriptor (``lg_*`` keys) or plain field names."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Connection details must be JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError("Connection details must be a JSON object")
    if "lg_ip" in data:
        return parse_connection_descriptor(text)

    try:
        config = ClusterConnectionConfig(
            host=str(data.get("host", "")).strip(),
            port=int(data.get("port") or 22),
            username=str(data.get("username", "")),
            secret=str(data.get("secret", "")),
            node_count=int(data.get("node_count") or 0),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid connection details: {e}") from e
    if not config.is_complete:
        raise ConfigurationError("Connection details are incomplete")
    return config


@router.get("/status")
async def cluster_status():
    return get_runtime().session.status()


@router.post("/config")
async def save_cluster_config(request: Request):
    """Save connection details from a JSON body or scanned QR text."""
    runtime = get_runtime()
    config = config_from_payload((await request.body()).decode("utf-8", errors="replace"))
    runtime.config_store.save(config)
    await runtime.session.update_connection_details(config)
    return runtime.session.status()


@router.post("/connect")
async def connect_cluster():
    session = get_runtime().session
    await session.connect()
    return session.status()


@router.post("/disconnect")
async def disconnect_cluster():
    session = get_runtime().session
    await session.disconnect()
    return session.status()


@router.post("/markup/clear")
async def clear_markup():
    await get_runtime().session.clear_markup()
    return {"success": True, "action": "CLEAR_KML"}


@router.post("/logo")
async def set_logo():
    await get_runtime().session.set_logo()
    return {"success": True, "action": "SET_LOGO"}


@router.post("/logo/clear")
async def clear_logo():
    await get_runtime().session.clear_logo()
    return {"success": True, "action": "CLEAR_LOGO"}


@router.post("/reboot")
async def reboot_cluster():
    session = get_runtime().session
    await session.reboot()
    return {"success": True, "action": "REBOOT_LG", **session.status()}
