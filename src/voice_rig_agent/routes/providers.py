"""Language model provider settings endpoints."""

from fastapi import APIRouter, Form

from ..llm.providers import PROVIDER_PROFILES, get_profile
from ..runtime import get_runtime

router = APIRouter(prefix="/providers", tags=["providers"])


@router.get("")
async def list_providers():
    """List known providers with key and active status. Keys are never returned."""
    store = get_runtime().credentials
    active = store.get_active_provider()
    return {
        "active": active,
        "providers": [
            {
                "id": profile.provider_id,
                "default_model": profile.default_model,
                "has_key": store.get(profile.provider_id) is not None,
                "active": profile.provider_id == active,
            }
            for profile in PROVIDER_PROFILES.values()
        ],
    }


@router.post("/{provider}/key")
async def save_provider_key(provider: str, api_key: str = Form(...)):
    get_profile(provider)
    get_runtime().credentials.set(provider, api_key.strip())
    return {"provider": provider, "has_key": True}


@router.post("/{provider}/activate")
async def activate_provider(provider: str):
    get_profile(provider)
    llm = get_runtime().selector.switch_provider(provider)
    await llm.close()
    return {"active": provider, "model": llm.model}
