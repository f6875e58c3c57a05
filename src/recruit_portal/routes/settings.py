"""Settings routes — the shared portal settings document and vendor directory."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from recruit_portal import database as db
from recruit_portal.auth import require_roles
from recruit_portal.config import Config, SettingsCache, load_config, merge_settings
from recruit_portal.models import AppUser, PortalSettings, UserType, Vendor

log = logging.getLogger(__name__)

router = APIRouter()

_admins = require_roles(UserType.ADMIN)


def get_config() -> Config:
    return load_config()


def _cache() -> SettingsCache:
    return SettingsCache(get_config().settings_cache_path)


def current_settings() -> PortalSettings:
    """Settings from the store, mirrored to the local cache; the cache if the store fails."""
    cache = _cache()
    try:
        settings = merge_settings(db.get_settings())
    except sqlite3.Error as e:
        log.warning("Settings document unavailable, serving cached copy: %s", e)
        return cache.load_settings()
    cache.store_settings(settings)
    return settings


@router.get("")
async def get_portal_settings():
    """Public: branding is needed before anyone signs in."""
    return current_settings().model_dump(by_alias=True)


@router.put("")
async def update_portal_settings(update: dict[str, Any], _user: AppUser = Depends(_admins)):
    try:
        merged = merge_settings({**(db.get_settings() or {}), **update})
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    db.put_settings(merged.model_dump(by_alias=True, mode="json"))
    _cache().store_settings(merged)
    return merged.model_dump(by_alias=True)


@router.get("/vendors")
async def list_vendors(_user: AppUser = Depends(require_roles(UserType.ADMIN, UserType.HR))):
    return [v.model_dump(by_alias=True) for v in current_settings().vendors]


@router.post("/vendors")
async def add_vendor(vendor: Vendor, _user: AppUser = Depends(_admins)):
    settings = current_settings()
    vendors = [v for v in settings.vendors if v.name != vendor.name] + [vendor]
    db.put_settings({"vendors": [v.model_dump(by_alias=True) for v in vendors]})
    log.info("Vendor %s saved with %d brand(s)", vendor.name, len(vendor.brand_names))
    return vendor.model_dump(by_alias=True)
