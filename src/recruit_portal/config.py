"""Configuration management — env vars (.env) plus the cached settings document."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from recruit_portal.models import BrandingConfig, PanelConfig, PortalSettings

log = logging.getLogger(__name__)

load_dotenv()

DEFAULT_LOGO = (
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


@dataclass
class Config:
    db_path: Path = field(default_factory=lambda: Path("recruit_portal.db"))
    settings_cache_path: Path = field(default_factory=lambda: Path(".recruit_portal_cache.json"))

    jwt_secret: str = "recruit-portal-dev-secret-change-me"
    jwt_expire_days: int = 7
    admin_email: str = ""

    llm_provider: str = "gemini"
    llm_model: str = ""
    gemini_api_key: str = ""
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # Quiet period before a dashboard recomputes after a burst of changes
    dashboard_debounce_ms: int = 250

    def __post_init__(self) -> None:
        if not self.llm_model:
            self.llm_model = {
                "gemini": "gemini-2.5-flash",
                "openai": "gpt-4o-mini",
                "anthropic": "claude-sonnet-4-20250514",
            }.get(self.llm_provider, "gemini-2.5-flash")


def load_config(env_file: str | None = None) -> Config:
    """Load configuration from a .env file and environment variables."""
    if env_file:
        load_dotenv(env_file, override=True)

    return Config(
        db_path=Path(os.getenv("PORTAL_DB_PATH", "recruit_portal.db")),
        settings_cache_path=Path(os.getenv("PORTAL_SETTINGS_CACHE", ".recruit_portal_cache.json")),
        jwt_secret=os.getenv("JWT_SECRET", "recruit-portal-dev-secret-change-me"),
        jwt_expire_days=int(os.getenv("JWT_EXPIRE_DAYS", "7")),
        admin_email=os.getenv("PORTAL_ADMIN_EMAIL", ""),
        llm_provider=os.getenv("LLM_PROVIDER", "gemini"),
        llm_model=os.getenv("LLM_MODEL", ""),
        gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
        dashboard_debounce_ms=int(os.getenv("DASHBOARD_DEBOUNCE_MS", "250")),
    )


# ── Settings document ─────────────────────────────────────────────────────

def merge_settings(saved: dict[str, Any] | None) -> PortalSettings:
    """Overlay a stored settings document on the defaults.

    Branding is merged key by key; a missing logo or panel config keeps the
    default rather than an empty value.
    """
    if not saved:
        return PortalSettings(logo_src=DEFAULT_LOGO)

    data = dict(saved)
    branding = BrandingConfig().model_dump(by_alias=True)
    branding.update(data.get("branding") or {})
    data["branding"] = branding
    data["logoSrc"] = data.get("logoSrc") or data.get("logo_src") or DEFAULT_LOGO
    data["panelConfig"] = data.get("panelConfig") or PanelConfig().model_dump(by_alias=True)
    data.pop("logo_src", None)
    return PortalSettings.model_validate(data)


class SettingsCache:
    """Best-effort local mirror of the settings document.

    Only used to bootstrap before the store answers; never authoritative.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        return raw if isinstance(raw, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        try:
            self.path.write_text(json.dumps(data), encoding="utf-8")
        except OSError as e:
            log.warning("Could not write settings cache %s: %s", self.path, e)

    def load_settings(self) -> PortalSettings:
        cached = self._read().get("appSettings")
        if not isinstance(cached, dict):
            return merge_settings(None)
        try:
            return merge_settings(cached)
        except ValidationError:
            return merge_settings(None)

    def store_settings(self, settings: PortalSettings) -> None:
        data = self._read()
        data["appSettings"] = settings.model_dump(by_alias=True, mode="json")
        self._write(data)
