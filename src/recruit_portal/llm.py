"""Unified LLM interface via LiteLLM."""

from __future__ import annotations

from typing import Any

from recruit_portal.config import Config

_PROVIDER_PREFIXES = ("anthropic", "openai", "gemini")


def _model_name(cfg: Config) -> str:
    """Build the LiteLLM model string (e.g. 'gemini/gemini-2.5-flash')."""
    model = cfg.llm_model
    # A provider prefix supplied by the user wins
    if "/" in model:
        return model
    if cfg.llm_provider in _PROVIDER_PREFIXES:
        return f"{cfg.llm_provider}/{model}"
    return model


def _api_key(cfg: Config) -> str | None:
    keys = {
        "anthropic": cfg.anthropic_api_key,
        "openai": cfg.openai_api_key,
        "gemini": cfg.gemini_api_key,
    }
    return keys.get(cfg.llm_provider) or None


def chat(
    cfg: Config,
    system: str,
    messages: list[dict],
    max_tokens: int = 1024,
    temperature: float | None = None,
) -> str:
    from litellm import completion

    kwargs: dict[str, Any] = {
        "model": _model_name(cfg),
        "messages": [{"role": "system", "content": system}] + messages,
        "max_tokens": max_tokens,
    }

    api_key = _api_key(cfg)
    if api_key:
        kwargs["api_key"] = api_key
    if temperature is not None:
        kwargs["temperature"] = temperature

    resp = completion(**kwargs)
    return resp.choices[0].message.content or ""
