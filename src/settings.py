"""Runtime configuration for perplexity-nudge.

User-editable settings live in ``perplexity.json`` (or ``perplexity.jsonc``)
inside the OpenCode config directory. Environment variables, optionally
loaded from a ``.env`` file, take precedence over the file. The result is a
frozen ``PluginConfig`` built once at startup and passed around explicitly.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from adapters import jsonc
from core.config import DEFAULT_MCP_URL, DEFAULT_MODEL, KeywordsConfig, PluginConfig

LOGGER = logging.getLogger(__name__)

CONFIG_FILE = "perplexity.json"
CONFIG_FILE_JSONC = "perplexity.jsonc"

ENV_API_KEY = "PERPLEXITY_API_KEY"
ENV_MCP_URL = "PERPLEXITY_MCP_URL"
ENV_MODEL = "PERPLEXITY_MODEL"
ENV_DEBUG = "PERPLEXITY_DEBUG"
ENV_CONFIG_DIR = "OPENCODE_CONFIG_DIR"


def get_config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Return the OpenCode config directory."""

    environ = os.environ if environ is None else environ
    if env_path := environ.get(ENV_CONFIG_DIR):
        return Path(env_path)
    return Path.home() / ".config" / "opencode"


def get_config_file_path(config_dir: Optional[Path] = None) -> Path:
    return (config_dir or get_config_dir()) / CONFIG_FILE


def find_config_file(config_dir: Path) -> Optional[Path]:
    """Prefer perplexity.json, fall back to perplexity.jsonc."""

    for name in (CONFIG_FILE, CONFIG_FILE_JSONC):
        candidate = config_dir / name
        if candidate.exists():
            return candidate
    return None


def load_config_file(config_dir: Path) -> dict[str, Any]:
    """Read the settings file. Missing or broken files yield an empty dict."""

    path = find_config_file(config_dir)
    if path is None:
        return {}
    try:
        return jsonc.read_object(path)
    except (OSError, json.JSONDecodeError, ValueError) as exc:
        LOGGER.error("Error reading Perplexity config from %s: %s", path, exc)
        return {}


def _custom_patterns(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        LOGGER.warning("keywords.customPatterns must be a list, ignoring %r", raw)
        return ()
    return tuple(str(item) for item in raw)


def is_debug_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    environ = os.environ if environ is None else environ
    return environ.get(ENV_DEBUG, "").strip().lower() == "true"


def build_config(file_config: Mapping[str, Any], environ: Mapping[str, str]) -> PluginConfig:
    """Merge file settings with environment overrides."""

    keywords = file_config.get("keywords") or {}
    if not isinstance(keywords, dict):
        LOGGER.warning("keywords must be an object, ignoring %r", keywords)
        keywords = {}

    enabled = keywords.get("enabled")
    return PluginConfig(
        api_key=environ.get(ENV_API_KEY) or str(file_config.get("apiKey") or ""),
        mcp_url=environ.get(ENV_MCP_URL) or str(file_config.get("mcpUrl") or DEFAULT_MCP_URL),
        model=environ.get(ENV_MODEL) or str(file_config.get("model") or DEFAULT_MODEL),
        keywords=KeywordsConfig(
            enabled=True if enabled is None else bool(enabled),
            custom_patterns=_custom_patterns(keywords.get("customPatterns")),
        ),
    )


def load_config(
    config_dir: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> PluginConfig:
    """Load the plugin config once, at process start."""

    if environ is None:
        load_dotenv()
        environ = os.environ
    config_dir = config_dir or get_config_dir(environ)
    return build_config(load_config_file(config_dir), environ)
