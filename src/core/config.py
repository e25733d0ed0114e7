"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

DEFAULT_MCP_URL = "stdio://perplexity-mcp"
DEFAULT_MODEL = "sonar"


@dataclass(frozen=True)
class KeywordsConfig:
    """Keyword detection settings."""

    enabled: bool = True
    custom_patterns: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PluginConfig:
    """Settings read once at startup and passed to the detector and hook."""

    api_key: str = ""
    mcp_url: str = DEFAULT_MCP_URL
    model: str = DEFAULT_MODEL
    keywords: KeywordsConfig = field(default_factory=KeywordsConfig)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)
