"""OpenCode host configuration edits used by the installer.

Every function here checks for prior presence first and no-ops instead of
duplicating entries, so the installer can be re-run safely.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from adapters import jsonc

LOGGER = logging.getLogger(__name__)

PLUGIN_BASE_NAME = "perplexity-opencode"
PLUGIN_NAME = f"{PLUGIN_BASE_NAME}@latest"
MCP_SERVER_NAME = "perplexity"
AGENTS_FILE = "AGENTS.md"
AGENTS_MARKER = "# How to use Perplexity"
HOST_CONFIG_CANDIDATES = ("opencode.jsonc", "opencode.json")

AGENTS_INSTRUCTIONS = """
---
name: perplexity
description: Use Perplexity MCP server for web search and research. Invoke when needing to search the web for current information, news, documentation, or factual queries.
---

# How to use Perplexity

Perplexity provides AI-powered web search with citations. Use it when you need up-to-date information from the web.

## When to Use Perplexity

- **Current events and news**: Latest updates, breaking news, recent developments
- **Factual queries**: Who, what, when, where, how questions
- **Documentation lookups**: Finding official docs, API references, guides
- **Comparisons**: Comparing technologies, products, alternatives
- **Research**: Investigating topics, gathering information

## Available Tool

### perplexity_search_web

Search the web using Perplexity AI.

**Parameters:**
- `query` (required): The search query
- `recency` (optional): Filter by time period
  - `day`: Last 24 hours
  - `week`: Last 7 days
  - `month`: Last 30 days (default)
  - `year`: Last year

**Example Usage:**

```
// For recent news
perplexity_search_web(query="latest TypeScript 5.4 features", recency="week")

// For general information
perplexity_search_web(query="best practices for React error boundaries")

// For historical context
perplexity_search_web(query="history of JavaScript frameworks", recency="year")
```

## Best Practices

1. **Be specific**: Use clear, focused queries for better results
2. **Use recency filters**: Match the filter to your needs
   - Breaking news: `day`
   - Recent developments: `week`
   - General info: `month`
   - Historical: `year`
3. **Include citations**: Perplexity returns sources - always cite them in your responses
4. **Multiple queries**: For comprehensive research, use multiple targeted searches
5. **Cross-reference**: For important facts, verify across multiple queries
"""

_PLUGIN_ARRAY = re.compile(r'("plugin"\s*:\s*\[)([^\]]*?)(\])')
_OPENING_BRACE = re.compile(r"^(\s*\{)")


@dataclass(frozen=True)
class StepResult:
    """Outcome of one installer edit."""

    ok: bool
    changed: bool
    message: str


def mcp_server_entry(api_key: str) -> dict[str, Any]:
    return {
        "type": "local",
        "command": ["uv", "tool", "run", "perplexity-mcp"],
        "environment": {"PERPLEXITY_API_KEY": api_key},
    }


def find_host_config(config_dir: Path) -> Optional[Path]:
    """Return opencode.jsonc or opencode.json, whichever exists first."""

    for name in HOST_CONFIG_CANDIDATES:
        candidate = config_dir / name
        if candidate.exists():
            return candidate
    return None


def _insert_plugin_jsonc(content: str) -> str:
    """Add the plugin id textually so comments in a .jsonc file survive."""

    if _PLUGIN_ARRAY.search(content):

        def _extend(found: re.Match) -> str:
            start, middle, end = found.groups()
            if not middle.strip():
                return f'{start}\n    "{PLUGIN_NAME}"\n  {end}'
            return f'{start}{middle.rstrip()},\n    "{PLUGIN_NAME}"\n  {end}'

        return _PLUGIN_ARRAY.sub(_extend, content, count=1)
    return _OPENING_BRACE.sub(lambda found: f'{found.group(1)}\n  "plugin": ["{PLUGIN_NAME}"],', content, count=1)


def _registered(content: str) -> bool:
    try:
        plugins = jsonc.loads(content).get("plugin")
    except (json.JSONDecodeError, AttributeError):
        return False
    return isinstance(plugins, list) and PLUGIN_NAME in plugins


def add_plugin(config_path: Path) -> StepResult:
    """Register the plugin id in the host config's ``plugin`` list.

    ``.jsonc`` files are edited in place to keep comments, unless the
    existing ``plugin`` value is not a list; then the file is rewritten.
    """

    content = config_path.read_text(encoding="utf-8")
    if PLUGIN_BASE_NAME in content:
        return StepResult(True, False, "Plugin already registered in config")

    try:
        config = jsonc.loads(content)
    except json.JSONDecodeError as exc:
        return StepResult(False, False, f"Failed to parse {config_path.name}: {exc.msg}")
    if not isinstance(config, dict):
        return StepResult(False, False, f"Failed to parse {config_path.name}: root must be an object")

    edited = None
    if config_path.suffix == ".jsonc" and config and isinstance(config.get("plugin", []), list):
        edited = _insert_plugin_jsonc(content)
        if not _registered(edited):
            LOGGER.warning("In-place edit of %s failed, rewriting as plain JSON", config_path)
            edited = None

    if edited is not None:
        config_path.write_text(edited, encoding="utf-8")
    else:
        plugins = config.get("plugin") or []
        if not isinstance(plugins, list):
            plugins = [plugins]
        plugins.append(PLUGIN_NAME)
        config["plugin"] = plugins
        jsonc.write_object(config_path, config)

    LOGGER.info("Registered %s in %s", PLUGIN_NAME, config_path)
    return StepResult(True, True, f"Added plugin to {config_path}")


def add_mcp_server(config_path: Path, api_key: str) -> StepResult:
    """Add the ``perplexity`` MCP server entry unless one exists."""

    try:
        config = jsonc.read_object(config_path)
    except (json.JSONDecodeError, ValueError) as exc:
        return StepResult(False, False, f"Failed to parse {config_path.name}: {exc}")

    mcp = config.get("mcp") or {}
    if not isinstance(mcp, dict):
        return StepResult(False, False, f"Failed to parse {config_path.name}: 'mcp' must be an object")
    if MCP_SERVER_NAME in mcp:
        return StepResult(True, False, f"MCP server '{MCP_SERVER_NAME}' already configured")

    mcp[MCP_SERVER_NAME] = mcp_server_entry(api_key)
    config["mcp"] = mcp
    jsonc.write_object(config_path, config)

    LOGGER.info("Added MCP server %s to %s", MCP_SERVER_NAME, config_path)
    return StepResult(True, True, f"Added MCP server '{MCP_SERVER_NAME}' to config")


def create_host_config(config_dir: Path, api_key: str) -> StepResult:
    """Write a fresh opencode.json with the plugin and MCP server."""

    existing = find_host_config(config_dir)
    if existing is not None:
        return StepResult(True, False, f"{existing} already exists")

    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "opencode.json"
    jsonc.write_object(
        config_path,
        {"plugin": [PLUGIN_NAME], "mcp": {MCP_SERVER_NAME: mcp_server_entry(api_key)}},
    )
    return StepResult(True, True, f"Created {config_path}")


def create_plugin_settings(settings_path: Path, api_key: str) -> StepResult:
    """Write perplexity.json if it does not exist yet."""

    if settings_path.exists():
        return StepResult(True, False, f"{settings_path} already exists")

    settings_path.parent.mkdir(parents=True, exist_ok=True)
    jsonc.write_object(settings_path, {"apiKey": api_key, "keywords": {"enabled": True}})
    return StepResult(True, True, f"Created {settings_path}")


def update_agents_md(config_dir: Path) -> StepResult:
    """Append the Perplexity usage guide to AGENTS.md once."""

    config_dir.mkdir(parents=True, exist_ok=True)
    agents_path = config_dir / AGENTS_FILE
    block = AGENTS_INSTRUCTIONS.strip() + "\n"

    if not agents_path.exists():
        agents_path.write_text(block, encoding="utf-8")
        return StepResult(True, True, f"Created {agents_path} with Perplexity instructions")

    content = agents_path.read_text(encoding="utf-8")
    if AGENTS_MARKER in content:
        return StepResult(True, False, "Perplexity instructions already in AGENTS.md")

    agents_path.write_text(content.rstrip() + "\n\n" + block, encoding="utf-8")
    return StepResult(True, True, "Appended Perplexity instructions to AGENTS.md")
