from __future__ import annotations

import json
import logging
from pathlib import Path

import settings
from adapters.jsonc import loads, strip_json_comments
from core.config import DEFAULT_MCP_URL, DEFAULT_MODEL


def _write(path: Path, data) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


def test_missing_file_gives_defaults(tmp_path) -> None:
    config = settings.load_config(tmp_path, environ={})
    assert config.api_key == ""
    assert not config.is_configured
    assert config.mcp_url == DEFAULT_MCP_URL
    assert config.model == DEFAULT_MODEL
    assert config.keywords.enabled is True
    assert config.keywords.custom_patterns == ()


def test_reads_json_file(tmp_path) -> None:
    _write(
        tmp_path / "perplexity.json",
        {"apiKey": "pplx-file", "keywords": {"enabled": False, "customPatterns": ["foo", "bar"]}},
    )
    config = settings.load_config(tmp_path, environ={})
    assert config.api_key == "pplx-file"
    assert config.is_configured
    assert config.keywords.enabled is False
    assert config.keywords.custom_patterns == ("foo", "bar")


def test_environment_overrides_file(tmp_path) -> None:
    _write(tmp_path / "perplexity.json", {"apiKey": "pplx-file", "model": "sonar-pro"})
    environ = {"PERPLEXITY_API_KEY": "pplx-env", "PERPLEXITY_MCP_URL": "http://localhost:9000"}
    config = settings.load_config(tmp_path, environ=environ)
    assert config.api_key == "pplx-env"
    assert config.mcp_url == "http://localhost:9000"
    assert config.model == "sonar-pro"


def test_jsonc_fallback_with_comments(tmp_path) -> None:
    (tmp_path / "perplexity.jsonc").write_text(
        """{
  // line comment
  "apiKey": "pplx-jsonc", /* inline */
  "mcpUrl": "https://example.com/mcp",
  "keywords": {"customPatterns": ["\\\\bfoo\\\\b"]}
}
""",
        encoding="utf-8",
    )
    config = settings.load_config(tmp_path, environ={})
    assert config.api_key == "pplx-jsonc"
    assert config.mcp_url == "https://example.com/mcp"
    assert config.keywords.custom_patterns == (r"\bfoo\b",)


def test_json_preferred_over_jsonc(tmp_path) -> None:
    _write(tmp_path / "perplexity.json", {"apiKey": "pplx-json"})
    _write(tmp_path / "perplexity.jsonc", {"apiKey": "pplx-jsonc"})
    assert settings.load_config(tmp_path, environ={}).api_key == "pplx-json"


def test_malformed_file_is_logged_and_ignored(tmp_path, caplog) -> None:
    (tmp_path / "perplexity.json").write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.ERROR, logger="settings"):
        config = settings.load_config(tmp_path, environ={})
    assert config.api_key == ""
    assert "Error reading Perplexity config" in caplog.text


def test_non_list_custom_patterns_are_ignored(tmp_path) -> None:
    _write(tmp_path / "perplexity.json", {"keywords": {"customPatterns": "foo"}})
    assert settings.load_config(tmp_path, environ={}).keywords.custom_patterns == ()


def test_config_dir_and_debug_from_environment(tmp_path) -> None:
    environ = {"OPENCODE_CONFIG_DIR": str(tmp_path), "PERPLEXITY_DEBUG": "true"}
    assert settings.get_config_dir(environ) == tmp_path
    assert settings.is_debug_enabled(environ)
    assert not settings.is_debug_enabled({"PERPLEXITY_DEBUG": "1"})


def test_strip_json_comments_keeps_strings() -> None:
    text = '{"url": "https://a.b/c", "s": "/* not a comment */"} // trailing'
    assert loads(text) == {"url": "https://a.b/c", "s": "/* not a comment */"}


def test_strip_json_comments_keeps_line_numbers() -> None:
    text = '{\n/* one\n two */\n"a": 1\n}'
    stripped = strip_json_comments(text)
    assert stripped.count("\n") == text.count("\n")
    assert loads(text) == {"a": 1}
