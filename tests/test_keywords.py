from __future__ import annotations

import logging

from core.config import KeywordsConfig, PluginConfig
from core.keywords import compile_custom_patterns, detect_keywords, strip_code
from core.models import RESEARCH, SEARCH


def _config(*, enabled: bool = True, custom: tuple[str, ...] = ()) -> PluginConfig:
    return PluginConfig(api_key="pplx-test", keywords=KeywordsConfig(enabled=enabled, custom_patterns=custom))


def test_search_the_web_is_a_search_match() -> None:
    match = detect_keywords("Can you search the web for today's weather?", _config())
    assert match is not None
    assert match.category == SEARCH
    assert match.matched_text == "search the web"


def test_deep_dive_is_a_research_match() -> None:
    match = detect_keywords("Please do a deep dive on quantum computing", _config())
    assert match is not None
    assert match.category == RESEARCH
    assert match.matched_text == "deep dive"


def test_research_phrases_match_regardless_of_case() -> None:
    for message in [
        "DEEP RESEARCH into vector databases",
        "Comprehensive Analysis of the market",
        "please Thoroughly Investigate this",
        "an In-Depth analysis",
        "in depth research please",
        "write a Detailed Report",
    ]:
        match = detect_keywords(message, _config())
        assert match is not None, message
        assert match.category == RESEARCH, message


def test_inline_code_does_not_match() -> None:
    assert detect_keywords("use `search the web` in your code", _config()) is None


def test_fenced_code_does_not_match() -> None:
    message = "Fix this:\n```python\n# look up the latest news\nprint('compare')\n```\nthanks"
    assert detect_keywords(message, _config()) is None


def test_text_outside_code_still_matches() -> None:
    message = "```\nplain code\n```\nnow look up the docs"
    match = detect_keywords(message, _config())
    assert match is not None
    assert match.matched_text == "look up"


def test_research_wins_over_search() -> None:
    match = detect_keywords("search the web and do a deep dive on Rust async", _config())
    assert match is not None
    assert match.category == RESEARCH
    assert match.matched_text == "deep dive"


def test_disabled_detection_never_matches() -> None:
    config = _config(enabled=False, custom=(r"anything",))
    for message in ["search the web", "deep dive", "anything at all"]:
        assert detect_keywords(message, config) is None


def test_no_match_for_plain_request() -> None:
    assert detect_keywords("rename this variable to snake_case", _config()) is None


def test_custom_pattern_beats_builtin_search() -> None:
    config = _config(custom=(r"\bcheck\s+pypi\b",))
    match = detect_keywords("look up the version, check PyPI please", config)
    assert match is not None
    assert match.category == SEARCH
    assert match.matched_text == "check PyPI"


def test_research_beats_custom_pattern() -> None:
    config = _config(custom=(r"\bquantum\b",))
    match = detect_keywords("a deep dive on quantum computing", config)
    assert match is not None
    assert match.category == RESEARCH


def test_invalid_custom_pattern_is_skipped(caplog) -> None:
    config = _config(custom=(r"([unclosed", r"\bfoo\b"))
    with caplog.at_level(logging.WARNING, logger="core.keywords"):
        match = detect_keywords("what about foo?", config)
    assert match is not None
    assert match.matched_text == "foo"
    assert "([unclosed" in caplog.text


def test_invalid_custom_pattern_does_not_block_builtins() -> None:
    config = _config(custom=(r"(?P<broken",))
    match = detect_keywords("who is the author of requests?", config)
    assert match is not None
    assert match.category == SEARCH
    assert match.matched_text == "who is"


def test_compile_custom_patterns_reports_failures_in_order() -> None:
    results = compile_custom_patterns([r"ok\d+", r"*bad", r"fine"])
    assert [result.source for result in results] == [r"ok\d+", r"*bad", r"fine"]
    assert [result.ok for result in results] == [True, False, True]
    assert results[1].pattern is None
    assert results[1].error
    assert results[0].pattern.search("OK42")


def test_strip_code_removes_fenced_then_inline() -> None:
    assert strip_code("a ```x `y` z``` b `c` d") == "a  b  d"


def test_builtin_patterns_use_ascii_word_boundaries() -> None:
    match = detect_keywords("éresearch this", _config())
    assert match is not None
    assert match.matched_text == "research"

    match = detect_keywords("naïve deep dive", _config())
    assert match is not None
    assert match.category == RESEARCH
