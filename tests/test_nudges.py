from __future__ import annotations

from core.models import RESEARCH, SEARCH
from core.nudges import RECENCY_FILTERS, TOOL_NAME, nudge_for, research_nudge, search_nudge


def test_search_nudge_describes_tool_contract() -> None:
    text = search_nudge()
    assert text.startswith("<perplexity-hint>")
    assert text.endswith("</perplexity-hint>")
    assert TOOL_NAME in text
    assert "query (required)" in text
    for recency in RECENCY_FILTERS:
        assert f'"{recency}"' in text
    assert "citations" in text


def test_research_nudge_asks_for_citations() -> None:
    text = research_nudge()
    assert TOOL_NAME in text
    assert "comprehensive research" in text
    assert "citations" in text


def test_nudge_for_selects_template_by_category() -> None:
    assert nudge_for(RESEARCH) == research_nudge()
    assert nudge_for(SEARCH) == search_nudge()
    assert nudge_for(RESEARCH) != nudge_for(SEARCH)
