"""Instruction templates appended to the conversation after a match.

Keeping the wording here prevents drift between the hook and anything else
that wants to show the same guidance.
"""

from __future__ import annotations

from core.models import RESEARCH

TOOL_NAME = "perplexity_search_web"
RECENCY_FILTERS = ("day", "week", "month", "year")

_SEARCH_NUDGE = f"""<perplexity-hint>
The user's message suggests they want to search the web for information.

You have access to the Perplexity MCP server with the following tool:
- **{TOOL_NAME}**: Search the web using Perplexity AI
  - Parameters:
    - query (required): The search query
    - recency (optional): Filter by "day", "week", "month", or "year"

Use this tool to find current, accurate information from the web. Perplexity provides AI-powered search with citations.

Example usage:
- For recent news: use recency="day" or recency="week"
- For general information: use recency="month" (default)
- For historical context: use recency="year"
</perplexity-hint>"""

_RESEARCH_NUDGE = f"""<perplexity-hint>
The user wants comprehensive research on a topic.

You have access to the Perplexity MCP server with the **{TOOL_NAME}** tool.

For in-depth research:
1. Break the topic into multiple focused queries
2. Use different recency filters to get both recent and historical context
3. Cross-reference information from multiple searches
4. Synthesize findings into a comprehensive response with citations

The Perplexity API returns results with citations - always include these in your response to support your findings.
</perplexity-hint>"""


def search_nudge() -> str:
    return _SEARCH_NUDGE


def research_nudge() -> str:
    return _RESEARCH_NUDGE


def nudge_for(category: str) -> str:
    """Return the template for a match category.

    Anything other than "research" gets the plain search guidance.
    """

    if category == RESEARCH:
        return research_nudge()
    return search_nudge()
