"""Keyword pattern tables and detection logic (core domain)."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from core.config import PluginConfig
from core.models import RESEARCH, SEARCH, KeywordMatch, PatternCompileResult

LOGGER = logging.getLogger(__name__)

_FLAGS = re.IGNORECASE
# Built-in tables treat only ASCII letters and digits as word characters.
_BUILTIN_FLAGS = re.IGNORECASE | re.ASCII

# Checked before everything else: these ask for deeper, multi-query work.
RESEARCH_PATTERNS: Tuple[re.Pattern, ...] = tuple(
    re.compile(pattern, _BUILTIN_FLAGS)
    for pattern in (
        r"\bdeep\s+(dive|research|analysis)\b",
        r"\bcomprehensive\s+(search|research|analysis)\b",
        r"\bthorough(ly)?\s+(research|investigate|search)\b",
        r"\bin[- ]depth\s+(research|analysis)\b",
        r"\bdetailed\s+(research|analysis|report)\b",
    )
)

SEARCH_PATTERNS: Tuple[re.Pattern, ...] = tuple(
    re.compile(pattern, _BUILTIN_FLAGS)
    for pattern in (
        # Direct search requests
        r"\bsearch\s+(the\s+)?(web|internet|online)\b",
        r"\bweb\s+search\b",
        r"\blook\s+up\b",
        r"\bfind\s+(me\s+)?(information|info|details)\s+(about|on|for)\b",
        r"\bwhat('s|\s+is)\s+(the\s+)?(latest|current|recent)\b",
        # Research-oriented
        r"\bresearch\b",
        r"\binvestigate\b",
        r"\bfind\s+out\b",
        # News and current events
        r"\b(latest|recent|current)\s+(news|updates|developments)\b",
        r"\bwhat('s|\s+is)\s+happening\b",
        r"\bbreaking\s+news\b",
        # Documentation and reference
        r"\bfind\s+(the\s+)?docs?\b",
        r"\bdocumentation\s+for\b",
        r"\bhow\s+do\s+(I|you|we)\b",
        r"\bwhat\s+is\s+the\s+best\s+way\b",
        # Factual queries
        r"\bwho\s+(is|was|are|were)\b",
        r"\bwhen\s+(did|was|is|will)\b",
        r"\bwhere\s+(is|are|can|do)\b",
        r"\bhow\s+(much|many|long|far)\b",
        # Comparison and alternatives
        r"\bcompare\b",
        r"\balternatives?\s+to\b",
        r"\bvs\.?\b",
        r"\bversus\b",
        # Explicit tool mentions
        r"\bperplexity\b",
        r"\bask\s+perplexity\b",
        r"\buse\s+perplexity\b",
    )
)

_FENCED_CODE = re.compile(r"```[\s\S]*?```")
_INLINE_CODE = re.compile(r"`[^`]+`")


def strip_code(text: str) -> str:
    """Remove fenced code blocks, then inline code spans."""

    return _INLINE_CODE.sub("", _FENCED_CODE.sub("", text))


def compile_custom_patterns(sources: Iterable[str]) -> List[PatternCompileResult]:
    """Compile user-supplied pattern strings without raising.

    Every input yields one result, in order. Failed results carry the
    compiler's error message instead of a pattern.
    """

    results: List[PatternCompileResult] = []
    for source in sources:
        try:
            compiled = re.compile(source, _FLAGS)
        except (re.error, TypeError) as exc:
            results.append(PatternCompileResult(source=str(source), error=str(exc)))
            continue
        results.append(PatternCompileResult(source=source, pattern=compiled))
    return results


def _usable_custom_patterns(sources: Sequence[str]) -> List[re.Pattern]:
    usable: List[re.Pattern] = []
    for result in compile_custom_patterns(sources):
        if not result.ok:
            LOGGER.warning("Invalid custom keyword pattern %r: %s", result.source, result.error)
            continue
        usable.append(result.pattern)
    return usable


def _first_match(text: str, patterns: Iterable[re.Pattern], category: str) -> Optional[KeywordMatch]:
    for pattern in patterns:
        found = pattern.search(text)
        if found:
            return KeywordMatch(category=category, matched_text=found.group(0))
    return None


def detect_keywords(message: str, config: PluginConfig) -> Optional[KeywordMatch]:
    """Return the first match for ``message`` or None.

    Matching order:
    - research patterns (most specific),
    - custom patterns from the config, reported as "search",
    - built-in search patterns.
    Code blocks and inline code never take part in matching.
    """

    cleaned = strip_code(message)
    if not config.keywords.enabled:
        return None

    return (
        _first_match(cleaned, RESEARCH_PATTERNS, RESEARCH)
        or _first_match(cleaned, _usable_custom_patterns(config.keywords.custom_patterns), SEARCH)
        or _first_match(cleaned, SEARCH_PATTERNS, SEARCH)
    )
