"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to the host runtime's own message types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Any, Dict, List, Optional

RESEARCH = "research"
SEARCH = "search"


@dataclass(frozen=True)
class KeywordMatch:
    """The single winning match for one message."""

    category: str
    matched_text: str


@dataclass(frozen=True)
class PatternCompileResult:
    """Outcome of compiling one user-supplied pattern."""

    source: str
    pattern: Optional[re.Pattern] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.pattern is not None


@dataclass(frozen=True)
class HookInput:
    """Per-message input handed over by the host runtime."""

    session_id: str
    message_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class HookOutput:
    """Mutable output structure owned by the host runtime.

    ``parts`` is the ordered list of message segments. The hook may only
    append to it.
    """

    message: Dict[str, Any]
    parts: List[Dict[str, Any]]

    @property
    def message_id(self) -> Optional[str]:
        return self.message.get("id")
