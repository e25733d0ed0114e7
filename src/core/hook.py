"""Chat message hook.

This module is host-agnostic. It only touches the in-flight message parts
handed over by the host runtime, so any bridge or adapter can drive it.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Dict, Optional

from core.config import PluginConfig
from core.keywords import detect_keywords
from core.models import HookInput, HookOutput, KeywordMatch
from core.nudges import nudge_for

LOGGER = logging.getLogger(__name__)

PART_ID_PREFIX = "perplexity"


def build_nudge_part(match: KeywordMatch, hook_input: HookInput, output: HookOutput) -> Dict[str, Any]:
    """Create the synthetic text part for a match."""

    millis = int(time.time() * 1000)
    return {
        "id": f"{PART_ID_PREFIX}-{match.category}-nudge-{millis}-{uuid.uuid4().hex[:8]}",
        "sessionID": hook_input.session_id,
        "messageID": output.message_id or hook_input.message_id,
        "type": "text",
        "text": nudge_for(match.category),
        "synthetic": True,
    }


def collect_text(output: HookOutput) -> str:
    """Join the text of every text part, in order."""

    texts = [
        part.get("text") or ""
        for part in output.parts
        if isinstance(part, dict) and part.get("type") == "text"
    ]
    return "\n".join(texts)


class ChatMessageHook:
    """Appends a Perplexity hint when a message looks like a search request."""

    def __init__(self, config: PluginConfig) -> None:
        self._config = config

    def handle(self, hook_input: HookInput, output: HookOutput) -> Optional[KeywordMatch]:
        """Process one chat message. Never raises."""

        if not self._config.is_configured:
            return None

        start = time.monotonic()
        try:
            if not any(isinstance(part, dict) and part.get("type") == "text" for part in output.parts):
                LOGGER.debug("chat.message: no text parts found")
                return None

            user_message = collect_text(output)
            if not user_message.strip():
                LOGGER.debug("chat.message: empty message, skipping")
                return None

            LOGGER.debug(
                "chat.message: processing preview=%r parts=%s",
                user_message[:100],
                len(output.parts),
            )

            match = detect_keywords(user_message, self._config)
            if match is None:
                return None

            LOGGER.debug("chat.message: %s keyword detected (%r)", match.category, match.matched_text)
            output.parts.append(build_nudge_part(match, hook_input, output))

            elapsed_ms = (time.monotonic() - start) * 1000
            LOGGER.debug(
                "chat.message: %s nudge injected in %.1fms (%r)",
                match.category,
                elapsed_ms,
                match.matched_text,
            )
            return match
        except Exception:
            LOGGER.exception("chat.message: error while processing message")
            return None
