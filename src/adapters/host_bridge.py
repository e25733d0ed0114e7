"""Host-to-core bridge for the chat message hook.

The host (or a thin shim inside it) pipes one JSON document per message on
stdin and reads the possibly-extended ``output`` back from stdout. This keeps
host-runtime details out of the core hook.
"""

from __future__ import annotations

import json
import logging
from typing import Any, TextIO

from core.hook import ChatMessageHook
from core.models import HookInput, HookOutput

LOGGER = logging.getLogger(__name__)


def parse_payload(payload: Any) -> tuple[HookInput, HookOutput]:
    """Map the host's JSON payload onto core models."""

    if not isinstance(payload, dict):
        raise ValueError("hook payload must be an object")

    raw_input = payload.get("input") or {}
    raw_output = payload.get("output") or {}
    if not isinstance(raw_input, dict) or not isinstance(raw_output, dict):
        raise ValueError("hook input and output must be objects")

    message = raw_output.get("message") or {}
    parts = raw_output.get("parts") or []
    if not isinstance(message, dict) or not isinstance(parts, list):
        raise ValueError("output.message must be an object and output.parts a list")

    hook_input = HookInput(
        session_id=str(raw_input.get("sessionID", "")),
        message_id=raw_input.get("messageID"),
        extra={k: v for k, v in raw_input.items() if k not in {"sessionID", "messageID"}},
    )
    return hook_input, HookOutput(message=message, parts=parts)


def run(hook: ChatMessageHook, stdin: TextIO, stdout: TextIO) -> int:
    """Run one hook invocation over JSON stdio. Always returns 0."""

    # An empty object tells the host to keep its message untouched.
    try:
        hook_input, output = parse_payload(json.loads(stdin.read()))
    except (ValueError, RecursionError) as exc:
        LOGGER.warning("hook: invalid payload (%s)", exc)
        stdout.write("{}\n")
        return 0
    except Exception:
        LOGGER.exception("hook: failed to read payload")
        stdout.write("{}\n")
        return 0

    hook.handle(hook_input, output)
    stdout.write(json.dumps({"message": output.message, "parts": output.parts}) + "\n")
    return 0
