"""JSON-with-comments helpers shared by the settings loader and installer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def strip_json_comments(text: str) -> str:
    """Remove ``//`` line comments and ``/* */`` block comments.

    String literals are left intact, so values such as ``"https://..."``
    survive. Newlines inside block comments are kept to preserve line numbers
    in parser errors.
    """

    out: list[str] = []
    i = 0
    length = len(text)
    in_string = False
    while i < length:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < length:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
            continue

        nxt = text[i + 1] if i + 1 < length else ""
        if ch == "/" and nxt == "/":
            end = text.find("\n", i)
            i = length if end == -1 else end
            continue
        if ch == "/" and nxt == "*":
            end = text.find("*/", i + 2)
            stop = length if end == -1 else end + 2
            out.append("\n" * text.count("\n", i, stop))
            i = stop
            continue

        out.append(ch)
        i += 1
    return "".join(out)


def loads(text: str) -> Any:
    """Parse JSON that may contain comments."""

    return json.loads(strip_json_comments(text))


def read_object(path: Path) -> dict[str, Any]:
    """Read a JSON(C) file whose root must be an object."""

    loaded = loads(path.read_text(encoding="utf-8"))
    if not isinstance(loaded, dict):
        raise ValueError(f"{path.name}: config root must be an object")
    return loaded


def write_object(path: Path, data: dict[str, Any]) -> None:
    path.write_text(json.dumps(data, indent=2, ensure_ascii=True) + "\n", encoding="utf-8")
