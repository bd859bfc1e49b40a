"""JSON parsing helpers for text produced by models and shell tools."""

from __future__ import annotations

import json
from typing import Any


def extract_first_json_object(text: str) -> str:
    """
    Extract the first top-level JSON object from text.
    This is a fallback for replies that wrap JSON in prose or code fences.
    """
    start = text.find("{")
    if start == -1:
        raise ValueError("No JSON object found in output.")

    depth = 0
    in_string = False
    escape = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == "\"":
                in_string = False
        else:
            if ch == "\"":
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]

    raise ValueError("Unbalanced JSON object in output.")


def parse_json_reply(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return json.loads(extract_first_json_object(text))
