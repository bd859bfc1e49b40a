"""Prompt composition helpers for prompt-backed endpoints."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import frontmatter
import yaml


@dataclass(frozen=True)
class PromptDocument:
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


def load_prompt_file(path: Path) -> PromptDocument:
    """
    Reads a markdown prompt. Frontmatter keys override the endpoint's model settings.
    """
    post = frontmatter.load(str(path))
    text = post.content.strip()
    if not text:
        raise ValueError(f"Prompt file {path} is empty.")
    return PromptDocument(text=text, metadata=dict(post.metadata))


def make_user_prompt(payload: Any, output_schema: dict[str, Any] | None = None) -> str:
    """
    Renders the request payload as a stable user prompt. Consistency helps prefix-caching backends.
    """
    lines: list[str] = ["## Request (YAML)"]
    if payload is None or payload == {}:
        lines.append("{}")
    else:
        lines.append(
            yaml.safe_dump(
                payload,
                allow_unicode=False,
                default_flow_style=False,
                sort_keys=True,
            ).rstrip()
        )

    if output_schema is not None:
        lines.extend(
            [
                "",
                "## Response Format",
                "Reply with a single JSON object matching this JSON Schema:",
                json.dumps(output_schema, indent=2, sort_keys=True),
            ]
        )

    return "\n".join(lines).rstrip() + "\n"
