"""Pydantic model for prompt-backed endpoints."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from quick_endpoints.models.model_spec import ModelSpec


class AIPromptSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["ai_prompt"] = "ai_prompt"
    prompt: Optional[str] = None
    prompt_file: Optional[str] = None  # markdown, relative to the config directory
    system_prompt: str = ""
    model: ModelSpec = Field(default_factory=ModelSpec)

    @model_validator(mode="after")
    def _require_prompt(self) -> "AIPromptSpec":
        if bool(self.prompt) == bool(self.prompt_file):
            raise ValueError("ai_prompt must set exactly one of prompt or prompt_file.")
        return self
