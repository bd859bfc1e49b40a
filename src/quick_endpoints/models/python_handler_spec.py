"""Pydantic model for endpoints backed by a Python callable."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class PythonHandlerSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["python"] = "python"
    module: Optional[str] = None  # "package.module:function"
    file: Optional[str] = None  # path relative to the config directory
    function: str = "handler"

    @model_validator(mode="after")
    def _require_source(self) -> "PythonHandlerSpec":
        if bool(self.module) == bool(self.file):
            raise ValueError("python handler must set exactly one of module or file.")
        return self
