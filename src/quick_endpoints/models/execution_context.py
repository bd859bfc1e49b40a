"""Per-invocation state visible to chain templates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ExecutionContext:
    input: Any
    steps: list[Any] = field(default_factory=list)
    steps_by_name: dict[str, Any] = field(default_factory=dict)
    previous_step: Any = None

    @property
    def has_previous_step(self) -> bool:
        return bool(self.steps)

    def record(self, output: Any, step_name: str | None = None) -> None:
        self.steps.append(output)
        self.previous_step = output
        if step_name:
            self.steps_by_name[step_name] = output
