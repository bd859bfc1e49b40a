"""Exception types raised by config validation, templates and chain execution."""

from __future__ import annotations

from typing import Any, Sequence


class ConfigError(ValueError):
    pass


class ConfigReferenceError(ConfigError):
    def __init__(self, chain: str, endpoint: str, step_index: int) -> None:
        self.chain = chain
        self.endpoint = endpoint
        self.step_index = step_index
        super().__init__(
            f'Chain endpoint "{chain}" step {step_index} references unknown endpoint "{endpoint}".'
        )


class CircularDependencyError(ConfigError):
    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle: tuple[str, ...] = tuple(cycle)
        super().__init__(f"Circular dependency detected: {' -> '.join(self.cycle)}")


class TemplateError(ValueError):
    pass


class PathResolutionError(TemplateError):
    """A template path could not be walked to a value.

    ``reason`` is one of ``"null"``, ``"type"`` or ``"missing"``.
    """

    def __init__(self, path: str, reason: str, message: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f'Cannot resolve template path "{path}": {message}')


class EmbeddedTemplateError(TemplateError):
    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(
            f'Embedded templates are not supported. Use a single template expression like "{{{{path}}}}", not "{value}"'
        )


class ChainExecutionError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        step_index: int | None = None,
        step_name: str | None = None,
        endpoint: str | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.step_index = step_index
        self.step_name = step_name
        self.endpoint = endpoint
        self.details = details or []
        super().__init__(_format_location(step_index, step_name, endpoint) + message)


def _format_location(step_index: int | None, step_name: str | None, endpoint: str | None) -> str:
    if step_index is None:
        return ""
    label = f"Chain step {step_index}"
    if step_name:
        label += f' "{step_name}"'
    if endpoint:
        label += f' (endpoint "{endpoint}")'
    return label + ": "
