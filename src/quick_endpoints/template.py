"""Evaluation of ``{{path}}`` template expressions against a chain context.

A template is a JSON-shaped structure whose leaf strings may be a single
whole-string expression such as ``"{{input.name}}"`` or ``"{{steps[0].text}}"``.
Supported roots:

- ``input``          the original chain payload
- ``steps``          step outputs by position
- ``stepsByName``    step outputs by declared step name
- ``previousStep``   output of the most recently completed step
- ``<stepName>``     shorthand for ``stepsByName.<stepName>``
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Any, Mapping

from quick_endpoints.errors import EmbeddedTemplateError, PathResolutionError
from quick_endpoints.models.execution_context import ExecutionContext

WHOLE_TEMPLATE_RE = re.compile(r"^\{\{([^{}]+)\}\}$")
SEGMENT_RE = re.compile(r"^([^\[\]]*)((?:\[[0-9]+\])*)$")
INDEX_RE = re.compile(r"\[([0-9]+)\]")
DIGITS_RE = re.compile(r"[0-9]+")

PathSegment = str | int


class PathRoot(enum.Enum):
    INPUT = "input"
    STEPS_BY_INDEX = "steps"
    STEPS_BY_NAME = "stepsByName"
    PREVIOUS_STEP = "previousStep"


@dataclass(frozen=True)
class TemplatePath:
    text: str
    root: PathRoot
    segments: tuple[PathSegment, ...]
    explicit_root: bool = True


def parse_template_path(expression: str) -> TemplatePath:
    path = expression.strip()
    if path.startswith("{{") and path.endswith("}}"):
        path = path[2:-2].strip()
    if not path:
        raise PathResolutionError(expression, "missing", "template path is empty")

    segments: list[PathSegment] = []
    for raw in path.split("."):
        match = SEGMENT_RE.match(raw.strip())
        if match is None or (not match.group(1) and not match.group(2)):
            raise PathResolutionError(path, "missing", f'invalid path segment "{raw}"')
        if match.group(1):
            segments.append(match.group(1))
        segments.extend(int(index) for index in INDEX_RE.findall(match.group(2)))

    head = segments[0]
    for root in PathRoot:
        if head == root.value:
            return TemplatePath(text=path, root=root, segments=tuple(segments[1:]))
    if isinstance(head, int):
        raise PathResolutionError(path, "missing", "a template path cannot start with an index")
    return TemplatePath(text=path, root=PathRoot.STEPS_BY_NAME, segments=tuple(segments), explicit_root=False)


def evaluate_template(expression: str, context: ExecutionContext) -> Any:
    """Resolve one template expression; raises PathResolutionError when the path does not exist."""
    path = parse_template_path(expression)
    current = _root_value(path, context)
    trail: list[PathSegment] = [path.root.value] if path.explicit_root else []
    for segment in path.segments:
        current = _step_into(current, segment, path, trail)
        trail.append(segment)
    return current


def compile_template(template: Any, context: ExecutionContext) -> Any:
    """Return a copy of ``template`` with every whole-string expression replaced by its value."""
    if template is None:
        return None
    if isinstance(template, str):
        if WHOLE_TEMPLATE_RE.match(template):
            # Evaluated values keep their type.
            return evaluate_template(template, context)
        if "{{" in template:
            raise EmbeddedTemplateError(template)
        return template
    if isinstance(template, (list, tuple)):
        return [compile_template(item, context) for item in template]
    if isinstance(template, Mapping):
        return {key: compile_template(value, context) for key, value in template.items()}
    return template


def _root_value(path: TemplatePath, context: ExecutionContext) -> Any:
    if path.root is PathRoot.INPUT:
        return context.input
    if path.root is PathRoot.STEPS_BY_INDEX:
        return context.steps
    if path.root is PathRoot.STEPS_BY_NAME:
        return context.steps_by_name
    if not context.has_previous_step:
        raise PathResolutionError(path.text, "missing", '"previousStep" is not available before the first step completes')
    return context.previous_step


def _step_into(current: Any, segment: PathSegment, path: TemplatePath, trail: list[PathSegment]) -> Any:
    where = _format_trail(trail)
    if current is None:
        raise PathResolutionError(path.text, "null", f'"{where}" is null')
    if isinstance(current, Mapping):
        key = str(segment)
        if key not in current:
            available = ", ".join(str(k) for k in current.keys())
            raise PathResolutionError(
                path.text,
                "missing",
                f'property "{key}" does not exist in "{where}". Available properties: {available}',
            )
        return current[key]
    if isinstance(current, (list, tuple)):
        index = _as_index(segment)
        if index is None or index >= len(current):
            available = ", ".join(str(i) for i in range(len(current)))
            raise PathResolutionError(
                path.text,
                "missing",
                f'property "{segment}" does not exist in "{where}". Available properties: {available}',
            )
        return current[index]
    raise PathResolutionError(path.text, "type", f'"{where}" is not an object (got {type(current).__name__})')


def _as_index(segment: PathSegment) -> int | None:
    if isinstance(segment, int):
        return segment
    if DIGITS_RE.fullmatch(segment):
        return int(segment)
    return None


def _format_trail(trail: list[PathSegment]) -> str:
    if not trail:
        return PathRoot.STEPS_BY_NAME.value
    out = ""
    for segment in trail:
        if isinstance(segment, int):
            out += f"[{segment}]"
        else:
            out += f".{segment}" if out else segment
    return out
