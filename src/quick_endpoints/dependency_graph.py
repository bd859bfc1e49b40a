"""Startup checks for references between chain endpoints."""

from __future__ import annotations

import enum
import logging
from typing import Iterable

from quick_endpoints.errors import CircularDependencyError, ConfigReferenceError
from quick_endpoints.models.chain_spec import ChainSpec
from quick_endpoints.models.endpoint_spec import EndpointSpec
from quick_endpoints.models.server_config import ServerConfig


logger = logging.getLogger(__name__)


class _Mark(enum.Enum):
    UNVISITED = 0
    ON_STACK = 1
    DONE = 2


def build_chain_graph(endpoints: Iterable[EndpointSpec]) -> dict[str, tuple[str, ...]]:
    """Map each chain endpoint to the endpoints its steps call, in step order."""
    graph: dict[str, tuple[str, ...]] = {}
    for endpoint in endpoints:
        if not isinstance(endpoint.handler, ChainSpec):
            continue
        targets = dict.fromkeys(step.endpoint for step in endpoint.handler.steps)
        graph[endpoint.name] = tuple(targets)
    return graph


def validate_chain_graph(endpoints: Iterable[EndpointSpec]) -> dict[str, tuple[str, ...]]:
    """
    Raise ConfigReferenceError for a step naming an unknown endpoint and
    CircularDependencyError when chains reference each other in a loop.
    Returns the chain graph when both checks pass.
    """
    endpoints = list(endpoints)
    known = {endpoint.name for endpoint in endpoints}
    for endpoint in endpoints:
        if not isinstance(endpoint.handler, ChainSpec):
            continue
        for index, step in enumerate(endpoint.handler.steps):
            if step.endpoint not in known:
                raise ConfigReferenceError(endpoint.name, step.endpoint, index)

    graph = build_chain_graph(endpoints)
    marks: dict[str, _Mark] = {name: _Mark.UNVISITED for name in graph}
    stack: list[str] = []

    def _visit(name: str) -> None:
        marks[name] = _Mark.ON_STACK
        stack.append(name)
        for target in graph[name]:
            if target not in graph:
                # Non-chain endpoints are leaves.
                continue
            if marks[target] is _Mark.ON_STACK:
                cycle = stack[stack.index(target):] + [target]
                raise CircularDependencyError(cycle)
            if marks[target] is _Mark.UNVISITED:
                _visit(target)
        stack.pop()
        marks[name] = _Mark.DONE

    for name in graph:
        if marks[name] is _Mark.UNVISITED:
            _visit(name)

    logger.debug("Chain graph validated: %s", graph)
    return graph


def detect_circular_dependencies(config: ServerConfig) -> dict[str, tuple[str, ...]]:
    return validate_chain_graph(config.endpoints)
