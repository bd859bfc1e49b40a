"""Lookup table from endpoint name to its executable handler and validators."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Optional, Protocol


logger = logging.getLogger(__name__)


class EndpointHandler(Protocol):
    def __call__(self, payload: Any, request: Any = None) -> Awaitable[Any]: ...


class Validator(Protocol):
    errors: list[dict[str, Any]]

    def __call__(self, value: Any) -> bool: ...


@dataclass(frozen=True)
class RegistryEntry:
    name: str
    handler: EndpointHandler
    input_validator: Optional[Validator] = None
    output_validator: Optional[Validator] = None


class HandlerRegistry:
    """Endpoint handlers keyed by endpoint name.

    Populated once at startup (non-chain endpoints first, then chains) and only
    read while serving. ``clear`` exists for rebuilds and test isolation and must
    not run while requests are in flight.
    """

    def __init__(self) -> None:
        self._entries: dict[str, RegistryEntry] = {}

    def register(
        self,
        name: str,
        handler: EndpointHandler,
        input_validator: Optional[Validator] = None,
        output_validator: Optional[Validator] = None,
    ) -> RegistryEntry:
        entry = RegistryEntry(
            name=name,
            handler=handler,
            input_validator=input_validator,
            output_validator=output_validator,
        )
        if name in self._entries:
            logger.debug("Replacing handler for endpoint %s", name)
        self._entries[name] = entry
        return entry

    def lookup(self, name: str) -> RegistryEntry | None:
        return self._entries.get(name)

    def clear(self) -> None:
        self._entries.clear()

    def names(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
