"""Pydantic model for the endpoint server configuration file."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from quick_endpoints.models.endpoint_spec import EndpointSpec


class ServerConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "info"
    default_model: Optional[str] = None
    default_base_url: Optional[str] = None
    default_api_key: Optional[str] = None
    endpoints: list[EndpointSpec] = Field(default_factory=list)
    base_dir: Path = Field(default_factory=Path.cwd)

    @model_validator(mode="after")
    def _unique_endpoints(self) -> "ServerConfig":
        names: set[str] = set()
        routes: set[tuple[str, str]] = set()
        for endpoint in self.endpoints:
            if endpoint.name in names:
                raise ValueError(f"Duplicate endpoint name {endpoint.name!r}.")
            names.add(endpoint.name)
            route = (endpoint.method, endpoint.path or "")
            if route in routes:
                raise ValueError(f"Duplicate route {endpoint.method} {endpoint.path} ({endpoint.name!r}).")
            routes.add(route)
        return self
