"""Starlette application exposing configured endpoints over HTTP."""

from __future__ import annotations

import json
import logging
from typing import Any, Awaitable, Callable

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from quick_endpoints.dependency_graph import detect_circular_dependencies
from quick_endpoints.errors import ChainExecutionError
from quick_endpoints.handler_registry import HandlerRegistry, RegistryEntry
from quick_endpoints.handlers import build_registry
from quick_endpoints.models.endpoint_spec import EndpointSpec
from quick_endpoints.models.server_config import ServerConfig


logger = logging.getLogger(__name__)


async def read_payload(request: Request, endpoint: EndpointSpec) -> Any:
    if endpoint.method == "GET":
        return dict(request.query_params)
    body = await request.body()
    if not body:
        return {}
    return json.loads(body)


def make_endpoint_route(endpoint: EndpointSpec, entry: RegistryEntry) -> Callable[[Request], Awaitable[JSONResponse]]:
    async def route(request: Request) -> JSONResponse:
        try:
            payload = await read_payload(request, endpoint)
        except ValueError:
            return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

        if entry.input_validator is not None and not entry.input_validator(payload):
            return JSONResponse(
                {"error": "Invalid request", "details": list(entry.input_validator.errors)},
                status_code=400,
            )

        try:
            output = await entry.handler(payload, request)
        except ChainExecutionError as exc:
            logger.error("Endpoint %s failed: %s", endpoint.name, exc)
            return JSONResponse(
                {
                    "error": "Chain execution failed",
                    "detail": str(exc),
                    "step": exc.step_index,
                    "endpoint": exc.endpoint,
                    "details": exc.details,
                },
                status_code=500,
            )
        except Exception as exc:
            logger.exception("Endpoint %s raised", endpoint.name)
            return JSONResponse({"error": "Handler error", "detail": str(exc)}, status_code=500)

        if entry.output_validator is not None and not entry.output_validator(output):
            return JSONResponse(
                {"error": "Handler output failed validation", "details": list(entry.output_validator.errors)},
                status_code=500,
            )
        return JSONResponse(output)

    return route


def create_app(config: ServerConfig, registry: HandlerRegistry | None = None) -> Starlette:
    """
    Validates chain references, builds the handler registry and binds one route per endpoint.
    Configuration errors propagate so the server never starts with a broken graph.
    """
    detect_circular_dependencies(config)
    registry = build_registry(config, registry)

    async def health(_: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "endpoints": registry.names()})

    routes = [Route("/health", health, methods=["GET"])]
    for endpoint in config.endpoints:
        entry = registry.lookup(endpoint.name)
        if entry is None:
            raise RuntimeError(f"Endpoint {endpoint.name!r} was not registered.")
        routes.append(
            Route(endpoint.path or f"/{endpoint.name}", make_endpoint_route(endpoint, entry), methods=[endpoint.method])
        )

    app = Starlette(routes=routes)
    app.state.registry = registry
    app.state.config = config
    return app
