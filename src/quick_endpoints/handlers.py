"""Construction of endpoint handlers and the startup registry build."""

from __future__ import annotations

import functools
import inspect
import json
import logging
import os
import re
import shutil
from pathlib import Path
from typing import Any, Callable

import anyio
import anyio.to_thread
from pydantic_ai import Agent
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings

from quick_endpoints.chain_executor import ChainExecutor
from quick_endpoints.directory_permissions import DirectoryPermissions
from quick_endpoints.handler_registry import EndpointHandler, HandlerRegistry
from quick_endpoints.json_utils import parse_json_reply
from quick_endpoints.models.ai_prompt_spec import AIPromptSpec
from quick_endpoints.models.chain_spec import ChainSpec
from quick_endpoints.models.endpoint_spec import EndpointSpec
from quick_endpoints.models.model_spec import OPENAI_BASE_URL, ModelSpec
from quick_endpoints.models.python_handler_spec import PythonHandlerSpec
from quick_endpoints.models.server_config import ServerConfig
from quick_endpoints.models.shell_query_spec import ShellQuerySpec
from quick_endpoints.prompting import load_prompt_file, make_user_prompt
from quick_endpoints.python_loader import import_symbol, load_file_symbol
from quick_endpoints.validation import compile_validator


logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "gpt-4o-mini"
QUERY_PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z0-9_.\-]+)\s*\}\}")


def create_handler(endpoint: EndpointSpec, config: ServerConfig, registry: HandlerRegistry) -> EndpointHandler:
    spec = endpoint.handler
    if isinstance(spec, AIPromptSpec):
        return create_prompt_handler(endpoint, spec, config)
    if isinstance(spec, PythonHandlerSpec):
        return create_python_handler(endpoint, spec, config)
    if isinstance(spec, ShellQuerySpec):
        return create_shell_query_handler(endpoint, spec)
    if isinstance(spec, ChainSpec):
        return create_chain_handler(spec, ChainExecutor(registry))
    raise NotImplementedError(f"Unknown handler kind for endpoint {endpoint.name!r}")


def build_registry(config: ServerConfig, registry: HandlerRegistry | None = None) -> HandlerRegistry:
    """
    Registers every endpoint: non-chain endpoints first, then chains, so any
    chain step can resolve any endpoint.
    """
    registry = registry if registry is not None else HandlerRegistry()
    chains = [endpoint for endpoint in config.endpoints if endpoint.is_chain]
    others = [endpoint for endpoint in config.endpoints if not endpoint.is_chain]
    for endpoint in others + chains:
        handler = create_handler(endpoint, config, registry)
        registry.register(
            endpoint.name,
            handler,
            compile_validator(endpoint.input_schema),
            compile_validator(endpoint.output_schema),
        )
        logger.info("Registered %s endpoint %s %s", endpoint.handler.kind, endpoint.method, endpoint.path)
    return registry


# Prompt endpoints


def resolve_model_spec(spec: AIPromptSpec, config: ServerConfig) -> tuple[ModelSpec, str]:
    model_spec = spec.model
    prompt_text = spec.prompt or ""
    if spec.prompt_file:
        path = DirectoryPermissions(config.base_dir).resolve(Path(spec.prompt_file))
        document = load_prompt_file(path)
        overrides = {key: value for key, value in document.metadata.items() if key in ModelSpec.model_fields}
        model_spec = model_spec.model_copy(update=overrides)
        prompt_text = document.text
    return model_spec, prompt_text


def build_model(model_spec: ModelSpec, config: ServerConfig) -> OpenAIChatModel:
    api_key = model_spec.api_key or os.environ.get(model_spec.api_key_env) or config.default_api_key
    base_url = model_spec.base_url or config.default_base_url
    if not api_key and not base_url:
        raise ValueError(
            f"{model_spec.api_key_env} is required for ai_prompt endpoints unless a baseUrl "
            "(base_url or default_base_url) points at a local model server."
        )
    provider = OpenAIProvider(base_url=base_url or OPENAI_BASE_URL, api_key=api_key or "noop")
    model_name = model_spec.model_name or config.default_model or DEFAULT_MODEL_NAME
    return OpenAIChatModel(model_name, provider=provider)


def build_model_settings(model_spec: ModelSpec, base_url: str | None, wants_json: bool) -> ModelSettings | None:
    settings: ModelSettings = {}
    if model_spec.temperature is not None:
        settings["temperature"] = model_spec.temperature
    if model_spec.max_tokens is not None:
        settings["max_tokens"] = model_spec.max_tokens
    if wants_json and model_spec.provider == "openai-compatible":
        if base_url in (None, OPENAI_BASE_URL):
            settings["extra_body"] = {"response_format": {"type": "json_object"}}
        else:
            # Ollama OpenAI-compatible API uses "format": "json" to force JSON output.
            settings["extra_body"] = {"format": "json"}
    return settings or None


def create_prompt_handler(endpoint: EndpointSpec, spec: AIPromptSpec, config: ServerConfig) -> EndpointHandler:
    model_spec, prompt_text = resolve_model_spec(spec, config)
    model = build_model(model_spec, config)
    wants_json = endpoint.output_schema is not None
    settings = build_model_settings(model_spec, model_spec.base_url or config.default_base_url, wants_json)
    agent = Agent(
        model,
        instructions=prompt_text,
        system_prompt=spec.system_prompt or [],
        output_type=str,
        model_settings=settings,
    )

    async def handler(payload: Any, request: Any = None) -> Any:
        result = await agent.run(make_user_prompt(payload, endpoint.output_schema))
        if wants_json:
            return parse_json_reply(result.output)
        return {"text": result.output}

    return handler


# Python endpoints


def load_python_callable(endpoint: EndpointSpec, spec: PythonHandlerSpec, config: ServerConfig) -> Callable[..., Any]:
    try:
        if spec.module:
            target = spec.module if ":" in spec.module else f"{spec.module}:{spec.function}"
            func = import_symbol(target)
        else:
            func = load_file_symbol(spec.file or "", spec.function, DirectoryPermissions(config.base_dir))
    except Exception as exc:
        raise ValueError(f"Failed to load Python handler for endpoint {endpoint.name!r}: {exc}") from exc
    if not callable(func):
        raise TypeError(f"Python handler for endpoint {endpoint.name!r} is not callable.")
    return func


def _accepts_request(func: Callable[..., Any]) -> bool:
    try:
        params = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        return False
    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
        return True
    positional = [p for p in params if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)]
    return len(positional) >= 2


def create_python_handler(endpoint: EndpointSpec, spec: PythonHandlerSpec, config: ServerConfig) -> EndpointHandler:
    func = load_python_callable(endpoint, spec, config)
    pass_request = _accepts_request(func)
    is_async = inspect.iscoroutinefunction(func)

    async def handler(payload: Any, request: Any = None) -> Any:
        args = (payload, request) if pass_request else (payload,)
        if is_async:
            return await func(*args)
        result = await anyio.to_thread.run_sync(functools.partial(func, *args))
        if inspect.isawaitable(result):
            result = await result
        return result

    return handler


# Shell query endpoints


def render_query(query: str, payload: Any) -> str:
    values = payload if isinstance(payload, dict) else {}

    def replacer(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in values:
            raise ValueError(f"Missing value for query placeholder {{{{{key}}}}}.")
        value = values[key]
        if isinstance(value, str):
            return value
        return json.dumps(value)

    return QUERY_PLACEHOLDER_RE.sub(replacer, query)


def parse_shell_output(text: str) -> Any:
    try:
        parsed = parse_json_reply(text)
    except ValueError:
        return {"text": text}
    if isinstance(parsed, dict):
        return parsed
    return {"result": parsed}


def create_shell_query_handler(endpoint: EndpointSpec, spec: ShellQuerySpec) -> EndpointHandler:
    executable = shutil.which(spec.command)
    if executable is None:
        raise ValueError(f"Shell query command {spec.command!r} for endpoint {endpoint.name!r} was not found on PATH.")

    async def handler(payload: Any, request: Any = None) -> Any:
        query = render_query(spec.query, payload)
        logger.debug("Running %s for endpoint %s", spec.command, endpoint.name)
        with anyio.fail_after(spec.timeout_seconds):
            completed = await anyio.run_process([executable, *spec.args, query], check=False)
        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise RuntimeError(f"{spec.command} exited with status {completed.returncode}: {stderr}")
        return parse_shell_output(completed.stdout.decode("utf-8", errors="replace").strip())

    return handler


# Chain endpoints


def create_chain_handler(spec: ChainSpec, executor: ChainExecutor) -> EndpointHandler:
    async def handler(payload: Any, request: Any = None) -> Any:
        return await executor.execute(spec, payload, request)

    return handler
