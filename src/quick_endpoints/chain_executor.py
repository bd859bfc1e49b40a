"""Sequential execution of chain endpoints."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

from quick_endpoints.errors import ChainExecutionError, TemplateError
from quick_endpoints.handler_registry import HandlerRegistry, RegistryEntry
from quick_endpoints.models.chain_spec import ChainSpec
from quick_endpoints.models.chain_step_spec import ChainStepSpec
from quick_endpoints.models.execution_context import ExecutionContext
from quick_endpoints.template import compile_template
from quick_endpoints.validation import format_errors


logger = logging.getLogger(__name__)


class ChainRunStatus(enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ChainRun:
    status: ChainRunStatus = ChainRunStatus.PENDING
    current_step: Optional[int] = None
    output: Any = None
    error: Optional[ChainExecutionError] = None

    @property
    def finished(self) -> bool:
        return self.status in (ChainRunStatus.SUCCEEDED, ChainRunStatus.FAILED)

    def start_step(self, index: int) -> None:
        self._ensure_open()
        self.status = ChainRunStatus.RUNNING
        self.current_step = index

    def succeed(self, output: Any) -> None:
        self._ensure_open()
        self.status = ChainRunStatus.SUCCEEDED
        self.output = output

    def fail(self, error: ChainExecutionError) -> None:
        self._ensure_open()
        self.status = ChainRunStatus.FAILED
        self.error = error

    def _ensure_open(self) -> None:
        if self.finished:
            raise RuntimeError(f"Chain run already {self.status.value}.")


class ChainExecutor:
    """Runs chain steps in order against the endpoints of one registry.

    Each ``execute`` call owns its own ExecutionContext, so concurrent
    executions share nothing but the (read-only) registry.
    """

    def __init__(self, registry: HandlerRegistry) -> None:
        self._registry = registry

    async def execute(
        self,
        chain: ChainSpec,
        payload: Any,
        request: Any = None,
        run: ChainRun | None = None,
    ) -> Any:
        run = run if run is not None else ChainRun()
        context = ExecutionContext(input=payload)
        try:
            for index, step in enumerate(chain.steps):
                run.start_step(index)
                output = await self._run_step(index, step, context, request)
                context.record(output, step.name)
            result = self._build_output(chain, context)
        except ChainExecutionError as exc:
            run.fail(exc)
            raise
        run.succeed(result)
        return result

    async def _run_step(
        self,
        index: int,
        step: ChainStepSpec,
        context: ExecutionContext,
        request: Any,
    ) -> Any:
        entry = self._resolve(index, step)

        try:
            step_input = compile_template(step.input, context)
        except TemplateError as exc:
            raise self._error(index, step, f"input template failed: {exc}") from exc

        if entry.input_validator is not None and not entry.input_validator(step_input):
            errors = list(entry.input_validator.errors)
            raise self._error(index, step, f"input validation failed: {format_errors(errors)}", errors)

        logger.debug("Chain step %s calling endpoint %s", index, step.endpoint)
        try:
            output = await entry.handler(step_input, request)
        except Exception as exc:
            raise self._error(index, step, f"handler failed: {exc}") from exc

        if entry.output_validator is not None and not entry.output_validator(output):
            errors = list(entry.output_validator.errors)
            raise self._error(index, step, f"output validation failed: {format_errors(errors)}", errors)
        return output

    def _resolve(self, index: int, step: ChainStepSpec) -> RegistryEntry:
        entry = self._registry.lookup(step.endpoint)
        if entry is None:
            raise self._error(index, step, f'endpoint "{step.endpoint}" is not registered')
        return entry

    def _build_output(self, chain: ChainSpec, context: ExecutionContext) -> Any:
        if chain.output is None:
            return context.previous_step
        try:
            return compile_template(chain.output, context)
        except TemplateError as exc:
            raise ChainExecutionError(f"Chain output mapping failed: {exc}") from exc

    def _error(
        self,
        index: int,
        step: ChainStepSpec,
        message: str,
        details: list[dict[str, Any]] | None = None,
    ) -> ChainExecutionError:
        return ChainExecutionError(
            message,
            step_index=index,
            step_name=step.name,
            endpoint=step.endpoint,
            details=details,
        )
