"""Model types for endpoint configuration and chain runtime."""

from quick_endpoints.models.ai_prompt_spec import AIPromptSpec
from quick_endpoints.models.chain_spec import ChainSpec
from quick_endpoints.models.chain_step_spec import ChainStepSpec
from quick_endpoints.models.endpoint_spec import EndpointSpec
from quick_endpoints.models.endpoint_spec import HandlerSpec
from quick_endpoints.models.execution_context import ExecutionContext
from quick_endpoints.models.model_spec import ModelSpec
from quick_endpoints.models.python_handler_spec import PythonHandlerSpec
from quick_endpoints.models.server_config import ServerConfig
from quick_endpoints.models.shell_query_spec import ShellQuerySpec

__all__ = [
    "AIPromptSpec",
    "ChainSpec",
    "ChainStepSpec",
    "EndpointSpec",
    "ExecutionContext",
    "HandlerSpec",
    "ModelSpec",
    "PythonHandlerSpec",
    "ServerConfig",
    "ShellQuerySpec",
]
