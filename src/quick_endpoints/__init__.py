"""Public package exports."""

from quick_endpoints.chain_executor import ChainExecutor
from quick_endpoints.chain_executor import ChainRun
from quick_endpoints.chain_executor import ChainRunStatus
from quick_endpoints.config import load_config
from quick_endpoints.dependency_graph import detect_circular_dependencies
from quick_endpoints.dependency_graph import validate_chain_graph
from quick_endpoints.errors import ChainExecutionError
from quick_endpoints.errors import CircularDependencyError
from quick_endpoints.errors import ConfigReferenceError
from quick_endpoints.errors import EmbeddedTemplateError
from quick_endpoints.errors import PathResolutionError
from quick_endpoints.handler_registry import HandlerRegistry
from quick_endpoints.handler_registry import RegistryEntry
from quick_endpoints.server import create_app
from quick_endpoints.template import compile_template
from quick_endpoints.template import evaluate_template

__all__ = [
    "ChainExecutionError",
    "ChainExecutor",
    "ChainRun",
    "ChainRunStatus",
    "CircularDependencyError",
    "ConfigReferenceError",
    "EmbeddedTemplateError",
    "HandlerRegistry",
    "PathResolutionError",
    "RegistryEntry",
    "compile_template",
    "create_app",
    "detect_circular_dependencies",
    "evaluate_template",
    "load_config",
    "validate_chain_graph",
]
