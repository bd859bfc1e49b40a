import json
import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from quick_endpoints.config import load_config
from quick_endpoints.models import ChainSpec, EndpointSpec, PythonHandlerSpec, ServerConfig, ShellQuerySpec


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_json_config_normalizes_methods(tmp_path: Path) -> None:
    config_path = _write(
        tmp_path / "config.json",
        {"port": 4001, "endpoints": [{"name": "sum", "method": "post", "python_handler": {"file": "sum.py"}}]},
    )

    config = load_config(config_path)

    assert config.port == 4001
    assert len(config.endpoints) == 1
    endpoint = config.endpoints[0]
    assert endpoint.method == "POST"
    assert endpoint.path == "/sum"
    assert isinstance(endpoint.handler, PythonHandlerSpec)
    assert config.base_dir == tmp_path.resolve()


def test_load_yaml_config(tmp_path: Path) -> None:
    config_path = tmp_path / "endpoints.yaml"
    config_path.write_text(
        """
endpoints:
  - name: base
    path: items
    method: get
    python_handler:
      module: "json:dumps"
  - name: wrap
    chain_handler:
      steps:
        - endpoint: base
          input:
            value: "{{input.value}}"
""",
        encoding="utf-8",
    )

    config = load_config(config_path)

    base, wrap = config.endpoints
    assert base.path == "/items"
    assert base.method == "GET"
    assert isinstance(wrap.handler, ChainSpec)
    assert wrap.handler.steps[0].input == {"value": "{{input.value}}"}
    assert wrap.handler.output is None


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_load_config_reads_env_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    monkeypatch.delenv("OPENAI_MODEL", raising=False)
    (tmp_path / ".env").write_text("OPENAI_BASE_URL=http://localhost:1234/v1\nOPENAI_MODEL=local\n", encoding="utf-8")
    config_path = _write(tmp_path / "config.json", {"endpoints": []})

    try:
        config = load_config(config_path)
    finally:
        os.environ.pop("OPENAI_BASE_URL", None)
        os.environ.pop("OPENAI_MODEL", None)

    assert config.default_base_url == "http://localhost:1234/v1"
    assert config.default_model == "local"


def test_endpoint_requires_exactly_one_handler() -> None:
    with pytest.raises(ValidationError, match="must specify exactly one"):
        EndpointSpec.model_validate({"name": "nothing"})
    with pytest.raises(ValidationError, match="must specify exactly one"):
        EndpointSpec.model_validate(
            {
                "name": "both",
                "python_handler": {"module": "m:f"},
                "shell_query": {"query": "q"},
            }
        )


def test_unknown_keys_rejected() -> None:
    with pytest.raises(ValidationError, match="inputSchema"):
        EndpointSpec.model_validate(
            {
                "name": "x",
                "inputSchema": {"type": "object", "required": ["a"]},
                "python_handler": {"module": "m:f"},
            }
        )
    with pytest.raises(ValidationError, match="timeout"):
        EndpointSpec.model_validate({"name": "x", "shell_query": {"query": "q", "timeout": 5}})
    with pytest.raises(ValidationError, match="prot"):
        ServerConfig.model_validate({"prot": 8080})


def test_endpoint_accepts_explicit_handler_kind() -> None:
    endpoint = EndpointSpec.model_validate({"name": "ask", "handler": {"kind": "shell_query", "query": "hi {{x}}"}})

    assert isinstance(endpoint.handler, ShellQuerySpec)
    assert endpoint.handler.command == "workiq"
    assert not endpoint.is_chain


def test_unknown_handler_kind_rejected() -> None:
    with pytest.raises(ValidationError):
        EndpointSpec.model_validate({"name": "x", "handler": {"kind": "ruby"}})


def test_unsupported_method_rejected() -> None:
    with pytest.raises(ValidationError, match="Unsupported HTTP method"):
        EndpointSpec.model_validate({"name": "x", "method": "TRACE", "python_handler": {"module": "m:f"}})


def test_python_handler_requires_one_source() -> None:
    with pytest.raises(ValidationError, match="exactly one of module or file"):
        EndpointSpec.model_validate({"name": "x", "python_handler": {"function": "f"}})


def test_ai_prompt_requires_one_prompt() -> None:
    with pytest.raises(ValidationError, match="exactly one of prompt or prompt_file"):
        EndpointSpec.model_validate({"name": "x", "ai_prompt": {"prompt": "a", "prompt_file": "b.md"}})


def test_duplicate_endpoint_names_rejected() -> None:
    endpoint = {"name": "dup", "python_handler": {"module": "m:f"}}

    with pytest.raises(ValidationError, match="Duplicate endpoint name"):
        ServerConfig.model_validate({"endpoints": [endpoint, {**endpoint, "path": "/other"}]})


def test_duplicate_routes_rejected() -> None:
    with pytest.raises(ValidationError, match="Duplicate route"):
        ServerConfig.model_validate(
            {
                "endpoints": [
                    {"name": "a", "path": "/same", "python_handler": {"module": "m:f"}},
                    {"name": "b", "path": "/same", "python_handler": {"module": "m:f"}},
                ]
            }
        )


def test_duplicate_step_names_rejected() -> None:
    with pytest.raises(ValidationError, match="Duplicate step name"):
        EndpointSpec.model_validate(
            {
                "name": "c",
                "chain_handler": {
                    "steps": [
                        {"name": "s", "endpoint": "a", "input": {}},
                        {"name": "s", "endpoint": "b", "input": {}},
                    ]
                },
            }
        )


def test_chain_requires_steps() -> None:
    with pytest.raises(ValidationError):
        EndpointSpec.model_validate({"name": "c", "chain_handler": {"steps": []}})


def test_example_config_loads() -> None:
    example = Path(__file__).resolve().parents[2] / "examples" / "endpoints.yaml"

    config = load_config(example)

    assert [endpoint.name for endpoint in config.endpoints] == [
        "sum",
        "word-count",
        "summarize",
        "summarize-and-count",
    ]
