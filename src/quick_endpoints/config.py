"""Loading of endpoint configuration files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from quick_endpoints.models.server_config import ServerConfig


logger = logging.getLogger(__name__)


def read_config_data(path: Path) -> dict[str, Any]:
    # YAML is a superset of JSON, so one loader serves both formats.
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping at the top level.")
    return raw


def load_config(path: Path | str) -> ServerConfig:
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    load_dotenv(config_path.parent / ".env", override=False)

    data = read_config_data(config_path)
    data.setdefault("base_dir", str(config_path.parent))
    if not data.get("default_model") and os.environ.get("OPENAI_MODEL"):
        data["default_model"] = os.environ["OPENAI_MODEL"]
    if not data.get("default_base_url") and os.environ.get("OPENAI_BASE_URL"):
        data["default_base_url"] = os.environ["OPENAI_BASE_URL"]

    config = ServerConfig.model_validate(data)
    if not config.base_dir.is_absolute():
        config.base_dir = (config_path.parent / config.base_dir).resolve()
    logger.info("Loaded %d endpoint(s) from %s", len(config.endpoints), config_path)
    return config
