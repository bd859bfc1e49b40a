"""Loading of Python callables named in endpoint configs."""

from __future__ import annotations

import hashlib
import importlib
import importlib.util
import sys
from pathlib import Path
from typing import Any

from quick_endpoints.directory_permissions import DirectoryPermissions


def import_symbol(path: str) -> Any:
    """
    Imports a symbol given "package.module:SymbolName".
    """
    if ":" not in path:
        raise ValueError(f"Expected import path 'module:Symbol', got {path!r}")
    mod, sym = path.split(":", 1)
    module = importlib.import_module(mod)
    return getattr(module, sym)


def load_file_symbol(file: str, symbol: str, permissions: DirectoryPermissions) -> Any:
    """
    Imports ``symbol`` from a Python source file given relative to the permitted base directory.
    """
    source = permissions.resolve(Path(file))
    if not source.is_file():
        raise FileNotFoundError(source)
    digest = hashlib.sha1(str(source).encode("utf-8")).hexdigest()[:12]
    module_name = f"_quick_endpoints_handler_{source.stem}_{digest}"
    spec = importlib.util.spec_from_file_location(module_name, source)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot load module from {source}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    if not hasattr(module, symbol):
        raise AttributeError(f"{source} does not define {symbol!r}")
    return getattr(module, symbol)
