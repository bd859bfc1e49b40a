"""Keeps config-relative file references inside the config directory."""

from __future__ import annotations

from pathlib import Path


class DirectoryPermissions:
    def __init__(self, root: Path | None) -> None:
        self._root = root.expanduser().resolve(strict=False) if root is not None else None

    @property
    def root(self) -> Path | None:
        return self._root

    def resolve(self, path: Path) -> Path:
        if self._root is None:
            raise PermissionError("No base directory configured; file references are denied.")
        target = path
        if not target.is_absolute():
            target = self._root / target
        resolved = target.expanduser().resolve(strict=False)
        if not resolved.is_relative_to(self._root):
            raise PermissionError(f"Path {resolved} is outside base directory {self._root}.")
        return resolved
