import sys
import types
from pathlib import Path

import pytest

from quick_endpoints import python_loader
from quick_endpoints.directory_permissions import DirectoryPermissions
from quick_endpoints.json_utils import extract_first_json_object, parse_json_reply
from quick_endpoints.prompting import load_prompt_file, make_user_prompt


def test_import_symbol_valid_and_invalid() -> None:
    tmp_module = types.ModuleType("tmpmod")
    tmp_module.__dict__["Value"] = 123
    sys.modules["tmpmod"] = tmp_module
    try:
        assert python_loader.import_symbol("tmpmod:Value") == 123
        with pytest.raises(ValueError):
            python_loader.import_symbol("tmpmod.Value")
    finally:
        sys.modules.pop("tmpmod", None)


def test_load_file_symbol_missing_symbol(tmp_path: Path) -> None:
    (tmp_path / "mod.py").write_text("VALUE = 1\n", encoding="utf-8")
    permissions = DirectoryPermissions(tmp_path)

    assert python_loader.load_file_symbol("mod.py", "VALUE", permissions) == 1
    with pytest.raises(AttributeError):
        python_loader.load_file_symbol("mod.py", "handler", permissions)


def test_directory_permissions_resolve_allows_within_root(tmp_path: Path) -> None:
    perms = DirectoryPermissions(tmp_path)

    resolved = perms.resolve(Path("nested/file.py"))

    assert resolved == tmp_path.resolve() / "nested" / "file.py"


def test_directory_permissions_resolve_blocks_escape(tmp_path: Path) -> None:
    perms = DirectoryPermissions(tmp_path / "base")

    with pytest.raises(PermissionError):
        perms.resolve(Path("../outside.py"))


def test_directory_permissions_without_root_denies_all() -> None:
    perms = DirectoryPermissions(None)

    assert perms.root is None
    with pytest.raises(PermissionError):
        perms.resolve(Path("file.py"))


def test_extract_first_json_object_handles_nesting_and_strings() -> None:
    text = 'Here you go: {"a": {"b": "}"}, "c": "\\"q\\""} trailing {"x": 1}'

    assert extract_first_json_object(text) == '{"a": {"b": "}"}, "c": "\\"q\\""}'


def test_extract_first_json_object_errors() -> None:
    with pytest.raises(ValueError, match="No JSON object"):
        extract_first_json_object("nothing")
    with pytest.raises(ValueError, match="Unbalanced"):
        extract_first_json_object('{"a": 1')


def test_parse_json_reply_prefers_whole_text() -> None:
    assert parse_json_reply("[1, 2]") == [1, 2]
    assert parse_json_reply('```json\n{"a": 1}\n```') == {"a": 1}


def test_make_user_prompt_contains_sections() -> None:
    prompt = make_user_prompt({"b": 2, "a": 1}, {"type": "object"})

    assert prompt.startswith("## Request (YAML)\na: 1\nb: 2\n")
    assert "## Response Format" in prompt
    assert prompt.endswith("}\n")


def test_make_user_prompt_empty_payload() -> None:
    assert make_user_prompt({}) == "## Request (YAML)\n{}\n"


def test_load_prompt_file_reads_frontmatter(tmp_path: Path) -> None:
    path = tmp_path / "p.md"
    path.write_text("---\ntemperature: 0.5\n---\n\n# Task\n\nDo it.\n", encoding="utf-8")

    document = load_prompt_file(path)

    assert document.metadata == {"temperature": 0.5}
    assert document.text == "# Task\n\nDo it."


def test_load_prompt_file_rejects_empty(tmp_path: Path) -> None:
    path = tmp_path / "empty.md"
    path.write_text("---\ntemperature: 0.5\n---\n", encoding="utf-8")

    with pytest.raises(ValueError, match="empty"):
        load_prompt_file(path)
