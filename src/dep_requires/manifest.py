"""
Parsers for tool requirement manifests.

A manifest declares the executables a project needs under a ``tools`` table::

    [tools]
    git = ">=2.30"
    node = "18.14.1"
    make = "*"

The same layout is accepted as JSON and YAML.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List

import toml
import yaml

from .dependency import Dependency
from .error_handling import ErrorCategory, VersionException, get_error_handler
from .operators import parse_constraint

# Constraints that only require the tool to be present
EXISTENCE_ONLY = {"", "*", "any"}


def _validate_file_path(file_path: str) -> Path:
    if not file_path or not isinstance(file_path, str):
        raise ValueError("File path must be a non-empty string")

    path = Path(file_path).expanduser()
    if not path.exists():
        raise ValueError(f"File does not exist: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")
    if path.suffix.lower() not in _LOADERS:
        raise ValueError(f"File type not allowed: {path.suffix}")
    return path


def _read_file(path: Path) -> str:
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read()
    except PermissionError:
        raise ValueError("Permission denied reading file")
    except OSError as e:
        raise ValueError(f"Error reading file: {e}")


def _load_toml(content: str) -> Any:
    try:
        return toml.loads(content)
    except toml.TomlDecodeError as e:
        raise ValueError(f"Invalid TOML format: {e}")


def _load_json(content: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON format: {e}")


def _load_yaml(content: str) -> Any:
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML format: {e}")


_LOADERS: Dict[str, Callable[[str], Any]] = {
    ".toml": _load_toml,
    ".json": _load_json,
    ".yaml": _load_yaml,
    ".yml": _load_yaml,
}


def parse_tool_entry(name: str, constraint: Any, source_file: str) -> Dependency:
    """Build a Dependency from one ``name = constraint`` manifest entry."""
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Tool names must be non-empty strings")

    if constraint is None:
        constraint = ""
    # Unquoted numbers lose digits when parsed, e.g. 18.10 becomes 18.1
    if not isinstance(constraint, str):
        raise ValueError(f"Constraint for {name} must be a quoted string")

    text = constraint.strip()
    if text.lower() in EXISTENCE_ONLY:
        return Dependency(name=name.strip(), source_file=source_file)

    try:
        operator, version = parse_constraint(text)
    except VersionException as e:
        raise ValueError(f"Invalid constraint for {name}: {e.message}")

    return Dependency(
        name=name.strip(),
        version=version,
        operator=operator,
        source_file=source_file,
    )


def parse_manifest(file_path: str) -> List[Dependency]:
    """
    Parse a tool requirement manifest.

    Args:
        file_path: Path to a ``.toml``, ``.json``, ``.yaml`` or ``.yml`` manifest

    Returns:
        List[Dependency]: Declared tools in file order

    Raises:
        ValueError: If the file is unreadable, malformed, or has no tools table
    """
    path = _validate_file_path(file_path)
    data = _LOADERS[path.suffix.lower()](_read_file(path))

    if not isinstance(data, dict):
        raise ValueError("Manifest must contain a mapping at the top level")

    tools = data.get("tools")
    if not isinstance(tools, dict):
        raise ValueError("Manifest must contain a 'tools' table")

    dependencies = []
    for name, constraint in tools.items():
        try:
            dependencies.append(parse_tool_entry(name, constraint, str(path)))
        except ValueError as e:
            get_error_handler().warning(
                ErrorCategory.MANIFEST,
                f"Invalid manifest entry: {e}",
                "manifest",
                "parse_manifest",
                details={"file_path": path.name, "tool": str(name)},
            )
            raise

    return dependencies
