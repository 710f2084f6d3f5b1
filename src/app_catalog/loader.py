"""Definition file loading and structural checks."""

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from app_catalog.exceptions import MalformedDefinitionError
from schemas.app import AppDefinition

# Recognized definition file extensions
JSON_SUFFIXES = {".json"}
YAML_SUFFIXES = {".yaml", ".yml"}
DEFINITION_SUFFIXES = JSON_SUFFIXES | YAML_SUFFIXES


def load_definition(path: Path) -> AppDefinition:
    """Load a single app definition file.

    Args:
        path: Path to a JSON or YAML definition file

    Returns:
        Validated AppDefinition

    Raises:
        MalformedDefinitionError: If the file cannot be read, parsed, or
            does not describe a usable app definition
    """
    data = load_document(path)

    if not is_valid_app_definition(data):
        raise MalformedDefinitionError(path.name, "missing required fields")

    try:
        return AppDefinition.model_validate(data)
    except ValidationError as e:
        raise MalformedDefinitionError(path.name, format_pydantic_error(e)) from e


def load_document(path: Path) -> Any:
    """Read and parse a definition document.

    JSON files go through the json module, everything else through
    yaml.safe_load.

    Raises:
        MalformedDefinitionError: If the file is unreadable or has bad syntax
    """
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() in JSON_SUFFIXES:
                return json.load(f)
            return yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedDefinitionError(path.name, f"cannot read file: {e}") from e
    except json.JSONDecodeError as e:
        raise MalformedDefinitionError(path.name, f"invalid JSON: {e}") from e
    except yaml.YAMLError as e:
        raise MalformedDefinitionError(path.name, f"invalid YAML: {e}") from e


def is_valid_app_definition(data: Any) -> bool:
    """Check the minimal shape a document needs to be indexed.

    Requires a ``metadata`` mapping with non-empty string ``id`` and
    ``name``, a ``docker`` mapping and a ``configuration`` mapping.
    """
    if not isinstance(data, dict):
        return False

    metadata = data.get("metadata")
    if not isinstance(metadata, dict):
        return False

    for key in ("id", "name"):
        value = metadata.get(key)
        if not isinstance(value, str) or not value:
            return False

    return isinstance(data.get("docker"), dict) and isinstance(
        data.get("configuration"), dict
    )


def find_definition_files(directory: Path) -> list[Path]:
    """List definition files in directory, sorted by name.

    Raises:
        OSError: If the directory cannot be enumerated
    """
    return sorted(
        p
        for p in directory.iterdir()
        if p.suffix.lower() in DEFINITION_SUFFIXES and p.is_file()
    )


def format_pydantic_error(error: ValidationError) -> str:
    """Format a Pydantic ValidationError as a one-line summary.

    Args:
        error: Pydantic ValidationError

    Returns:
        Semicolon separated ``location: message`` pairs
    """
    parts = []
    for e in error.errors():
        field_path = ".".join(str(loc) for loc in e["loc"])
        parts.append(f"{field_path}: {e['msg']}")
    return "; ".join(parts)
