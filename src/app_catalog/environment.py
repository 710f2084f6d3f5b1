"""Runtime environment resolution and dotenv rendering."""

import re
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateError

from app_catalog import __version__
from app_catalog.validator import is_empty, stringify_value
from schemas.app import AppDefinition, ConfigField

TEMPLATE_DIR = Path(__file__).parent / "templates"
ENV_TEMPLATE = "env.j2"

# Values containing any of these need quoting in a dotenv file
_NEEDS_QUOTING = re.compile(r"[\s\"'#$\\]")


def apply_defaults(
    fields: Sequence[ConfigField], config: Mapping[str, Any]
) -> dict[str, Any]:
    """Fill empty configuration values from the fields' declared defaults.

    Keys not declared by any field are kept unchanged.
    """
    resolved = dict(config)
    for field in fields:
        if is_empty(resolved.get(field.key)) and not is_empty(field.default):
            resolved[field.key] = field.default
    return resolved


def resolve_environment(
    fields: Sequence[ConfigField], config: Mapping[str, Any]
) -> dict[str, str]:
    """Map configuration values onto environment variable names.

    Supplied values win; fields without a value fall back to their declared
    default. Fields with neither, and fields without an ``envVar``, are left
    out.

    Args:
        fields: Schema fields, in declaration order
        config: Submitted values keyed by field key

    Returns:
        Environment variables in field declaration order
    """
    resolved = apply_defaults(fields, config)
    env: dict[str, str] = {}

    for field in fields:
        value = resolved.get(field.key)
        if field.env_var and not is_empty(value):
            env[field.env_var] = stringify_value(value)

    return env


def env_quote(value: str) -> str:
    """Quote a value for a dotenv file if it needs it."""
    if not _NEEDS_QUOTING.search(value):
        return value
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("$", "\\$")
        .replace("\n", "\\n")
    )
    return f'"{escaped}"'


def setup_jinja_environment(template_dir: Path = TEMPLATE_DIR) -> Environment:
    """Set up Jinja2 environment with template directory.

    Raises:
        FileNotFoundError: If template directory doesn't exist
    """
    if not template_dir.exists():
        raise FileNotFoundError(f"Template directory not found: {template_dir}")

    env = Environment(
        loader=FileSystemLoader(template_dir),
        autoescape=False,  # dotenv output, not HTML
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["env_quote"] = env_quote

    return env


def render_env_file(
    app: AppDefinition,
    config: Mapping[str, Any],
    template_dir: Path = TEMPLATE_DIR,
) -> str:
    """Render the resolved environment of an app as a dotenv document.

    Args:
        app: App template
        config: Submitted values keyed by field key
        template_dir: Directory containing env.j2

    Returns:
        Rendered dotenv content

    Raises:
        TemplateError: If template rendering fails
    """
    env = setup_jinja_environment(template_dir)
    context = {
        "app": app.metadata,
        "environment": resolve_environment(app.configuration.fields, config),
        "tool_version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    try:
        return env.get_template(ENV_TEMPLATE).render(context)
    except TemplateError as e:
        raise TemplateError(f"Failed to render template {ENV_TEMPLATE}: {e}") from e


def write_env_file(content: str, output_path: Path) -> None:
    """Write rendered content to file, creating parent directories."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
