"""
Load tool descriptions from the bundled tools.yaml file.

The catalog is defined in src/minimax_image/tools.yaml and loaded once per
process. Every registered tool must have a description there.
"""

import importlib.resources
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from minimax_image.tools.names import ALL_TOOLS
from minimax_image.utils.exceptions import ConfigurationError

# Module-level cache for the parsed catalog
_catalog: "ToolCatalog | None" = None


class ServerInfo(BaseModel):
    """Schema for the server section of tools.yaml."""

    name: str = Field(..., min_length=1)
    instructions: str = ""


class ToolCatalog(BaseModel):
    """Schema for tools.yaml."""

    model_config = {"extra": "allow"}

    server: ServerInfo
    tools: dict[str, str]


def _parse_catalog(raw: str) -> ToolCatalog:
    try:
        data: Any = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse tools.yaml: {e}. Check YAML syntax and formatting."
        ) from e

    if data is None:
        raise ConfigurationError("tools.yaml is empty. Expected 'server' and 'tools' sections.")

    try:
        catalog = ToolCatalog(**data)
    except (TypeError, ValidationError) as e:
        if isinstance(e, ValidationError):
            details = "\n".join(
                f"  - {'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
        else:
            details = f"  - {e}"
        raise ConfigurationError(f"Invalid tools.yaml structure:\n{details}") from e

    missing = [name for name in ALL_TOOLS if not catalog.tools.get(name, "").strip()]
    if missing:
        raise ConfigurationError(f"tools.yaml has no description for: {', '.join(missing)}")
    return catalog


def load_catalog() -> ToolCatalog:
    """Load and validate tools.yaml from the package. Cached after first call.

    Raises:
        ConfigurationError: If the file is missing, malformed, or incomplete.
    """
    global _catalog
    if _catalog is not None:
        return _catalog

    try:
        with (
            importlib.resources.files("minimax_image")
            .joinpath("tools.yaml")
            .open(encoding="utf-8") as f
        ):
            raw = f.read()
    except FileNotFoundError as e:
        raise ConfigurationError(
            "tools.yaml not found. This file is required and should be bundled with the package."
        ) from e

    _catalog = _parse_catalog(raw)
    return _catalog


def get_tool_description(name: str) -> str:
    """Return the description for a tool name."""
    return load_catalog().tools[name].strip()


def get_server_info() -> ServerInfo:
    return load_catalog().server


__all__ = ["ServerInfo", "ToolCatalog", "get_server_info", "get_tool_description", "load_catalog"]
