"""Site configuration for orgsite.

Configuration is read from ``orgsite.yaml`` at the project root and merged
over DEFAULT_CONFIG. Every key is optional.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from .routes import RouteResolver

CONFIG_FILENAME = "orgsite.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "content_dir": "content",
    "output_dir": "output",
    "reader": "org",
    "source_ext": ".org",
    "static_dirs": ["assets", "images"],
    "toc_depth": 3,
    "url": "",
    "title": "",
    "author": "",
}


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from orgsite.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.
    """
    config_path = project_root / CONFIG_FILENAME
    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
    return config


def resolver_from_config(config: dict[str, Any]) -> RouteResolver:
    """Build a RouteResolver for the configured content layout."""
    return RouteResolver(
        content_root=str(config.get("content_dir", DEFAULT_CONFIG["content_dir"])),
        source_ext=str(config.get("source_ext", DEFAULT_CONFIG["source_ext"])),
        static_dirs=config.get("static_dirs", DEFAULT_CONFIG["static_dirs"]),
    )
