"""
YAML defaults for the settings classes.

Each settings module reads its defaults from one file under configs/;
environment variables still win (pydantic-settings). Set
NTSB_TEXT_CONFIGS_DIR to read the YAML from another directory, e.g. when the
package is installed without the repository's configs/.

Usage:
    from ntsb_text.config._loader import load_yaml_section

    config = load_yaml_section("config.yaml")
    model = load_yaml_section("features/topic_modeling.yaml", "topic_modeling", "model")
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger(__name__)

CONFIGS_DIR_ENV = "NTSB_TEXT_CONFIGS_DIR"


def configs_dir() -> Path:
    """Directory holding config.yaml and features/*.yaml."""
    override = os.environ.get(CONFIGS_DIR_ENV)
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[2] / "configs"


@lru_cache(maxsize=16)
def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        logger.debug(f"No config file at {path}; using built-in defaults")
        return {}

    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path} must hold a YAML mapping, got {type(data).__name__}")
    return data


def load_yaml_section(config_file: str, *keys: str) -> Dict[str, Any]:
    """
    Mapping found under nested ``keys`` of a YAML file.

    Args:
        config_file: Path relative to the configs directory
        *keys: Keys to descend through, e.g. ("topic_modeling", "model")

    Returns:
        The mapping, or {} if the file, a key or a mapping along the way is missing
    """
    node: Any = _read_yaml(configs_dir() / config_file)
    for key in keys:
        if not isinstance(node, dict):
            return {}
        node = node.get(key)
    return node if isinstance(node, dict) else {}


def clear_config_cache() -> None:
    """Forget parsed files (after editing YAML or changing NTSB_TEXT_CONFIGS_DIR)."""
    _read_yaml.cache_clear()
