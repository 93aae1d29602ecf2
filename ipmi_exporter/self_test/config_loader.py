"""Load IPMI module configuration from YAML files."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from ipmi_exporter.self_test.models.ipmi_config import IPMIConfig


def load_module_config(config_path: Path, module: str) -> IPMIConfig:
    """Load one module from an exporter configuration file.

    Args:
        config_path: Path to the YAML file with a top-level `modules` mapping
        module: Module name (e.g., "default")

    Returns:
        Parsed module configuration

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If YAML is invalid, the module is missing, or it doesn't
            match the schema

    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with config_path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Empty or invalid config file: {config_path}")

    modules = data.get("modules") or {}
    if module not in modules:
        raise ValueError(f"Module '{module}' not found in {config_path}")

    try:
        return IPMIConfig.model_validate(modules[module] or {})
    except ValidationError as e:
        raise ValueError(f"Invalid module '{module}' in {config_path}: {e}") from e
