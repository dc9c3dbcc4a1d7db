import yaml
from pathlib import Path
from typing import Optional
from .models import AppConfig

DEFAULT_CONFIG_PATH = Path("conf/abt.yaml")

def load_config(config_path: Optional[Path] = None, required: bool = True) -> AppConfig:
    """Loads YAML config and parses it into AppConfig Pydantic model.

    With no path, or a missing file when ``required`` is False, the defaults
    are returned.
    """
    if config_path is None:
        return AppConfig()
    if not config_path.exists():
        if required:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return AppConfig()

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    # Flat files (no 'general' section) are accepted as general settings
    if "general" not in data and "ui" not in data:
        data = {"general": data}

    return AppConfig(**data)
