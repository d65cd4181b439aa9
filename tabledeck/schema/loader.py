"""Config loader — YAML serialization and deserialization for DeckConfig.

Provides round-trip save/load so deck settings can be reviewed,
version-controlled, and edited as human-readable YAML files.
"""

from pathlib import Path

import yaml

from tabledeck.errors import ConfigError

from .models import DeckConfig


def save_config(config: DeckConfig, path: str | Path) -> None:
    """Serialize a DeckConfig to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.to_dict()
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False,
                  allow_unicode=True, width=120)


def load_config(path: str | Path) -> DeckConfig:
    """Deserialize and validate a DeckConfig from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(data).__name__}")
    config = DeckConfig.from_dict(data)
    config.validate()
    return config
