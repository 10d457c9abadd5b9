"""YAML configuration loader layered underneath environment settings.

Configuration is resolved in layers (later layers win):

  1. Field defaults in :class:`~ragchat.config.settings.Settings`
  2. ``config/config.yaml`` -- static defaults checked into the deployment
  3. ``.env`` file and environment variables

The YAML file may group keys under arbitrary section headings; sections
are flattened before they are matched against ``Settings`` field names::

    ingestion:
      chunk_size: 800
      chunk_overlap: 150
    memory:
      memory_max_sessions: 500

Unknown keys are ignored with a warning.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from ragchat.config.settings import Settings
from ragchat.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)


def load_settings(path: str = "config/config.yaml", **overrides: Any) -> Settings:
    """Build :class:`Settings` from YAML defaults plus environment overrides.

    Parameters
    ----------
    path:
        Path to the YAML configuration file.  A missing file is not an
        error; the environment and field defaults are used alone.
    overrides:
        Explicit field values (highest priority), mainly for tests.

    Returns
    -------
    Settings
        Fully resolved settings.
    """
    yaml_config = _read_yaml(Path(path))
    settings = Settings(**overrides)
    if not yaml_config:
        return settings

    flat = _flatten(yaml_config)
    known = set(Settings.model_fields)
    unknown = sorted(k for k in flat if k not in known)
    if unknown:
        logger.warning("config_unknown_keys", path=path, keys=unknown)

    # Fields already set from the environment, .env or overrides keep
    # their value; YAML only fills the rest.
    explicit = settings.model_fields_set
    yaml_values = {k: v for k, v in flat.items() if k in known and k not in explicit}
    if not yaml_values:
        return settings

    logger.debug("config_yaml_applied", path=path, keys=sorted(yaml_values))
    return Settings(**{**yaml_values, **overrides})


def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        return {}
    with open(config_path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
    return data


def _flatten(config: dict[str, Any]) -> dict[str, Any]:
    """Lift keys out of section mappings; later sections win on collisions."""
    flat: dict[str, Any] = {}
    for key, value in config.items():
        if isinstance(value, dict):
            flat.update(_flatten(value))
        else:
            flat[key] = value
    return flat
