"""TOML configuration loader for the streaming pipeline.

Loads streaming defaults from defaults.toml and applies environment
overrides. The smooth-rendering toggle can be flipped per deployment with
the PUBLIC_SMOOTH_UPDATES variable without touching the file.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from updatestream.schemas.config import StreamingConfig

logger = logging.getLogger(__name__)

# Default config directory inside the updatestream package
_CONFIG_DIR = Path(__file__).parent / "config"

SMOOTH_UPDATES_ENV = "PUBLIC_SMOOTH_UPDATES"


def load_streaming_config(config_path: Path | None = None) -> StreamingConfig:
    """Load streaming settings from a TOML file.

    Args:
        config_path: Path to defaults.toml. Defaults to
            updatestream/config/defaults.toml.

    Returns:
        StreamingConfig with values from the TOML file and the environment.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the [streaming] section is not a table.
    """
    path = config_path or _CONFIG_DIR / "defaults.toml"
    if not path.exists():
        raise FileNotFoundError(f"Streaming config not found: {path}")

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    section = raw.get("streaming", {})
    if not isinstance(section, dict):
        raise ValueError(f"[streaming] in {path} must be a table")

    config = StreamingConfig(**section)
    return apply_env_overrides(config)


def apply_env_overrides(config: StreamingConfig) -> StreamingConfig:
    """Return a copy of config with environment overrides applied.

    Only PUBLIC_SMOOTH_UPDATES is recognised; the value ``"true"`` enables
    smooth rendering and any other value disables it.
    """
    raw = os.environ.get(SMOOTH_UPDATES_ENV)
    if raw is None:
        return config

    smooth = raw.strip().lower() == "true"
    logger.debug("%s=%r overrides smooth_updates=%s", SMOOTH_UPDATES_ENV, raw, smooth)
    return config.model_copy(update={"smooth_updates": smooth})
