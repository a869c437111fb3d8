import os
import yaml
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "FILE_INDEXER_CONFIG"


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses $FILE_INDEXER_CONFIG
            or ./config.yaml.

    Returns:
        Dict containing configuration values.

    Raises:
        ConfigurationError: If config file not found or cannot be parsed.
    """
    if config_path is None:
        config_path = os.getenv(CONFIG_PATH_ENV) or "config.yaml"
    config_path = str(Path(config_path).resolve())

    try:
        with open(config_path, "r", encoding="utf-8") as file:
            config = yaml.safe_load(file) or {}
    except FileNotFoundError as e:
        logger.error(f"Configuration file not found at: {config_path}")
        raise ConfigurationError(f"Configuration file not found at: {config_path}") from e
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML file: {e}")
        raise ConfigurationError(f"Failed to parse YAML file {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

    logger.info(f"Configuration loaded from {config_path}")
    return config
