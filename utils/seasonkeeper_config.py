"""
Configuration utilities for loading, parsing, and writing SeasonKeeper config files.
"""
import configparser
import logging
from pathlib import Path
from typing import Dict, Any, Union
from utils.config.config_normalizer import ConfigNormalizer

logger = logging.getLogger(__name__)

def load_configuration(path: str, normalize: bool = True) -> Union[configparser.ConfigParser, Dict[str, Dict[str, Any]]]:
    """
    Load the configuration file with optional normalization.

    Args:
        path (str): Path to the configuration file.
        normalize (bool): Whether to apply configuration normalization and environment overrides.

    Returns:
        Union[configparser.ConfigParser, Dict]: Loaded configuration parser or normalized dict.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
    """
    if not Path(path).is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    parser = configparser.ConfigParser()
    parser.read(path, encoding="utf-8")

    if normalize:
        logger.debug(f"Loading and normalizing configuration from: {path}")
        normalized_config = ConfigNormalizer().normalize_and_override(parser)
        logger.info(f"Configuration loaded and normalized successfully from: {path}")
        return normalized_config

    logger.debug(f"Loading raw configuration from: {path}")
    return parser


def write_temp_config(config_dict: dict, tmp_path: str) -> Path:
    """
    Write a temporary config.ini file from a dictionary of config sections.

    Args:
        config_dict (dict): Dictionary of config sections and values.
        tmp_path (str): Path to temporary directory.

    Returns:
        Path: Path to the written config file.
    """
    config = configparser.ConfigParser()
    for section, values in config_dict.items():
        config[section] = {key: str(value) for key, value in values.items()}

    config_path = Path(tmp_path) / "test_seasonkeeper_config.ini"
    with open(config_path, "w", encoding="utf-8") as f:
        config.write(f)

    return config_path


def get_config_value(
    config: Union[configparser.ConfigParser, Dict[str, Dict[str, Any]]],
    section: str,
    key: str,
    fallback: Any = None,
    value_type: type = str
) -> Any:
    """
    Get a configuration value with case-insensitive lookup and type conversion.

    Args:
        config: Configuration object (ConfigParser or normalized dict)
        section: Configuration section name
        key: Configuration key name
        fallback: Default value if not found
        value_type: Type to convert the value to (str, int, float, bool)

    Returns:
        Configuration value converted to specified type or fallback

    Raises:
        ValueError: If the value cannot be converted and no fallback is given
    """
    if config is None:
        return fallback

    if isinstance(config, configparser.ConfigParser):
        config = ConfigNormalizer().normalize_config(config)

    canonical = ConfigNormalizer().canonical_section(section.strip())
    value = config.get(canonical, {}).get(key.strip().lower())

    # Return fallback if value is None or empty string
    if value is None or (isinstance(value, str) and not value.strip()):
        return fallback

    try:
        if value_type == bool and isinstance(value, str):
            return value.strip().lower() in ('true', '1', 'yes', 'on', 'enabled')
        return value_type(value)
    except (ValueError, TypeError) as e:
        if fallback is not None:
            logger.warning(
                f"Failed to convert config value [{section}].{key}='{value}' to {value_type.__name__}: {e}. "
                f"Using fallback: {fallback}"
            )
            return fallback
        raise ValueError(
            f"Failed to convert config value [{section}].{key}='{value}' to {value_type.__name__}: {e}"
        )
