"""Process-wide configuration, read from an INI file in the user's config dir"""

import configparser
import logging
import os
import platform
from typing import Optional, Any

from pathlib import Path

from semverstore.constants import MAX_RETRIES

APP_NAME = "semverstore"

logger = logging.getLogger(__name__)

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")

default_cfg = {"store": {"max_retries": str(MAX_RETRIES)}}

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/semverstore").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))


def get_config_file():
    return config_dir / f"{APP_NAME}.cfg"


class ConfigAccessor:
    """
    A dict-like accessor for configuration files.

    Missing files, sections and keys are not errors: ``get`` returns the
    default instead.

    Usage:
        config = ConfigAccessor()
        value = config.get('store', 'max_retries', default='12')
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize a ConfigAccessor with an optional config file path.

        Args:
            config_path: Path to the configuration file. If None, uses the default path.
        """
        if config_path is None:
            self.config_path = get_config_file()
        else:
            self.config_path = Path(config_path)

        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            self.config.read(self.config_path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the specified section and key.

        Args:
            section: The configuration section
            key: The configuration key
            default: Value to return if the section or key doesn't exist

        Returns:
            The configuration value if it exists, otherwise the default value
        """
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default


def get_max_retries(config: Optional[ConfigAccessor] = None) -> int:
    """
    Get the compare-and-set attempt budget for store operations.

    The SEMVERSTORE_MAX_RETRIES environment variable wins over the
    ``[store] max_retries`` option of the config file. Invalid values are
    ignored with a warning.

    Returns:
        A positive number of attempts (defaults to 12)
    """
    value = os.environ.get("SEMVERSTORE_MAX_RETRIES")
    if value is None:
        if config is None:
            config = ConfigAccessor()
        value = config.get("store", "max_retries", default_cfg["store"]["max_retries"])

    try:
        retries = int(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring invalid max_retries value '{value}'")
        return MAX_RETRIES

    if retries < 1:
        logger.warning(f"Ignoring invalid max_retries value '{value}'")
        return MAX_RETRIES
    return retries
