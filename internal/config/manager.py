"""
Configuration management for the migration runner.
"""

import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli
from typing_extensions import NotRequired, TypedDict

import lib.utils as utils

logger = logging.getLogger(__name__)

DEFAULT_MIGRATIONS_DIR = "migrations"
DEFAULT_STATE_FILE = ".migrate"


# Keys of the [migrations] section: migration module directory, path of the
# JSON completion record and environment tag passed to every action
MigrationsConfig = TypedDict(
    "MigrationsConfig",
    {
        "dir": NotRequired[str],
        "state-file": NotRequired[str],
        "environment": NotRequired[str],
    },
)


def replaceMatchToEnv(match: re.Match[str]) -> str:
    """Replace environment variable placeholders with actual values.

    Args:
        match: A regex match object containing the environment variable name.

    Returns:
        str: The value of the environment variable or the original placeholder
             if the variable is not set.
    """
    key = match.group(1)
    return os.getenv(key, match.group(0))


def substituteEnvVars(value: Any) -> Any:
    """Recursively substitute ${VAR_NAME} placeholders in configuration values.

    Strings, dictionaries and lists are processed, other types are returned
    unchanged.
    """
    if isinstance(value, str):
        return re.sub(r"\$\{([A-Za-z_][A-Za-z0-9_-]*)\}", replaceMatchToEnv, value)
    elif isinstance(value, dict):
        return {k: substituteEnvVars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substituteEnvVars(item) for item in value]
    return value


class ConfigManager:
    """Manages configuration loading for the migration runner.

    Missing configuration is not an error: every setting has a default.
    Unreadable configuration terminates the process.
    """

    def __init__(
        self, configPath: str = "config.toml", configDirs: Optional[List[str]] = None, dotEnvFile: str = ".env"
    ):
        """Initialize ConfigManager with config file path and optional config directories."""
        self.config_path = configPath
        self.config_dirs = configDirs or []
        utils.load_dotenv(path=dotEnvFile)
        self.config = substituteEnvVars(self._loadConfig())

    def _findTomlFilesRecursive(self, directory: str) -> List[Path]:
        """Recursively find all .toml files in a directory, dood!"""
        toml_files = []
        dir_path = Path(directory)

        if not dir_path.exists():
            logger.warning(f"Config directory {directory} does not exist, skipping, dood!")
            return toml_files

        if not dir_path.is_dir():
            logger.warning(f"Config path {directory} is not a directory, skipping, dood!")
            return toml_files

        for toml_file in dir_path.rglob("*.toml"):
            if toml_file.is_file():
                toml_files.append(toml_file)
                logger.debug(f"Found config file: {toml_file}")

        return sorted(toml_files)

    def _mergeConfigs(self, base_config: Dict[str, Any], new_config: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two configuration dictionaries, dood!"""
        merged = base_config.copy()

        for key, value in new_config.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._mergeConfigs(merged[key], value)
            else:
                merged[key] = value

        return merged

    def _readToml(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "rb") as f:
                return tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            logger.error(f"Failed to load config file {path}: {e}")
            sys.exit(1)

    def _loadConfig(self) -> Dict[str, Any]:
        """Load configuration from TOML file and optional config directories."""
        config: Dict[str, Any] = {}

        configFile = Path(self.config_path)
        if configFile.exists():
            config = self._readToml(configFile)
            logger.info(f"Loaded main config from {self.config_path}")
        else:
            logger.debug(f"Configuration file {self.config_path} not found, using defaults")

        if self.config_dirs:
            logger.info(f"Scanning {len(self.config_dirs)} config directories for .toml files, dood!")

            for config_dir in self.config_dirs:
                toml_files = self._findTomlFilesRecursive(config_dir)
                logger.info(f"Found {len(toml_files)} .toml files in {config_dir}")

                for toml_file in toml_files:
                    config = self._mergeConfigs(config, self._readToml(toml_file))
                    logger.info(f"Merged config from {toml_file}")

        return config

    def get(self, key: str, default=None) -> Any:
        """Get configuration value by key."""
        return self.config.get(key, default)

    def getLoggingConfig(self) -> Dict[str, Any]:
        """Get logging-specific configuration."""
        return self.get("logging", {})

    def getMigrationsConfig(self) -> MigrationsConfig:
        """Get raw ``[migrations]`` section."""
        return self.get("migrations", {})

    def getMigrationsDir(self) -> str:
        return str(self.getMigrationsConfig().get("dir", DEFAULT_MIGRATIONS_DIR))

    def getStateFile(self) -> str:
        return str(self.getMigrationsConfig().get("state-file", DEFAULT_STATE_FILE))

    def getEnvironment(self) -> Optional[str]:
        environment = self.getMigrationsConfig().get("environment", None)
        return str(environment) if environment is not None else None
