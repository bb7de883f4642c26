"""
Tests for the Configuration Manager.

Covers loading, merging of config directories, environment variable
substitution, defaults and error handling.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from internal.config.manager import DEFAULT_MIGRATIONS_DIR, DEFAULT_STATE_FILE, ConfigManager, substituteEnvVars

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def tempDir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sampleConfigToml():
    """Provide sample valid TOML configuration."""
    return """
[migrations]
dir = "db/migrations"
state-file = "db/.migrate"
environment = "staging"

[logging]
level = "INFO"
"""


@pytest.fixture
def overrideToml():
    """Provide override configuration TOML."""
    return """
[migrations]
environment = "production"

[logging]
level = "DEBUG"
"""


@pytest.fixture
def invalidSyntaxToml():
    """Provide invalid TOML syntax."""
    return """
[migrations
dir = "missing_bracket"
"""


# ============================================================================
# Helper Functions
# ============================================================================


def createConfigFile(directory: Path, filename: str, content: str) -> Path:
    """Create a TOML config file in the specified directory."""
    filePath = directory / filename
    filePath.write_text(content)
    return filePath


def createConfigDir(baseDir: Path, dirName: str, files: dict) -> Path:
    """Create a config directory with multiple TOML files."""
    configDir = baseDir / dirName
    configDir.mkdir(parents=True, exist_ok=True)

    for filename, content in files.items():
        createConfigFile(configDir, filename, content)

    return configDir


# ============================================================================
# Loading Tests
# ============================================================================


class TestConfigurationLoading:
    """Test configuration loading from TOML files."""

    def testLoadSingleConfigFile(self, tempDir, sampleConfigToml):
        """Test loading configuration from single TOML file."""
        configPath = createConfigFile(tempDir, "config.toml", sampleConfigToml)

        manager = ConfigManager(str(configPath), dotEnvFile=str(tempDir / ".env"))

        assert manager.getMigrationsDir() == "db/migrations"
        assert manager.getStateFile() == "db/.migrate"
        assert manager.getEnvironment() == "staging"
        assert manager.getLoggingConfig() == {"level": "INFO"}

    def testMissingConfigUsesDefaults(self, tempDir):
        """Missing config file is not fatal, defaults apply."""
        manager = ConfigManager(str(tempDir / "nonexistent.toml"), dotEnvFile=str(tempDir / ".env"))

        assert manager.config == {}
        assert manager.getMigrationsDir() == DEFAULT_MIGRATIONS_DIR
        assert manager.getStateFile() == DEFAULT_STATE_FILE
        assert manager.getEnvironment() is None
        assert manager.getLoggingConfig() == {}

    def testLoadingKeepsWorkingDirectory(self, tempDir, sampleConfigToml):
        """Relative paths from config resolve against the caller's directory."""
        configPath = createConfigFile(
            tempDir, "config.toml", sampleConfigToml + f'\n[application]\nroot-dir = "{tempDir.as_posix()}"\n'
        )
        cwd = os.getcwd()

        manager = ConfigManager(str(configPath), dotEnvFile=str(tempDir / ".env"))

        assert os.getcwd() == cwd
        assert manager.getStateFile() == "db/.migrate"

    def testInvalidSyntaxExits(self, tempDir, invalidSyntaxToml):
        """Test that unreadable TOML terminates the process."""
        configPath = createConfigFile(tempDir, "config.toml", invalidSyntaxToml)

        with pytest.raises(SystemExit):
            ConfigManager(str(configPath), dotEnvFile=str(tempDir / ".env"))


# ============================================================================
# Configuration Merging Tests
# ============================================================================


class TestConfigurationMerging:
    """Test configuration merging logic."""

    def testConfigDirOverridesMainConfig(self, tempDir, sampleConfigToml, overrideToml):
        """Config dirs merge on top of the main config."""
        configPath = createConfigFile(tempDir, "config.toml", sampleConfigToml)
        configDir = createConfigDir(tempDir, "configs", {"01-override.toml": overrideToml})

        manager = ConfigManager(
            str(configPath), configDirs=[str(configDir)], dotEnvFile=str(tempDir / ".env")
        )

        assert manager.getEnvironment() == "production"
        assert manager.getMigrationsDir() == "db/migrations"
        assert manager.getLoggingConfig()["level"] == "DEBUG"

    def testConfigDirsAreSortedAndRecursive(self, tempDir):
        """Files are merged in sorted order, nested directories included."""
        configDir = createConfigDir(
            tempDir,
            "configs",
            {
                "00-base.toml": '[migrations]\nenvironment = "first"\n',
                "10-next.toml": '[migrations]\nenvironment = "second"\n',
            },
        )
        createConfigDir(configDir, "nested", {"20-last.toml": '[migrations]\ndir = "nested"\n'})

        manager = ConfigManager(
            str(tempDir / "missing.toml"), configDirs=[str(configDir)], dotEnvFile=str(tempDir / ".env")
        )

        assert manager.getEnvironment() == "second"
        assert manager.getMigrationsDir() == "nested"

    def testNonExistentConfigDirIsSkipped(self, tempDir, sampleConfigToml):
        """A missing config directory only logs a warning."""
        configPath = createConfigFile(tempDir, "config.toml", sampleConfigToml)

        manager = ConfigManager(
            str(configPath), configDirs=[str(tempDir / "nope")], dotEnvFile=str(tempDir / ".env")
        )

        assert manager.getEnvironment() == "staging"


# ============================================================================
# Environment Variable Tests
# ============================================================================


class TestEnvironmentSubstitution:
    """Test ${VAR} substitution and .env loading."""

    def testSubstituteEnvVars(self):
        """Placeholders are replaced recursively, unknown ones are kept."""
        with patch.dict(os.environ, {"MIGRATE_ENV": "qa"}, clear=False):
            result = substituteEnvVars({"a": "${MIGRATE_ENV}", "b": ["x-${MIGRATE_ENV}", 1], "c": "${NOPE_NOT_SET}"})

        assert result == {"a": "qa", "b": ["x-qa", 1], "c": "${NOPE_NOT_SET}"}

    def testDotEnvFeedsSubstitution(self, tempDir):
        """Variables from .env are visible to config substitution."""
        dotEnv = tempDir / ".env"
        dotEnv.write_text('# comment\nMIGRATE_TEST_STATE_FILE="state/.migrate"\n')
        configPath = createConfigFile(tempDir, "config.toml", '[migrations]\nstate-file = "${MIGRATE_TEST_STATE_FILE}"\n')

        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("MIGRATE_TEST_STATE_FILE", None)
            manager = ConfigManager(str(configPath), dotEnvFile=str(dotEnv))

            assert manager.getStateFile() == "state/.migrate"
