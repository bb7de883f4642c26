"""
Migrate - run reversible named migrations and record which ones are applied.

Usage:
    python main.py up [name]        apply pending migrations (through name)
    python main.py down [name]      revert applied migrations (back through name)
    python main.py pending [name]   list migrations `up` would run
    python main.py create <title>   create a new migration file
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from internal.config.manager import ConfigManager
from internal.migrations import createMigration, discoverMigrations
from lib.logging_utils import initLogging
from lib.migrate import (
    Direction,
    JsonFileStore,
    MigrationError,
    MigrationEvent,
    MigrationInterface,
    MigrationSet,
    UnknownTargetError,
)
from lib.utils import jsonDumps

logger = logging.getLogger(__name__)


def printLine(key: str, message: str) -> None:
    print(f"  \033[90m{key} :\033[0m \033[36m{message}\033[0m" if sys.stdout.isatty() else f"  {key} : {message}")


class MigrateRunner:
    """Wires configuration, migration discovery and the migration set together."""

    def __init__(
        self,
        configManager: ConfigManager,
        migrationsDir: Optional[str] = None,
        stateFile: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        self.configManager = configManager
        self.migrationsDir = migrationsDir or configManager.getMigrationsDir()
        self.stateFile = stateFile or configManager.getStateFile()
        self.environment = environment if environment is not None else configManager.getEnvironment()

    def createSet(self) -> MigrationSet:
        """Build a migration set from the migrations directory."""
        migrationSet = MigrationSet(JsonFileStore(self.stateFile))
        migrationSet.registerMigrations(discoverMigrations(self.migrationsDir, self.environment))

        migrationSet.events.subscribe(
            MigrationEvent.MIGRATION, lambda migration, direction: printLine(str(direction), migration.title)
        )
        migrationSet.events.subscribe(MigrationEvent.COMPLETE, lambda: printLine("migration", "complete"))
        return migrationSet

    async def migrate(self, direction: Direction, targetName: Optional[str] = None) -> None:
        migrationSet = self.createSet()
        await migrationSet.migrate(direction, targetName)

    async def pending(self, direction: Direction, targetName: Optional[str] = None) -> List[MigrationInterface]:
        migrationSet = self.createSet()
        return await migrationSet.migrationsRequired(direction, targetName) or []

    def create(self, title: str) -> str:
        path = createMigration(self.migrationsDir, title)
        printLine("create", str(path))
        return str(path)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Run reversible named migrations, dood!")
    parser.add_argument(
        "-c",
        "--config",
        default="config.toml",
        help="Path to configuration file (default: config.toml)",
    )
    parser.add_argument(
        "--config-dir",
        action="append",
        help="Directory to search for .toml config files recursively (can be specified multiple times)",
    )
    parser.add_argument("--migrations-dir", help="Directory with migration files (overrides config)")
    parser.add_argument("--state-file", help="Path of the migration state file (overrides config)")
    parser.add_argument("--env", dest="environment", help="Environment passed to migrations (overrides config)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Pretty-print loaded configuration and exit",
    )

    subparsers = parser.add_subparsers(dest="command")
    upParser = subparsers.add_parser("up", help="Apply pending migrations")
    upParser.add_argument("name", nargs="?", help="Last migration to apply")
    downParser = subparsers.add_parser("down", help="Revert applied migrations")
    downParser.add_argument("name", nargs="?", help="Last migration to revert")
    pendingParser = subparsers.add_parser("pending", help="List migrations a run would execute")
    pendingParser.add_argument("name", nargs="?", help="Target migration")
    pendingParser.add_argument("--down", action="store_true", help="List what `down` would revert")
    createParser = subparsers.add_parser("create", help="Create a new migration file")
    createParser.add_argument("title", nargs="+", help="Migration title")

    args = parser.parse_args(argv)
    if args.command is None and not args.print_config:
        parser.error("a command is required: up, down, pending or create")

    args.config = os.path.abspath(args.config)
    if args.config_dir:
        args.config_dir = [os.path.abspath(dir_path) for dir_path in args.config_dir]
    return args


def prettyPrintConfig(configManager: ConfigManager) -> None:
    """Pretty-print the loaded configuration."""
    print(jsonDumps(configManager.config, indent=2))


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    configManager = ConfigManager(args.config, args.config_dir)
    initLogging(configManager.getLoggingConfig(), verbose=args.verbose)

    if args.print_config:
        prettyPrintConfig(configManager)
        return

    runner = MigrateRunner(
        configManager,
        migrationsDir=args.migrations_dir,
        stateFile=args.state_file,
        environment=args.environment,
    )

    try:
        match args.command:
            case "up" | "down":
                asyncio.run(runner.migrate(Direction(args.command), args.name))
            case "pending":
                direction = Direction.DOWN if args.down else Direction.UP
                for migration in asyncio.run(runner.pending(direction, args.name)):
                    printLine(str(direction), migration.title)
            case "create":
                runner.create(" ".join(args.title))
    except UnknownTargetError as e:
        logger.error(str(e))
        sys.exit(1)
    except MigrationError as e:
        logger.error(f"Migration failed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Migration interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
