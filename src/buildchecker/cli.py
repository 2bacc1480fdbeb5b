#!/usr/bin/env python3
"""buildchecker CLI - lock a branch when its builds keep failing."""

import asyncio
import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from buildchecker.command.check import CheckCommand
from buildchecker.command.history import HistoryCommand
from buildchecker.core.config import State
from buildchecker.core.log import logger


class CliState(State):
    """Watch the builds of a protected branch and lock it after a run
    of consecutive failures.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.check.failures_threshold 5)
    2. --include files, ./buildchecker.yaml, user config, defaults
    3. .env file for secrets
    4. Environment variables
       (BUILDCHECKER_CONFIG__GITHUB__TOKEN=...)
    """

    check: CliSubCommand[CheckCommand]
    history: CliSubCommand[HistoryCommand]

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        # Closing the logger flushes file sinks before exit
        with logger:
            exit_code = asyncio.run(subcommand.run_workflow(self))
            raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
