"""CLI command modules for buildchecker."""

from buildchecker.command.check import CheckCommand
from buildchecker.command.history import HistoryCommand

__all__ = ["CheckCommand", "HistoryCommand"]
