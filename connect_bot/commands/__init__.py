"""Slash command parsing and the ``/connect`` sub-command handlers."""

from .register import register_commands
from .router import CommandContext, CommandResult, CommandRouter

__all__ = ["CommandContext", "CommandResult", "CommandRouter", "register_commands"]
