"""Parse ``/connect`` command text and dispatch it to a registered handler."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..adapters.base import PlatformError
from ..core.storage import StoreUnavailable

log = logging.getLogger("connect.commands")

HELP_TEXT = """Available commands:
- {cmd} create-team <team>
- {cmd} remove-team <team>
- {cmd} add <team> <member_id>
- {cmd} remove <team> <member_id>
- {cmd} print teams
- {cmd} print channels
- {cmd} print members <team>
- {cmd} invite <team>
- {cmd} ping <team> <channel>
- {cmd} add-channel
- {cmd} remove-channel <channel>
- {cmd} help or {cmd} -h (shows this help message)"""

HELP_ACTIONS = {"help", "-h"}


@dataclass(frozen=True)
class CommandContext:
    """Where a command was issued, as reported by Slack."""

    channel_id: str = ""
    channel_name: str = ""
    user_id: str = ""


@dataclass(frozen=True)
class CommandResult:
    text: str
    ok: bool = True

    @classmethod
    def success(cls, text: str) -> CommandResult:
        return cls(text, True)

    @classmethod
    def error(cls, text: str) -> CommandResult:
        return cls(text, False)


Handler = Callable[[list[str], CommandContext], Awaitable[CommandResult]]


class CommandRouter:
    """Maps the first word of a command to its handler."""

    def __init__(self, trigger: str = "/connect") -> None:
        self.trigger = trigger
        self.handlers: dict[str, Handler] = {}

    def command(self, name: str) -> Callable[[Handler], Handler]:
        """Decorator registering ``func`` as the handler for ``name``."""

        def deco(func: Handler) -> Handler:
            self.handlers[name] = func
            return func

        return deco

    def help(self) -> CommandResult:
        return CommandResult.success(HELP_TEXT.format(cmd=self.trigger))

    async def dispatch(self, text: str, ctx: CommandContext | None = None) -> CommandResult:
        """Run the command in ``text`` and return the reply for the user.

        Business errors come back as unsuccessful results. Storage and
        platform failures that escape a handler are logged and wrapped, so
        this coroutine never raises for them.
        """
        ctx = ctx or CommandContext()
        args = text.split()
        if not args or args[0] in HELP_ACTIONS:
            return self.help()

        action, rest = args[0], args[1:]
        handler = self.handlers.get(action)
        if handler is None:
            log.info("Invalid action received: %s", action)
            return self.help()

        log.info("Processing action: %s %s", action, rest)
        try:
            result = await handler(rest, ctx)
        except StoreUnavailable as exc:
            log.exception("Storage failure while handling %r", text)
            result = CommandResult.error(exc.user_message)
        except PlatformError as exc:
            log.exception("Slack failure while handling %r", text)
            result = CommandResult.error(f"Error: {exc}")

        if result.ok:
            log.info("Sending success response: %s", result.text)
        else:
            log.info("Sending error response: %s", result.text)
        return result
