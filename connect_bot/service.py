"""Service object tying storage, Slack client, refresh loop and commands together.

One :class:`ConnectService` is built at startup and handed to the web
application; nothing lives in module globals.
"""

from __future__ import annotations

import asyncio

from .adapters.base import Adapter
from .adapters.slack import SlackAdapter
from .commands.register import register_commands
from .commands.router import CommandContext, CommandResult, CommandRouter
from .config import Settings
from .core.storage import JSONStorage
from .logging_config import setup_logging
from .sync import UserSync


class ConnectService:
    """Owns the collaborators used by request handlers and the refresh loop."""

    background_task: asyncio.Task | None

    def __init__(
        self,
        settings: Settings,
        storage: JSONStorage | None = None,
        adapter: Adapter | None = None,
    ) -> None:
        self.settings = settings
        self.log = setup_logging(settings.log_level)
        self.storage = storage or JSONStorage(settings.data_dir)
        self.adapter = adapter or SlackAdapter(
            settings.token, timeout=settings.http_timeout
        )
        self.sync = UserSync(self.storage, self.adapter)
        self.router = CommandRouter(trigger=settings.command)
        register_commands(self.router, self.storage, self.adapter, self.sync)
        self.background_task = None
        self.bot_user_id = ""

    async def start(self, run_loop: bool = True) -> None:
        """Authenticate, create missing data files and start the refresh loop.

        Authentication failures propagate so that startup aborts.
        """
        self.bot_user_id = await self.adapter.authenticate()
        self.log.info("Bot User ID: %s", self.bot_user_id)
        self.storage.ensure_files()
        if run_loop:
            self.background_task = asyncio.create_task(
                self.sync.run_forever(self.settings.refresh_interval)
            )

    async def stop(self) -> None:
        """Cancel the refresh loop and release the HTTP client."""
        if self.background_task:
            self.background_task.cancel()
            try:
                await self.background_task
            except asyncio.CancelledError:
                pass
            self.background_task = None
        await self.adapter.close()
        self.log.info("Shutdown complete.")

    async def handle_command(
        self, text: str, ctx: CommandContext | None = None
    ) -> CommandResult:
        return await self.router.dispatch(text, ctx)
