"""Background refresh of user names and channel membership.

Each pass over a channel asks Slack who is in it, refreshes the user
registry and copies the fresh display names onto every team member with the
same ID. Failures never reach a caller: they are logged and the next
scheduled pass simply tries again.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from collections.abc import Callable

from .adapters.base import Adapter, PlatformError
from .core.models import TeamRoster, User, UserProfile, utcnow
from .core.storage import JSONStorage, StoreUnavailable

log = logging.getLogger("connect.sync")


def apply_profile(
    users: dict[str, User],
    roster: TeamRoster,
    profile: UserProfile,
    channel_id: str,
    now: datetime.datetime,
) -> None:
    """Merge ``profile`` seen in ``channel_id`` into both collections in place."""
    member_id = profile.member_id
    name = profile.resolved_name

    user = users.get(member_id)
    if user is None:
        user = User(member_id=member_id, name=name)
        users[member_id] = user
    else:
        user.name = name
    user.updated_at = now
    user.channels[channel_id] = member_id

    for team_name, team in roster.teams.items():
        for member in team.members:
            if member.member_id != member_id:
                continue
            member.name = name
            member.channels[channel_id] = member_id
            log.debug("Updated member %s in team %s", member_id, team_name)


class UserSync:
    """Refreshes the user registry and team members from Slack."""

    def __init__(
        self,
        storage: JSONStorage,
        adapter: Adapter,
        now: Callable[[], datetime.datetime] = utcnow,
    ) -> None:
        self.storage = storage
        self.adapter = adapter
        self.now = now
        self._detached: set[asyncio.Task] = set()

    async def sync_channel(self, channel_id: str) -> bool:
        """Run one refresh pass over ``channel_id``.

        Returns ``False`` when the pass was abandoned before anything was
        written.
        """
        log.info("Updating users for channel %s", channel_id)
        try:
            users = self.storage.load_users()
            roster = self.storage.load_teams()
        except StoreUnavailable:
            log.exception("Cannot load state for channel %s", channel_id)
            return False

        try:
            member_ids = await self.adapter.get_channel_members(channel_id)
        except PlatformError as exc:
            log.error("Error getting users in channel %s: %s", channel_id, exc)
            return False
        log.info("Found %d members in channel %s", len(member_ids), channel_id)

        for member_id in member_ids:
            try:
                profile = await self.adapter.get_user_profile(member_id)
            except PlatformError as exc:
                log.warning("Error getting user info for %s: %s", member_id, exc)
                continue
            if profile.is_bot:
                log.debug("Skipping bot user %s", member_id)
                continue
            apply_profile(users, roster, profile, channel_id, self.now())

        # Each collection is written independently; a failed write is
        # repaired by the next pass.
        try:
            self.storage.save_users(users)
        except StoreUnavailable:
            log.exception("Error writing users for channel %s", channel_id)
        try:
            self.storage.save_teams(roster)
        except StoreUnavailable:
            log.exception("Error writing teams for channel %s", channel_id)

        log.info("Finished updating users for channel %s", channel_id)
        return True

    async def sync_all(self) -> None:
        """Refresh every tracked channel once."""
        try:
            channels = self.storage.load_channels()
        except StoreUnavailable:
            log.exception("Error reading channels")
            return
        for channel_id in channels:
            try:
                await self.sync_channel(channel_id)
            except Exception:
                log.exception("Refresh of channel %s failed", channel_id)
        log.info("User info update completed")

    async def run_forever(self, interval: float = 10.0) -> None:
        """Repeat :meth:`sync_all` every ``interval`` seconds until cancelled."""
        log.info("Starting user info update loop (every %ss)", interval)
        while True:
            try:
                await self.sync_all()
            except Exception:
                log.exception("User info update failed")
            await asyncio.sleep(interval)

    def spawn_channel_sync(self, channel_id: str) -> asyncio.Task:
        """Start a detached refresh of ``channel_id`` and return its task.

        Nobody awaits the task; its outcome only shows up in the logs.
        """
        task = asyncio.create_task(self.sync_channel(channel_id))
        self._detached.add(task)
        task.add_done_callback(self._detached.discard)
        return task
