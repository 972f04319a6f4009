"""Base adapter interface for the messaging platform."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..core.models import UserProfile


class PlatformError(Exception):
    """A call to the messaging platform failed."""


class Adapter(ABC):
    """Abstract adapter for the operations the bot needs from the platform."""

    @abstractmethod
    async def authenticate(self) -> str:
        """Verify credentials and return the bot's own user ID."""

    @abstractmethod
    async def get_user_profile(self, member_id: str) -> UserProfile:
        """Fetch the profile of ``member_id``."""

    @abstractmethod
    async def get_channel_members(self, channel_id: str) -> list[str]:
        """Return the user IDs currently in ``channel_id``."""

    @abstractmethod
    async def post_message(self, channel_id: str, text: str) -> None:
        """Send ``text`` to the specified ``channel_id``."""

    @abstractmethod
    async def join_channel(self, channel_id: str) -> None:
        """Join ``channel_id`` so it can be monitored."""

    async def close(self) -> None:
        """Release any resources held by the adapter."""
