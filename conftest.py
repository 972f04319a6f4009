"""Shared test configuration and fixtures."""

from __future__ import annotations

import os
import sys

import pytest

# Add the repository root (the directory containing this file) to ``sys.path``
# if it is not already present.  This mirrors the behaviour of running the
# tests via ``python -m pytest`` where the working directory is automatically on
# the import path.
ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from connect_bot.adapters.base import Adapter  # noqa: E402
from connect_bot.adapters.slack import SlackApiError  # noqa: E402
from connect_bot.core.models import UserProfile  # noqa: E402
from connect_bot.core.storage import JSONStorage  # noqa: E402


class FakeSlack(Adapter):
    """In-memory stand-in for the Slack Web API.

    ``profiles`` and ``channel_members`` hold the canned data; anything listed
    in ``failing`` raises :class:`SlackApiError`. Every call is recorded.
    """

    def __init__(self) -> None:
        self.profiles: dict[str, UserProfile] = {}
        self.channel_members: dict[str, list[str]] = {}
        self.failing: set[str] = set()
        self.posted: list[tuple[str, str]] = []
        self.joined: list[str] = []
        self.calls: list[tuple[str, str]] = []
        self.closed = False
        # awaited with the channel ID before the member list is returned
        self.on_members = None

    def add_profile(self, member_id, display_name="", name="", is_bot=False):
        self.profiles[member_id] = UserProfile(
            member_id=member_id, name=name, display_name=display_name, is_bot=is_bot
        )

    def _check(self, method: str, key: str) -> None:
        self.calls.append((method, key))
        if method in self.failing or key in self.failing:
            raise SlackApiError(method, f"{method} failed for {key}")

    async def authenticate(self) -> str:
        self._check("auth.test", "")
        return "UBOT"

    async def get_user_profile(self, member_id: str) -> UserProfile:
        self._check("users.info", member_id)
        if member_id not in self.profiles:
            raise SlackApiError("users.info", "user_not_found")
        return self.profiles[member_id]

    async def get_channel_members(self, channel_id: str) -> list[str]:
        self._check("conversations.members", channel_id)
        if self.on_members is not None:
            await self.on_members(channel_id)
        return list(self.channel_members.get(channel_id, []))

    async def post_message(self, channel_id: str, text: str) -> None:
        self._check("chat.postMessage", channel_id)
        self.posted.append((channel_id, text))

    async def join_channel(self, channel_id: str) -> None:
        self._check("conversations.join", channel_id)
        self.joined.append(channel_id)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def storage(tmp_path) -> JSONStorage:
    return JSONStorage(tmp_path)


@pytest.fixture
def slack() -> FakeSlack:
    return FakeSlack()
