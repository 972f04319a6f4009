"""Data models for the team, user and channel collections.

The models are implemented using :mod:`pydantic` so that they provide
runtime validation and convenient serialisation to and from the JSON files
kept by :class:`~connect_bot.core.storage.JSONStorage`.
"""

from __future__ import annotations

import datetime
from datetime import UTC

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(tz=UTC)


def _none_to_empty(value):
    # older data files store unset channel maps as null
    return {} if value is None else value


class Member(BaseModel):
    """A Slack user inside a team.

    Attributes
    ----------
    member_id:
        Slack user ID. Never changes once the member is added.
    name:
        Display name copied from the user registry by the refresh loop.
    channels:
        Tracked channels the member was seen in, ``channel_id -> member_id``.

    """

    member_id: str
    name: str = ""
    channels: dict[str, str] = Field(default_factory=dict)

    normalize_channels = field_validator("channels", mode="before")(_none_to_empty)


class Team(BaseModel):
    """Ordered list of members under a unique team name."""

    members: list[Member] = Field(default_factory=list)

    def find(self, member_id: str) -> Member | None:
        return next((m for m in self.members if m.member_id == member_id), None)


class TeamRoster(BaseModel):
    """Root document of ``teams.json``."""

    teams: dict[str, Team] = Field(default_factory=dict)


class User(BaseModel):
    """Registry entry for every user observed in a tracked channel."""

    model_config = ConfigDict(populate_by_name=True)

    member_id: str
    name: str = ""
    updated_at: datetime.datetime = Field(default_factory=utcnow, alias="updatedAt")
    channels: dict[str, str] = Field(default_factory=dict)

    normalize_channels = field_validator("channels", mode="before")(_none_to_empty)


class Channel(BaseModel):
    """A conversation the bot joined and monitors."""

    id: str
    name: str


class UserProfile(BaseModel):
    """Subset of a Slack ``users.info`` response."""

    member_id: str
    name: str = ""
    display_name: str = ""
    is_bot: bool = False

    @property
    def resolved_name(self) -> str:
        """Display name, falling back to the account name when unset."""
        return self.display_name or self.name
