"""Slack team and channel manager behind the ``/connect`` slash command.

The package keeps teams of Slack users, the channels the bot monitors and a
registry of user display names in three JSON files, and refreshes the
registry from Slack in the background.
"""

from .core.models import Channel, Member, Team, TeamRoster, User
from .core.storage import JSONStorage, StoreUnavailable

__all__ = [
    "Channel",
    "JSONStorage",
    "Member",
    "StoreUnavailable",
    "Team",
    "TeamRoster",
    "User",
]
