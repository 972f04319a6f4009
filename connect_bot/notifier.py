"""Mention every member of a team in one channel message."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .adapters.base import Adapter, PlatformError

log = logging.getLogger("connect.notifier")


class NotificationFailed(Exception):
    """Sending the mention message failed."""

    def __init__(self, cause: PlatformError) -> None:
        self.cause = cause
        super().__init__(str(cause))


def mention(member_id: str) -> str:
    return f"<@{member_id}>"


async def ping_members(
    adapter: Adapter, channel_id: str, member_ids: Sequence[str]
) -> None:
    """Send a single message mentioning ``member_ids`` in ``channel_id``.

    No retries are attempted; a failed send raises :class:`NotificationFailed`.
    """
    if not member_ids:
        raise ValueError("member_ids must not be empty")
    text = " ".join(mention(m) for m in member_ids)
    log.info("Posting %d mentions to %s", len(member_ids), channel_id)
    try:
        await adapter.post_message(channel_id, text)
    except PlatformError as exc:
        raise NotificationFailed(exc) from exc
