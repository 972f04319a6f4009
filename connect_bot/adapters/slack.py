"""Slack adapter implementing the :class:`~connect_bot.adapters.base.Adapter`.

The adapter talks to the Slack Web API directly with :mod:`httpx`, which
keeps it fully asynchronous and easy to exercise with
:class:`httpx.MockTransport` in the tests.
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Any

import httpx

from ..core.models import UserProfile
from .base import Adapter, PlatformError

# Slack rejects replays older than five minutes; mirror that window.
SIGNATURE_MAX_AGE = 60 * 5


class SlackApiError(PlatformError):
    """Slack answered ``ok: false`` or the request never completed."""

    def __init__(self, method: str, error: str) -> None:
        self.method = method
        self.error = error
        super().__init__(error)


def verify_signature(
    signing_secret: str,
    body: bytes,
    timestamp: str,
    signature: str,
    now: float | None = None,
) -> bool:
    """Check a request against Slack's ``v0`` HMAC signing scheme."""
    if not timestamp or not signature:
        return False
    try:
        age = abs((now if now is not None else time.time()) - int(timestamp))
    except ValueError:
        return False
    if age > SIGNATURE_MAX_AGE:
        return False
    basestring = b"v0:" + timestamp.encode() + b":" + body
    expected = "v0=" + hmac.new(
        signing_secret.encode(), basestring, hashlib.sha256
    ).hexdigest()
    return hmac.compare_digest(expected, signature)


class SlackAdapter(Adapter):
    """Adapter that sends requests directly to the Slack Web API."""

    api_base = "https://slack.com/api"

    def __init__(
        self,
        token: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Store the bot ``token`` and optional HTTP ``client``."""
        self.token = token
        self.client = client or httpx.AsyncClient(timeout=timeout)

    # ------------------------------------------------------------------
    async def _call(
        self,
        method: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self.api_base}/{method}"
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            if payload is None:
                response = await self.client.get(url, params=params, headers=headers)
            else:
                response = await self.client.post(url, json=payload, headers=headers)
            response.raise_for_status()
            data: dict[str, Any] = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise SlackApiError(method, str(exc) or type(exc).__name__) from exc
        if not data.get("ok"):
            raise SlackApiError(method, data.get("error", "unknown_error"))
        return data

    async def authenticate(self) -> str:
        """Run ``auth.test`` and return the bot user ID."""
        data = await self._call("auth.test", payload={})
        return str(data["user_id"])

    async def get_user_profile(self, member_id: str) -> UserProfile:
        """Fetch ``users.info`` for ``member_id``."""
        data = await self._call("users.info", params={"user": member_id})
        user = data.get("user", {})
        return UserProfile(
            member_id=member_id,
            name=user.get("name", ""),
            display_name=user.get("profile", {}).get("display_name", ""),
            is_bot=bool(user.get("is_bot", False)),
        )

    async def get_channel_members(self, channel_id: str) -> list[str]:
        """Return every member of ``channel_id``, following pagination."""
        members: list[str] = []
        cursor = ""
        while True:
            params = {"channel": channel_id}
            if cursor:
                params["cursor"] = cursor
            data = await self._call("conversations.members", params=params)
            members.extend(data.get("members", []))
            cursor = data.get("response_metadata", {}).get("next_cursor", "")
            if not cursor:
                return members

    async def post_message(self, channel_id: str, text: str) -> None:
        """Post ``text`` to ``channel_id`` with ``chat.postMessage``."""
        await self._call("chat.postMessage", payload={"channel": channel_id, "text": text})

    async def join_channel(self, channel_id: str) -> None:
        """Join a public channel with ``conversations.join``."""
        await self._call("conversations.join", payload={"channel": channel_id})

    async def close(self) -> None:
        """Close the underlying :class:`httpx.AsyncClient`."""
        await self.client.aclose()
