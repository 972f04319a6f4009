"""JSON-file persistence for the teams, users and channels collections."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .models import Channel, TeamRoster, User

TEAMS = "teams"
USERS = "users"
CHANNELS = "channels"

log = logging.getLogger("connect.storage")

_USERS_ADAPTER = TypeAdapter(dict[str, User])
_CHANNELS_ADAPTER = TypeAdapter(dict[str, Channel])


class StoreUnavailable(Exception):
    """A collection file could not be read or written."""

    def __init__(self, collection: str, operation: str, reason: str = "") -> None:
        self.collection = collection
        self.operation = operation
        self.reason = reason
        super().__init__(f"cannot {operation} {collection}: {reason}")

    @property
    def user_message(self) -> str:
        if self.operation == "read":
            return f"Error reading {self.collection}."
        return f"Error writing to {self.collection}."


class JSONStorage:
    """Whole-file load and save of the three collections.

    Every :meth:`load` reads the file from disk and every :meth:`save`
    replaces it, so callers work on private copies and must write them back.
    There is no locking: two load-modify-save cycles racing on the same
    collection keep whichever one saved last.
    """

    def __init__(self, data_dir: Path | str = ".") -> None:
        """Initialise storage rooted at ``data_dir``."""
        self.data_dir = Path(data_dir)

    # ------------------------------------------------------------------
    # Internal helpers
    def path_for(self, collection: str) -> Path:
        if collection not in (TEAMS, USERS, CHANNELS):
            raise ValueError(f"unknown collection {collection!r}")
        return self.data_dir / f"{collection}.json"

    @staticmethod
    def _empty(collection: str) -> Any:
        if collection == TEAMS:
            return TeamRoster()
        return {}

    @staticmethod
    def _decode(collection: str, data: Any) -> Any:
        if collection == TEAMS:
            return TeamRoster.model_validate(data)
        if collection == USERS:
            return _USERS_ADAPTER.validate_python(data)
        return _CHANNELS_ADAPTER.validate_python(data)

    @staticmethod
    def _encode(collection: str, value: Any) -> Any:
        if collection == TEAMS:
            return value.model_dump(mode="json")
        return {
            key: item.model_dump(mode="json", by_alias=True)
            for key, item in value.items()
        }

    # ------------------------------------------------------------------
    # Public API
    def load(self, collection: str) -> Any:
        """Return the current contents of ``collection``.

        A missing file yields an empty value. A file that exists but cannot
        be parsed raises :class:`StoreUnavailable`.
        """
        path = self.path_for(collection)
        if not path.exists():
            log.debug("%s does not exist, using empty %s", path, collection)
            return self._empty(collection)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return self._decode(collection, data)
        except (OSError, ValueError, ValidationError) as exc:
            raise StoreUnavailable(collection, "read", str(exc)) from exc

    def save(self, collection: str, value: Any) -> None:
        """Replace ``collection`` on disk with ``value``."""
        path = self.path_for(collection)
        tmp = path.with_name(path.name + ".tmp")
        try:
            payload = json.dumps(self._encode(collection, value), indent=2)
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            raise StoreUnavailable(collection, "write", str(exc)) from exc

    def ensure_files(self) -> None:
        """Create any missing collection file with its empty value."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for collection in (TEAMS, USERS, CHANNELS):
            if not self.path_for(collection).exists():
                log.info("Creating %s", self.path_for(collection))
                self.save(collection, self._empty(collection))

    # ------------------------------------------------------------------
    # Typed shortcuts
    def load_teams(self) -> TeamRoster:
        return self.load(TEAMS)

    def save_teams(self, roster: TeamRoster) -> None:
        self.save(TEAMS, roster)

    def load_users(self) -> dict[str, User]:
        return self.load(USERS)

    def save_users(self, users: dict[str, User]) -> None:
        self.save(USERS, users)

    def load_channels(self) -> dict[str, Channel]:
        return self.load(CHANNELS)

    def save_channels(self, channels: dict[str, Channel]) -> None:
        self.save(CHANNELS, channels)
