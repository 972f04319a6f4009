"""Registration of the ``/connect`` sub-commands."""

from __future__ import annotations

import logging

from ..adapters.base import Adapter, PlatformError
from ..core.models import Channel, Member, Team, User, utcnow
from ..core.storage import JSONStorage, StoreUnavailable
from ..notifier import NotificationFailed, ping_members
from ..sync import UserSync
from .router import CommandContext, CommandResult, CommandRouter

log = logging.getLogger("connect.commands")

NOT_IN_CHANNEL = (
    "You need to run the command inside the channel you want to add. "
    "If you are trying to add a private channel please run /invite @connect-management."
)


def find_channel_id(channels: dict[str, Channel], name: str) -> str | None:
    """Return the ID of the first tracked channel called ``name``."""
    return next((cid for cid, ch in channels.items() if ch.name == name), None)


def register_user(storage: JSONStorage, member_id: str, name: str) -> None:
    """Create or refresh the registry entry for a newly added member.

    Known channel memberships are kept. Failures are only logged; the next
    refresh pass fills the gap.
    """
    try:
        users = storage.load_users()
        user = users.get(member_id)
        if user is None:
            users[member_id] = User(member_id=member_id, name=name)
        else:
            user.name = name
            user.updated_at = utcnow()
        storage.save_users(users)
    except StoreUnavailable:
        log.exception("Error registering user %s", member_id)


def register_commands(
    router: CommandRouter, storage: JSONStorage, adapter: Adapter, sync: UserSync
) -> None:
    """Register every sub-command handler on ``router``."""

    @router.command("create-team")
    async def create_team(args: list[str], ctx: CommandContext) -> CommandResult:
        if len(args) < 1:
            return CommandResult.error("Please provide a team name to create.")
        team = args[0]
        roster = storage.load_teams()
        if team in roster.teams:
            return CommandResult.error(f"Team '{team}' already exists.")
        roster.teams[team] = Team()
        storage.save_teams(roster)
        return CommandResult.success(f"Team '{team}' has been created.")

    @router.command("remove-team")
    async def remove_team(args: list[str], ctx: CommandContext) -> CommandResult:
        if len(args) < 1:
            return CommandResult.error("Please provide a team name to remove.")
        team = args[0]
        roster = storage.load_teams()
        if team not in roster.teams:
            return CommandResult.error(f"Team '{team}' does not exist.")
        del roster.teams[team]
        storage.save_teams(roster)
        return CommandResult.success(f"Team '{team}' has been removed.")

    @router.command("add")
    async def add_member(args: list[str], ctx: CommandContext) -> CommandResult:
        if len(args) < 2:
            return CommandResult.error(
                "Please provide a team name and a member ID to add."
            )
        team, member_id = args[0], args[1]
        roster = storage.load_teams()
        group = roster.teams.get(team)
        if group is None:
            return CommandResult.error(f"Team '{team}' does not exist.")
        if group.find(member_id) is not None:
            return CommandResult.error(f"User {member_id} is already in team '{team}'.")

        try:
            profile = await adapter.get_user_profile(member_id)
        except PlatformError as exc:
            log.error("Error getting user info for %s: %s", member_id, exc)
            return CommandResult.error(f"Error getting user info: {exc}")

        name = profile.resolved_name
        log.info("Adding user %s with display name %s to team %s", member_id, name, team)
        group.members.append(Member(member_id=member_id, name=name))
        storage.save_teams(roster)
        register_user(storage, member_id, name)
        return CommandResult.success(f"Added user {name} ({member_id}) to team '{team}'.")

    @router.command("remove")
    async def remove_member(args: list[str], ctx: CommandContext) -> CommandResult:
        if len(args) < 2:
            return CommandResult.error(
                "Please provide a team name and a member ID to remove."
            )
        team, member_id = args[0], args[1]
        roster = storage.load_teams()
        group = roster.teams.get(team)
        if group is None:
            return CommandResult.error(f"Team '{team}' does not exist.")
        member = group.find(member_id)
        if member is None:
            return CommandResult.error(f"User {member_id} is not in team '{team}'.")
        group.members.remove(member)
        storage.save_teams(roster)
        return CommandResult.success(f"Removed user {member_id} from team '{team}'.")

    @router.command("print")
    async def print_cmd(args: list[str], ctx: CommandContext) -> CommandResult:
        if len(args) < 1:
            return CommandResult.error(
                "Please specify what to print: teams, channels, or members <team>."
            )
        option = args[0]
        if option == "teams":
            names = list(storage.load_teams().teams)
            if not names:
                return CommandResult.success("No teams found.")
            return CommandResult.success(f"Teams: {', '.join(names)}")
        if option == "channels":
            names = [ch.name for ch in storage.load_channels().values()]
            if not names:
                return CommandResult.success("No channels found.")
            return CommandResult.success(f"Channels: {', '.join(names)}")
        if option == "members":
            if len(args) < 2:
                return CommandResult.error("Please provide a team name to print members.")
            return print_members(args[1])
        return CommandResult.error(
            "Invalid print option. Use 'teams', 'channels', or 'members <team>'."
        )

    def print_members(team: str) -> CommandResult:
        group = storage.load_teams().teams.get(team)
        if group is None:
            return CommandResult.error(f"Team '{team}' does not exist.")
        members = [
            f"{m.name} ({m.member_id})" if m.name else m.member_id
            for m in group.members
        ]
        if not members:
            return CommandResult.success(f"No members found in team '{team}'.")
        return CommandResult.success(f"Members of team '{team}': {', '.join(members)}")

    @router.command("invite")
    async def invite(args: list[str], ctx: CommandContext) -> CommandResult:
        if len(args) < 1:
            return CommandResult.error("Please provide a team name for invitation.")
        team = args[0]
        group = storage.load_teams().teams.get(team)
        if group is None:
            return CommandResult.error(f"Team '{team}' does not exist.")
        ids = ", ".join(m.member_id for m in group.members)
        return CommandResult.success(
            f"To invite team '{team}', use these member IDs: {ids}"
        )

    @router.command("ping")
    async def ping(args: list[str], ctx: CommandContext) -> CommandResult:
        if len(args) < 2:
            return CommandResult.error(
                "Please provide a team name and a channel name to ping."
            )
        team, channel_name = args[0], args[1]
        group = storage.load_teams().teams.get(team)
        if group is None:
            return CommandResult.error(f"Team '{team}' does not exist.")

        channel_id = find_channel_id(storage.load_channels(), channel_name)
        if channel_id is None:
            return CommandResult.error(f"Channel '{channel_name}' not found.")

        member_ids = [m.member_id for m in group.members if m.member_id]
        if not member_ids:
            return CommandResult.error(f"No members of team '{team}' found.")

        try:
            await ping_members(adapter, channel_id, member_ids)
        except NotificationFailed as exc:
            log.error("Error pinging team %s: %s", team, exc)
            return CommandResult.error(f"Error pinging team: {exc}")
        return CommandResult.success(
            f"Successfully pinged team '{team}' in #{channel_name}."
        )

    @router.command("add-channel")
    async def add_channel(args: list[str], ctx: CommandContext) -> CommandResult:
        channel_id, channel_name = ctx.channel_id, ctx.channel_name
        log.info("Attempting to add channel %s (%s)", channel_name, channel_id)
        if not channel_id or not channel_name:
            return CommandResult.error(NOT_IN_CHANNEL)

        channels = storage.load_channels()
        if channel_id in channels:
            return CommandResult.error(f"Channel #{channel_name} is already being tracked.")

        try:
            await adapter.join_channel(channel_id)
        except PlatformError as exc:
            log.error("Error joining channel %s: %s", channel_id, exc)
            return CommandResult.error(NOT_IN_CHANNEL)

        channels[channel_id] = Channel(id=channel_id, name=channel_name)
        storage.save_channels(channels)
        sync.spawn_channel_sync(channel_id)
        return CommandResult.success(
            f"Channel #{channel_name} has been added to the tracking list."
        )

    @router.command("remove-channel")
    async def remove_channel(args: list[str], ctx: CommandContext) -> CommandResult:
        if len(args) < 1:
            return CommandResult.error("Please provide a channel name to remove.")
        channel_name = args[0]
        channels = storage.load_channels()
        channel_id = find_channel_id(channels, channel_name)
        if channel_id is None:
            return CommandResult.error(f"Channel #{channel_name} is not being tracked.")
        del channels[channel_id]
        storage.save_channels(channels)
        return CommandResult.success(
            f"Channel #{channel_name} has been removed from the tracking list."
        )
