import asyncio

import pytest

from connect_bot.notifier import NotificationFailed, ping_members


def test_ping_sends_one_message_with_all_mentions(slack):
    asyncio.run(ping_members(slack, "C1", ["U1", "U2", "U3"]))
    assert slack.posted == [("C1", "<@U1> <@U2> <@U3>")]


def test_ping_failure_carries_cause(slack):
    slack.failing.add("chat.postMessage")
    with pytest.raises(NotificationFailed) as info:
        asyncio.run(ping_members(slack, "C1", ["U1"]))
    assert "chat.postMessage failed" in str(info.value)
    assert info.value.cause.method == "chat.postMessage"
    assert slack.posted == []


def test_ping_requires_members(slack):
    with pytest.raises(ValueError):
        asyncio.run(ping_members(slack, "C1", []))
    assert slack.calls == []
