"""Tests for models.py — reply context invariant, message events."""
from datetime import datetime, timezone

import pytest

from codearts_chat.models import Failure, Message, ReplyContext, Sender, Success, ToolIntent


class TestReplyContext:
    def test_direct(self):
        ctx = ReplyContext("hello")
        assert ctx.used_tool is False

    def test_with_tool(self):
        ctx = ReplyContext("list", invoked_tool="get_environments", tool_result=Success([]))
        assert ctx.used_tool is True

    def test_tool_without_result_rejected(self):
        with pytest.raises(ValueError):
            ReplyContext("list", invoked_tool="get_environments")

    def test_result_without_tool_rejected(self):
        with pytest.raises(ValueError):
            ReplyContext("list", tool_result=Failure("x"))


class TestToolIntent:
    def test_none(self):
        intent = ToolIntent.none()
        assert intent.tool_name is None
        assert intent.params == {}
        assert intent.wants_tool is False

    def test_wants_tool(self):
        assert ToolIntent("get_environments").wants_tool is True


class TestMessage:
    def test_to_event(self):
        ts = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
        event = Message(Sender.ASSISTANT, "hi", ts).to_event()
        assert event == {
            "type": "message",
            "sender": "assistant",
            "text": "hi",
            "timestamp": "2026-10-17T12:00:00+00:00",
        }

    def test_now_is_utc(self):
        msg = Message.now(Sender.USER, "hello")
        assert msg.timestamp.tzinfo is timezone.utc

    def test_immutable(self):
        msg = Message.now(Sender.USER, "hello")
        with pytest.raises(Exception):
            msg.text = "changed"
