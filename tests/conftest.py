"""Shared fixtures — registry, recording channel/reporter, stub model and backend."""
import json
from unittest.mock import AsyncMock

import pytest

from codearts_chat.pipeline import Orchestrator, PipelineReporter
from codearts_chat.tools.registry import load_registry


class RecordingChannel:
    def __init__(self):
        self.events = []

    async def broadcast(self, event: dict) -> None:
        self.events.append(event)

    def messages(self, sender=None):
        return [e for e in self.events
                if e["type"] == "message" and (sender is None or e["sender"] == sender)]

    def errors(self):
        return [e for e in self.events if e["type"] == "error"]


class RecordingReporter(PipelineReporter):
    def __init__(self):
        self.stages = []
        self.failures = []

    def stage(self, message_id, stage, detail=""):
        self.stages.append(stage.value)

    def failed(self, message_id, exc):
        self.failures.append(exc)


def intent_json(tool, params=None) -> str:
    return json.dumps({"tool": tool, "params": params or {}})


@pytest.fixture
def registry():
    return load_registry()


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def backend():
    mock = AsyncMock()
    mock.execute_tool = AsyncMock(return_value={"status": "success"})
    return mock


@pytest.fixture
def complete_intent():
    return AsyncMock(return_value=intent_json(None))


@pytest.fixture
def complete_chat():
    return AsyncMock(return_value="Hello! How can I help with CodeArts today?")


@pytest.fixture
def orchestrator(registry, backend, complete_intent, complete_chat, reporter):
    return Orchestrator(
        registry=registry,
        backend=backend,
        complete_intent=complete_intent,
        complete_chat=complete_chat,
        reporter=reporter,
    )
