"""Pipeline data model — messages, tool intents, validation and tool outcomes."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .protocol import ChatMessage


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Message:
    sender: Sender
    text: str
    timestamp: datetime

    @classmethod
    def now(cls, sender: Sender, text: str) -> "Message":
        return cls(sender=sender, text=text, timestamp=datetime.now(timezone.utc))

    def to_event(self) -> dict:
        """Outbound channel event for this message."""
        return ChatMessage(
            type="message",
            sender=self.sender.value,
            text=self.text,
            timestamp=self.timestamp.isoformat(),
        ).model_dump()


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    required_params: Tuple[str, ...] = ()
    param_descriptions: Mapping[str, str] = field(default_factory=dict)
    description: str = ""


@dataclass(frozen=True)
class ToolIntent:
    tool_name: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def none(cls) -> "ToolIntent":
        return cls(tool_name=None, params={})

    @property
    def wants_tool(self) -> bool:
        return self.tool_name is not None


# ── Validation outcome ────────────────────────────────────────

@dataclass(frozen=True)
class Valid:
    pass


@dataclass(frozen=True)
class Invalid:
    missing: Tuple[str, ...]


ValidationOutcome = Union[Valid, Invalid]


# ── Tool result ───────────────────────────────────────────────

@dataclass(frozen=True)
class Success:
    value: Any


@dataclass(frozen=True)
class Failure:
    reason: str


ToolResult = Union[Success, Failure]


@dataclass(frozen=True)
class ReplyContext:
    """Everything the synthesizer needs for one reply.

    ``invoked_tool`` and ``tool_result`` are either both set (post-processing
    mode) or both unset (direct mode).
    """
    original_message: str
    invoked_tool: Optional[str] = None
    tool_result: Optional[ToolResult] = None

    def __post_init__(self):
        if (self.invoked_tool is None) != (self.tool_result is None):
            raise ValueError("invoked_tool and tool_result must be set together")

    @property
    def used_tool(self) -> bool:
        return self.invoked_tool is not None
