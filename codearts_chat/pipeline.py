"""Message pipeline — intent → validate → invoke → synthesize → broadcast.

One ``handle_message`` call per inbound chat message. Every expected failure
(bad intent JSON, missing params, backend errors, model errors) is recovered
into an assistant reply; only an unexpected exception ends in an error ack.
"""
import inspect
import logging
import time
import uuid
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from .intent import extract_intent
from .llm import Completer
from .models import Invalid, Message, ReplyContext, Sender
from .protocol import ErrorMsg
from .synthesis import synthesize
from .tools.invoker import invoke_tool
from .tools.registry import ToolRegistry
from .tools.validator import validate_params

logger = logging.getLogger(__name__)

ERROR_EVENT_TEXT = "Error processing your message"

AckCallback = Callable[[dict], Any]


class Channel(Protocol):
    async def broadcast(self, event: dict) -> None: ...


class Stage(str, Enum):
    RECEIVED = "received"
    INTENT_EXTRACTED = "intent_extracted"
    NO_TOOL = "no_tool"
    PARAMS_CHECKED = "params_checked"
    SKIPPED = "skipped"
    INVOKED = "invoked"
    SYNTHESIZED = "synthesized"
    DELIVERED = "delivered"
    FAILED = "failed"


class PipelineReporter:
    """Observer for stage transitions. The default implementation logs them."""

    def stage(self, message_id: str, stage: Stage, detail: str = "") -> None:
        suffix = f" {detail}" if detail else ""
        logger.info(f"[{message_id}] {stage.value}{suffix}")

    def failed(self, message_id: str, exc: BaseException) -> None:
        logger.error(f"[{message_id}] UNHANDLED in pipeline: {type(exc).__name__}: {exc}", exc_info=exc)


def missing_params_reply(missing) -> str:
    lines = "\n".join(f"- `{name}`" for name in missing)
    return (
        "I can do that, but I still need a few details first:\n"
        f"{lines}\n"
        "Please send them and I'll try again."
    )


class Orchestrator:
    def __init__(
        self,
        registry: ToolRegistry,
        backend,
        complete_intent: Completer,
        complete_chat: Completer,
        tool_timeout: Optional[float] = None,
        reporter: Optional[PipelineReporter] = None,
    ):
        self.registry = registry
        self.backend = backend
        self.complete_intent = complete_intent
        self.complete_chat = complete_chat
        self.tool_timeout = tool_timeout
        self.reporter = reporter or PipelineReporter()

    async def respond(self, text: str, message_id: str) -> str:
        """Run the stages for one message and return the assistant reply text."""
        report = self.reporter.stage

        intent = await extract_intent(text, self.complete_intent, self.registry)
        report(message_id, Stage.INTENT_EXTRACTED, intent.tool_name or "none")

        tool = self.registry.get(intent.tool_name) if intent.wants_tool else None
        if tool is None:
            report(message_id, Stage.NO_TOOL)
            context = ReplyContext(original_message=text)
        else:
            outcome = validate_params(tool, intent.params)
            report(message_id, Stage.PARAMS_CHECKED, type(outcome).__name__.lower())
            if isinstance(outcome, Invalid):
                report(message_id, Stage.SKIPPED, f"missing={list(outcome.missing)}")
                return missing_params_reply(outcome.missing)

            result = await invoke_tool(tool.name, intent.params, self.backend, timeout=self.tool_timeout)
            report(message_id, Stage.INVOKED, f"{tool.name} -> {type(result).__name__.lower()}")
            context = ReplyContext(original_message=text, invoked_tool=tool.name, tool_result=result)

        reply = await synthesize(context, self.complete_chat)
        report(message_id, Stage.SYNTHESIZED, "post-processing" if context.used_tool else "direct")
        return reply

    async def handle_message(
        self,
        text: str,
        channel: Channel,
        ack: Optional[AckCallback] = None,
        message_id: Optional[str] = None,
    ) -> Optional[str]:
        """Broadcast the user message and exactly one reply, then ack the sender.

        Returns the reply text, or None when the pipeline aborted with an error.
        """
        message_id = message_id or str(uuid.uuid4())[:8]
        t0 = time.monotonic()
        try:
            self.reporter.stage(message_id, Stage.RECEIVED, repr(text[:80]))
            await channel.broadcast(Message.now(Sender.USER, text).to_event())
            reply = await self.respond(text, message_id)
            await channel.broadcast(Message.now(Sender.ASSISTANT, reply).to_event())
        except Exception as e:
            self._notify(self.reporter.stage, message_id, Stage.FAILED, type(e).__name__)
            self._notify(self.reporter.failed, message_id, e)
            try:
                await channel.broadcast(ErrorMsg(type="error", message=ERROR_EVENT_TEXT).model_dump())
            except Exception as be:
                logger.error(f"[{message_id}] Failed to broadcast error event: {be}")
            await self._ack(ack, {"status": "error", "error": str(e) or type(e).__name__}, message_id)
            return None

        self._notify(self.reporter.stage, message_id, Stage.DELIVERED, f"{time.monotonic() - t0:.1f}s")
        await self._ack(ack, {"status": "sent"}, message_id)
        return reply

    @staticmethod
    def _notify(report: Callable[..., None], message_id: str, *args) -> None:
        try:
            report(message_id, *args)
        except Exception as e:
            logger.error(f"[{message_id}] Pipeline reporter failed: {type(e).__name__}: {e}")

    @staticmethod
    async def _ack(ack: Optional[AckCallback], status: dict, message_id: str) -> None:
        if ack is None:
            return
        try:
            res = ack(status)
            if inspect.isawaitable(res):
                await res
        except Exception as e:
            logger.error(f"[{message_id}] Ack callback failed: {type(e).__name__}: {e}")
