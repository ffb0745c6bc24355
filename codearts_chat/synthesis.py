"""Response synthesizer — turns the user's message (and any tool outcome) into the reply."""
import json
import logging

from .llm import Completer, LLMNotConfiguredError
from .models import Failure, ReplyContext, Success, ToolResult

logger = logging.getLogger(__name__)

PERSONA_PROMPT = (
    "You are a helpful assistant integrated with the Huawei CodeArts tool server. "
    "You help users with questions about Huawei Cloud services, CodeArts environments, "
    "cloud computing, and related technologies. Be concise and helpful."
)

TOOL_RESULT_PROMPT = PERSONA_PROMPT + (
    "\n\nA tool was just run on the user's behalf. Answer the user's original request "
    "using the tool outcome below. Summarize what matters to the user instead of "
    "repeating raw JSON. If the tool failed, say so plainly, include the reason, "
    "and suggest what the user could do next."
)

DIRECT_FALLBACK = (
    "I'm sorry, I encountered an error processing your request. "
    "Please try again in a moment."
)

NOT_CONFIGURED_REPLY = (
    "I'm currently unable to process your request (language model service not configured). "
    "Please set OPENAI_API_KEY for the server."
)


def serialize_result(result: ToolResult) -> str:
    if isinstance(result, Failure):
        return result.reason
    return json.dumps(result.value, ensure_ascii=False, indent=2, default=str)


def _tool_messages(context: ReplyContext) -> list:
    result = context.tool_result
    status = "success" if isinstance(result, Success) else "failure"
    content = (
        f"User request: {context.original_message}\n"
        f"Tool: {context.invoked_tool}\n"
        f"Tool status: {status}\n"
        f"Tool output:\n{serialize_result(result)}"
    )
    return [
        {"role": "system", "content": TOOL_RESULT_PROMPT},
        {"role": "user", "content": content},
    ]


def _direct_messages(context: ReplyContext) -> list:
    return [
        {"role": "system", "content": PERSONA_PROMPT},
        {"role": "user", "content": context.original_message},
    ]


def fallback_reply(context: ReplyContext, not_configured: bool = False) -> str:
    """Deterministic reply used when the model call fails."""
    if not context.used_tool:
        return NOT_CONFIGURED_REPLY if not_configured else DIRECT_FALLBACK

    result = context.tool_result
    if isinstance(result, Failure):
        return f"I tried to run {context.invoked_tool}, but it failed: {result.reason}"
    return f"I ran {context.invoked_tool}. Here is the raw result:\n{serialize_result(result)}"


async def synthesize(context: ReplyContext, complete: Completer) -> str:
    """Produce the final reply text. Never raises."""
    if context.used_tool:
        messages = _tool_messages(context)
        mode = f"post-processing ({context.invoked_tool})"
    else:
        messages = _direct_messages(context)
        mode = "direct"

    try:
        reply = await complete(messages)
    except LLMNotConfiguredError:
        logger.warning(f"Synthesis [{mode}]: LLM not configured, using fallback")
        return fallback_reply(context, not_configured=True)
    except Exception as e:
        logger.error(f"Synthesis [{mode}] failed: {type(e).__name__}: {e}")
        return fallback_reply(context)

    reply = (reply or "").strip()
    if not reply:
        logger.warning(f"Synthesis [{mode}]: empty model reply, using fallback")
        return fallback_reply(context)
    return reply
