"""Intent extractor — asks the LLM whether a chat message is a tool request."""
import json
import logging
import re
from typing import List

from .llm import Completer
from .models import ToolIntent
from .tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

INTENT_PROMPT = """You route chat messages for an assistant that manages Huawei CodeArts resources.
Decide whether the user's message asks to run one of the tools below.

Available tools:
{tool_list}

Respond with a single JSON object and nothing else:
{{"tool": "<tool_name>", "params": {{...}}}}
- "tool" must be one of: {tool_names}
- "params" holds only values the user actually gave. Never invent values for required params; leave them out.
- If the message is a question, small talk, or does not match a tool, respond with {{"tool": null, "params": {{}}}}

Examples:
- "list my environments" → {{"tool": "get_environments", "params": {{}}}}
- "show me the first 5 environments" → {{"tool": "get_environments", "params": {{"limit": 5}}}}
- "create an environment called staging" → {{"tool": "create_environment", "params": {{"name": "staging"}}}}
- "what is CCE?" → {{"tool": null, "params": {{}}}}

IMPORTANT: Always respond with valid JSON only. No markdown, no code blocks."""

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def build_intent_messages(text: str, registry: ToolRegistry) -> List[dict]:
    system_prompt = INTENT_PROMPT.format(
        tool_list=registry.describe_for_llm(),
        tool_names=", ".join(registry.names()),
    )
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": text},
    ]


def parse_intent(raw: str, registry: ToolRegistry) -> ToolIntent:
    """Parse the model's raw output. Anything off-shape means "no tool"."""
    text = (raw or "").strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        payload = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        logger.warning(f"Intent JSON parse failed, treating as no tool: {text[:200]!r}")
        return ToolIntent.none()

    if not isinstance(payload, dict):
        logger.warning(f"Intent is not a JSON object, treating as no tool: {text[:200]!r}")
        return ToolIntent.none()

    tool = payload.get("tool")
    if not isinstance(tool, str) or not tool.strip():
        return ToolIntent.none()
    tool = tool.strip()

    params = payload.get("params")
    if params is None:
        params = {}
    if not isinstance(params, dict):
        logger.warning(f"Intent params for {tool} are not an object, treating as no tool")
        return ToolIntent.none()

    if tool not in registry:
        logger.info(f"Model proposed unknown tool {tool!r}, treating as no tool")
        return ToolIntent.none()

    return ToolIntent(tool_name=tool, params=params)


async def extract_intent(text: str, complete: Completer, registry: ToolRegistry) -> ToolIntent:
    """Classify ``text`` into a tool call. Model failures downgrade to no tool."""
    messages = build_intent_messages(text, registry)
    try:
        raw = await complete(messages)
    except Exception as e:
        logger.warning(f"Intent model call failed, treating as no tool: {type(e).__name__}: {e}")
        return ToolIntent.none()

    logger.info(f"Intent raw: {(raw or '')[:200]}")
    return parse_intent(raw, registry)
