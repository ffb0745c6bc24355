"""LLM client — single request/response chat completion via OpenAI."""
import logging
from typing import Awaitable, Callable, List, Optional

from openai import AsyncOpenAI

from .config import settings

logger = logging.getLogger(__name__)

# prompt messages → model text
Completer = Callable[[List[dict]], Awaitable[str]]


class LLMNotConfiguredError(RuntimeError):
    """No OpenAI API key is configured."""


_client: Optional[AsyncOpenAI] = None


def _get_client() -> AsyncOpenAI:
    global _client
    if not settings.openai_api_key:
        raise LLMNotConfiguredError("OpenAI service not configured")
    if _client is None:
        _client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.llm_timeout_s,
            max_retries=0,
        )
    return _client


async def complete(messages: List[dict], model: Optional[str] = None, json_mode: bool = False) -> str:
    """Send ``messages`` to the chat model and return the reply text."""
    client = _get_client()
    kwargs = {}
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    response = await client.chat.completions.create(
        model=model or settings.chat_model,
        messages=messages,
        temperature=settings.chat_temperature,
        **kwargs,
    )
    return (response.choices[0].message.content or "").strip()


async def complete_intent(messages: List[dict]) -> str:
    return await complete(messages, model=settings.intent_model, json_mode=True)


async def complete_chat(messages: List[dict]) -> str:
    return await complete(messages, model=settings.chat_model)
