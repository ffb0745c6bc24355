"""Tool invoker — one backend call per tool request, failures returned as data."""
import asyncio
import logging
import time
from typing import Any, Dict, Optional

from ..models import Failure, Success, ToolResult

logger = logging.getLogger(__name__)


async def invoke_tool(tool_name: str, params: Dict[str, Any], backend, timeout: Optional[float] = None) -> ToolResult:
    """Execute a validated tool call on the backend.

    Never raises: transport, auth, backend and timeout errors all come back
    as ``Failure``. No retries.
    """
    arg_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logger.info(f"Executing tool: {tool_name}({arg_str})")
    t0 = time.monotonic()

    try:
        call = backend.execute_tool(tool_name, dict(params))
        value = await (asyncio.wait_for(call, timeout=timeout) if timeout else call)
        result: ToolResult = Success(value)
    except asyncio.TimeoutError:
        logger.error(f"Tool {tool_name} timed out after {timeout}s")
        result = Failure(f"{tool_name} timed out after {timeout:g}s")
    except Exception as e:
        logger.error(f"Tool {tool_name} failed: {e}", exc_info=True)
        result = Failure(str(e) or type(e).__name__)

    elapsed = time.monotonic() - t0
    logger.info(f"Tool {tool_name}: {elapsed:.1f}s -> {type(result).__name__.lower()}")
    return result
