"""Tool backend clients — execute a named tool on the CodeArts tool server."""
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class ToolBackendError(Exception):
    """The tool backend reported an error or is unavailable."""


class HttpToolBackend:
    """POSTs tool params as JSON to ``{base_url}/tools/{name}``."""

    def __init__(self, base_url: str, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def execute_tool(self, name: str, params: Dict[str, Any]) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(f"{self.base_url}/tools/{name}", json=params)
            resp.raise_for_status()
            data = resp.json() if resp.content else None

        # The tool server reports handler failures as {"error": "..."} with 200 OK
        if isinstance(data, dict) and set(data) == {"error"}:
            raise ToolBackendError(str(data["error"]))
        return data


class UnconfiguredToolBackend:
    """Stand-in used when TOOL_BACKEND_URL is not set; every call fails."""

    async def execute_tool(self, name: str, params: Dict[str, Any]) -> Any:
        raise ToolBackendError("tool backend not configured")


def build_backend(settings):
    if settings.tool_backend_url:
        logger.info(f"Tool backend: {settings.tool_backend_url}")
        return HttpToolBackend(settings.tool_backend_url, timeout=settings.tool_timeout_s)
    logger.warning("TOOL_BACKEND_URL not set. Tool calls will report the backend as unavailable.")
    return UnconfiguredToolBackend()


async def probe_backend(backend) -> bool:
    """Start-up connectivity check: fetch a single environment."""
    try:
        result = await backend.execute_tool("get_environments", {"limit": 1})
    except Exception as e:
        logger.error(f"Tool backend probe failed: {type(e).__name__}: {e}")
        return False
    logger.info(f"Tool backend probe OK. Sample environment data: {str(result)[:200]}")
    return True
