"""Tests for tools/invoker.py — single call, failures converted to data."""
import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from codearts_chat.models import Failure, Success
from codearts_chat.tools.backend import ToolBackendError
from codearts_chat.tools.invoker import invoke_tool


class TestInvokeTool:
    @pytest.mark.asyncio
    async def test_success(self, backend):
        backend.execute_tool.return_value = [{"name": "dev"}]
        result = await invoke_tool("get_environments", {"limit": 5}, backend)
        assert result == Success([{"name": "dev"}])
        backend.execute_tool.assert_awaited_once_with("get_environments", {"limit": 5})

    @pytest.mark.asyncio
    async def test_backend_error(self, backend):
        backend.execute_tool.side_effect = ToolBackendError("environment quota exceeded")
        result = await invoke_tool("create_environment", {"name": "x"}, backend)
        assert result == Failure("environment quota exceeded")

    @pytest.mark.asyncio
    async def test_transport_error(self, backend):
        backend.execute_tool.side_effect = httpx.ConnectError("connection refused")
        result = await invoke_tool("get_environments", {}, backend)
        assert isinstance(result, Failure)
        assert "connection refused" in result.reason

    @pytest.mark.asyncio
    async def test_error_without_message_uses_type_name(self, backend):
        backend.execute_tool.side_effect = KeyError()
        result = await invoke_tool("get_environments", {}, backend)
        assert result == Failure("KeyError")

    @pytest.mark.asyncio
    async def test_timeout(self):
        async def slow(name, params):
            await asyncio.sleep(1)

        backend = AsyncMock()
        backend.execute_tool = slow
        result = await invoke_tool("get_environments", {}, backend, timeout=0.01)
        assert isinstance(result, Failure)
        assert "timed out" in result.reason

    @pytest.mark.asyncio
    async def test_single_attempt(self, backend):
        backend.execute_tool.side_effect = ToolBackendError("down")
        await invoke_tool("get_environments", {}, backend)
        assert backend.execute_tool.await_count == 1

    @pytest.mark.asyncio
    async def test_params_copied(self, backend):
        params = {"limit": 1}
        await invoke_tool("get_environments", params, backend)
        passed = backend.execute_tool.await_args.args[1]
        assert passed == params
        assert passed is not params
