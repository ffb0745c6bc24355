"""HTTP endpoints — health check and tool listing."""
from datetime import datetime, timezone
from typing import List

from fastapi import FastAPI
from pydantic import BaseModel

from .config import settings
from .tools.registry import ToolRegistry, load_registry


class ToolOut(BaseModel):
    name: str
    description: str
    required_params: List[str]
    params: dict


def create_app(registry: ToolRegistry) -> FastAPI:
    app = FastAPI(title="codearts-chat")

    @app.get("/api/health")
    async def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/tools", response_model=List[ToolOut])
    async def list_tools():
        return [
            ToolOut(
                name=tool.name,
                description=tool.description,
                required_params=list(tool.required_params),
                params=dict(tool.param_descriptions),
            )
            for tool in registry
        ]

    return app


def app_factory() -> FastAPI:
    """uvicorn ``--factory`` entry point."""
    return create_app(load_registry(settings.tool_schema_path))
