#!/usr/bin/env python3
"""
CodeArts chat server - dual server launcher
Runs both WebSocket chat server (websockets lib) and HTTP server (FastAPI) concurrently
"""
import asyncio
import logging
import sys

import uvicorn

from codearts_chat.config import settings
from codearts_chat.llm import complete_chat, complete_intent
from codearts_chat.main import create_app
from codearts_chat.pipeline import Orchestrator
from codearts_chat.tools import build_backend, load_registry, probe_backend
from codearts_chat.ws_server import start_websocket_server

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def run_http_server(app):
    """Run FastAPI HTTP server for health/tool endpoints"""
    try:
        config = uvicorn.Config(
            app,
            host=settings.http_host,
            port=settings.http_port,
            log_level="info"
        )
        server = uvicorn.Server(config)
        await server.serve()
    except Exception as e:
        logger.error(f"HTTP server failed: {e}")
        logger.warning("WebSocket server will continue running without HTTP endpoints")


async def main():
    """Build the pipeline and run both servers concurrently"""
    logger.info("Starting CodeArts chat servers...")
    logger.info(f"Python {sys.version}")

    registry = load_registry(settings.tool_schema_path)
    backend = build_backend(settings)
    orchestrator = Orchestrator(
        registry=registry,
        backend=backend,
        complete_intent=complete_intent,
        complete_chat=complete_chat,
        tool_timeout=settings.tool_timeout_s,
    )
    if not settings.openai_api_key:
        logger.warning("OpenAI API key not found in environment variables")

    if settings.tool_backend_url:
        logger.info("Testing tool backend connection...")
        await probe_backend(backend)

    logger.info(f"HTTP server will run on http://{settings.http_host}:{settings.http_port}")
    logger.info(f"WebSocket server will run on ws://{settings.ws_host}:{settings.ws_port}")

    # return_exceptions=True: one failure won't kill the other
    results = await asyncio.gather(
        start_websocket_server(orchestrator),
        run_http_server(create_app(registry)),
        return_exceptions=True,
    )
    names = ["WebSocket", "HTTP"]
    for i, r in enumerate(results):
        if isinstance(r, Exception):
            logger.error(f"{names[i]} exited with error: {r}")

if __name__ == "__main__":
    asyncio.run(main())
