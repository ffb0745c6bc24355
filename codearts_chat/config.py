from pydantic import BaseModel
import os
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Load .env file if it exists (before reading os.getenv)
_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    with open(_env_path) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()
                # Only set if not already in environment (env vars take precedence)
                if key not in os.environ:
                    os.environ[key] = value


def _sanitize_ascii(val: str) -> str:
    """Strip non-ASCII characters from config values (prevents encoding errors)"""
    return val.encode('ascii', errors='ignore').decode('ascii').strip()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    # Network: websocket chat channel + HTTP (health, tool listing)
    ws_host: str = os.getenv("CHAT_WS_HOST", "0.0.0.0")
    ws_port: int = int(os.getenv("CHAT_WS_PORT", "3002"))
    http_host: str = os.getenv("CHAT_HTTP_HOST", "0.0.0.0")
    http_port: int = int(os.getenv("CHAT_HTTP_PORT", "3001"))

    # OpenAI-compatible LLM
    openai_api_key: str = _sanitize_ascii(os.getenv("OPENAI_API_KEY", ""))
    openai_base_url: str = _sanitize_ascii(os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"))
    chat_model: str = _sanitize_ascii(os.getenv("CHAT_MODEL", "gpt-4o-mini"))
    intent_model: str = _sanitize_ascii(os.getenv("INTENT_MODEL", os.getenv("CHAT_MODEL", "gpt-4o-mini")))
    chat_temperature: float = float(os.getenv("CHAT_TEMPERATURE", "0.7"))
    llm_timeout_s: float = float(os.getenv("LLM_TIMEOUT_S", "30"))

    # Tool backend (CodeArts tool server)
    tool_backend_url: str = _sanitize_ascii(os.getenv("TOOL_BACKEND_URL", os.getenv("MCP_SERVER_URL", "")))
    tool_timeout_s: float = float(os.getenv("TOOL_TIMEOUT_S", "30"))
    tool_schema_path: Optional[str] = os.getenv("TOOL_SCHEMA_PATH") or None

    # Process messages of one connection one at a time
    serialize_per_connection: bool = _env_bool("CHAT_SERIALIZE_PER_CONNECTION")

    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

settings = Settings()

# Log config for debugging
_oai_key = '***' + settings.openai_api_key[-4:] if len(settings.openai_api_key) > 4 else 'EMPTY'
logger.info(f"Config: LLM → {settings.openai_base_url} (key={_oai_key}), "
            f"intent={settings.intent_model}, chat={settings.chat_model}")
logger.info(f"Config: Tool backend → {settings.tool_backend_url or 'NOT SET'}")
