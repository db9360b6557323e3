"""Environment-driven settings"""
import os
from typing import Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

DEFAULT_ACTION_NAME = "GOOGLECALENDAR_LIST_EVENTS"
DEFAULT_API_KEY_HEADER = "x-api-key"
DEFAULT_SUMMARY_MODEL = "gpt-4o-mini"


def _flag(value: Optional[str], default: bool = False) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    # Calendar gateway
    composio_api_key: str = ""
    mcp_api_key_header: str = DEFAULT_API_KEY_HEADER
    composio_action_name: str = DEFAULT_ACTION_NAME
    fetch_mode: str = "tool"  # "tool" | "prompt"
    use_mock_data: bool = False

    # Completion service
    openai_api_key: str = ""
    openai_base_url: Optional[str] = None
    openai_model: str = DEFAULT_SUMMARY_MODEL

    # Web / logging
    frontend_url: str = "http://localhost:3000"
    log_level: str = "INFO"
    log_to_file: bool = True

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``env`` (defaults to ``os.environ``)."""
        env = os.environ if env is None else env

        fetch_mode = (env.get("MCP_FETCH_MODE") or "tool").strip().lower()
        if fetch_mode not in ("tool", "prompt"):
            fetch_mode = "tool"

        return cls(
            composio_api_key=env.get("COMPOSIO_API_KEY") or "",
            mcp_api_key_header=env.get("MCP_API_KEY_HEADER") or DEFAULT_API_KEY_HEADER,
            composio_action_name=env.get("COMPOSIO_ACTION_NAME") or DEFAULT_ACTION_NAME,
            fetch_mode=fetch_mode,
            use_mock_data=_flag(env.get("USE_MOCK_DATA")),
            openai_api_key=env.get("OPENAI_API_KEY") or "",
            openai_base_url=env.get("OPENAI_BASE_URL") or None,
            openai_model=env.get("OPENAI_MODEL") or DEFAULT_SUMMARY_MODEL,
            frontend_url=env.get("FRONTEND_URL") or "http://localhost:3000",
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
            log_to_file=_flag(env.get("LOG_TO_FILE"), default=True),
        )
