"""
Shared fixtures for the meeting digest tests.

Gateway and Composio HTTP traffic is served by httpx.MockTransport; the
completion service is replaced by a scripted LangChain chat model.
"""
# Keep test runs from writing log files
import os
os.environ.setdefault("LOG_TO_FILE", "false")

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from pydantic import Field

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
ENDPOINT = "https://mcp.example.test/v3/mcp/abc"


def iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


def calendar_event(
    event_id: Optional[str],
    title: str,
    start: datetime,
    minutes: int = 30,
    attendees: Optional[List[Dict[str, str]]] = None,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    event: Dict[str, Any] = {
        "summary": title,
        "start": {"dateTime": iso(start)},
        "end": {"dateTime": iso(start + timedelta(minutes=minutes))},
    }
    if event_id is not None:
        event["id"] = event_id
    if attendees is not None:
        event["attendees"] = attendees
    if description is not None:
        event["description"] = description
    return event


def rpc_result(result: Any, request_id: int = 1) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def mcp_text_result(document: Any) -> Dict[str, Any]:
    """Wrap a document the way Composio returns tool output"""
    return {"content": [{"type": "text", "text": json.dumps(document)}]}


def sse_response(envelope: Dict[str, Any], status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        headers={"content-type": "text/event-stream"},
        text=f"event: message\ndata: {json.dumps(envelope)}\n\n",
    )


class ScriptedChatModel(BaseChatModel):
    """Chat model double: answers "Summary of <title>", or fails for chosen titles"""

    fail_on: List[str] = Field(default_factory=list)
    empty_for: List[str] = Field(default_factory=list)
    prompts: List[str] = Field(default_factory=list)

    @property
    def _llm_type(self) -> str:
        return "scripted"

    def _generate(self, messages: List[BaseMessage], stop=None, run_manager=None, **kwargs) -> ChatResult:
        prompt = messages[-1].content
        self.prompts.append(prompt)

        title = ""
        for line in prompt.splitlines():
            if line.startswith("Title: "):
                title = line[len("Title: "):]

        if title in self.fail_on:
            raise RuntimeError("quota exceeded")

        content = "" if title in self.empty_for else f"Summary of {title}"
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content=content))])


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def gateway_env() -> Dict[str, str]:
    return {"COMPOSIO_API_KEY": "test-composio-key", "MCP_ENDPOINT": ENDPOINT}


@pytest.fixture
def chat_model() -> ScriptedChatModel:
    return ScriptedChatModel()


@pytest.fixture
def recorded_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def make_http_client(recorded_requests) -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by ``handler`` and recorded."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        def _recording(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        return httpx.AsyncClient(transport=httpx.MockTransport(_recording))

    return _make
