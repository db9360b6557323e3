"""
JSON-RPC 2.0 client for the Composio MCP gateway.

One GatewayClient serves a single fetch: connect(), one or more calls,
disconnect(). Request ids are per-instance and start at 1.
"""
import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

import httpx

from .config import DEFAULT_API_KEY_HEADER
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    NotConnectedError,
    ProtocolError,
    RpcError,
    ToolNotFoundError,
    TransportError,
)
from .transport import decode_envelope

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"


class GatewayClient:
    def __init__(
        self,
        env: Optional[Mapping[str, str]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        api_key_header: Optional[str] = None,
    ):
        """
        Args:
            env: Where connect() reads COMPOSIO_API_KEY / MCP_ENDPOINT from.
                Defaults to ``os.environ``.
            http_client: Shared httpx client. When omitted the client creates
                its own and closes it on disconnect().
            api_key_header: Name of the API-key header. Falls back to
                MCP_API_KEY_HEADER, then ``x-api-key``.
        """
        self._env = os.environ if env is None else env
        self._http = http_client
        self._owns_http = http_client is None
        self._api_key_header = api_key_header

        self.api_key = ""
        self.endpoint = ""
        self.connected = False
        self._next_id = 1

    @property
    def api_key_header(self) -> str:
        return (
            self._api_key_header
            or self._env.get("MCP_API_KEY_HEADER")
            or DEFAULT_API_KEY_HEADER
        )

    async def connect(self) -> bool:
        api_key = (self._env.get("COMPOSIO_API_KEY") or "").strip()
        endpoint = (self._env.get("MCP_ENDPOINT") or "").strip()

        if not api_key:
            self.connected = False
            raise ConfigurationError("Missing COMPOSIO_API_KEY")
        if not endpoint:
            self.connected = False
            raise ConfigurationError("Missing MCP_ENDPOINT")

        self.api_key = api_key
        self.endpoint = endpoint
        if self._http is None:
            self._http = httpx.AsyncClient()
            self._owns_http = True

        self.connected = True
        logger.info("MCP client connected successfully")
        logger.info(f"Using MCP endpoint: {endpoint[:50]}...")
        return True

    async def disconnect(self) -> None:
        self.connected = False
        if self._owns_http and self._http is not None:
            try:
                await self._http.aclose()
            except Exception as e:
                logger.warning(f"Error closing HTTP client: {e}")
            self._http = None
        logger.info("MCP client disconnected")

    async def __aenter__(self) -> "GatewayClient":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.disconnect()

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
            self.api_key_header: self.api_key,
        }

    def _envelope(self, method: str, params: Dict[str, Any]) -> Dict[str, Any]:
        request_id = self._next_id
        self._next_id += 1
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": request_id,
            "method": method,
            "params": params,
        }

    async def _send(self, method: str, params: Dict[str, Any], tool_name: Optional[str] = None) -> Any:
        if not self.connected:
            raise NotConnectedError()

        rpc_request = self._envelope(method, params)
        logger.debug(f"Sending JSON-RPC request: {json.dumps(rpc_request, default=str)}")

        try:
            response = await self._http.post(
                self.endpoint,
                headers=self._headers(),
                content=json.dumps(rpc_request),
            )
        except httpx.RequestError as e:
            logger.error(f"Request to MCP endpoint failed: {e}")
            raise TransportError(f"MCP request failed: {e}") from e

        logger.info(f"[{method}] Response status: {response.status_code}")

        if not response.is_success:
            body = response.text
            logger.error(f"Error response: {body[:500]}")

            if response.status_code == 404 and tool_name is not None:
                raise ToolNotFoundError(tool_name, body=body)
            if response.status_code in (401, 403):
                raise AuthenticationError(
                    "Authentication failed. Please check your COMPOSIO_API_KEY in .env file.",
                    status=response.status_code,
                    body=body,
                )
            raise TransportError(
                f"MCP server error: {response.status_code} - {body}",
                status=response.status_code,
                body=body,
            )

        rpc_response = decode_envelope(response.headers.get("content-type"), response.text)
        if not isinstance(rpc_response, dict):
            raise ProtocolError("MCP response is not a JSON-RPC object")

        error = rpc_response.get("error")
        if error is not None:
            logger.error(f"RPC Error: {error}")
            if isinstance(error, dict):
                raise RpcError(
                    error.get("message") or json.dumps(error),
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise RpcError(str(error))

        result = rpc_response.get("result")
        if result is None:
            raise ProtocolError("MCP response missing result")

        if isinstance(result, dict) and isinstance(result.get("content"), list):
            logger.info(f"Received {len(result['content'])} content items")
        return result

    async def call_tool(self, tool_name: str, arguments: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke a named gateway tool and return the raw ``result`` payload."""
        logger.info(f"Calling tool: {tool_name}")
        return await self._send(
            "tools/call",
            {"name": tool_name, "arguments": arguments or {}},
            tool_name=tool_name,
        )

    async def execute(self, prompt_text: str) -> Any:
        """Send a natural-language instruction through the gateway's prompt path."""
        logger.info(f"Executing prompt: {prompt_text[:80]}")
        return await self._send(
            "prompt",
            {"messages": [{"role": "user", "content": prompt_text}]},
        )

    async def list_tools(self) -> List[Dict[str, Any]]:
        result = await self._send("tools/list", {})
        tools = result.get("tools") if isinstance(result, dict) else None
        return tools if isinstance(tools, list) else []
