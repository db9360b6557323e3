"""Error taxonomy for the calendar gateway client"""
from typing import Any, Optional


class GatewayError(Exception):
    """Base class for every failure raised while talking to the gateway"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(GatewayError):
    """A required setting (API key, endpoint) is missing or empty"""


class NotConnectedError(GatewayError):
    """A call was made before connect() or after disconnect()"""

    def __init__(self, message: str = "MCP client not connected"):
        super().__init__(message)


class TransportError(GatewayError):
    """HTTP-level failure. ``status`` is None when no response was received."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class AuthenticationError(TransportError):
    """Gateway rejected the API key (HTTP 401/403)"""


class ToolNotFoundError(TransportError):
    """Gateway answered 404 for a named tool"""

    def __init__(self, tool_name: str, body: str = ""):
        super().__init__(
            f'MCP tool "{tool_name}" not found. '
            "Make sure Google Calendar is connected in your MCP server configuration.",
            status=404,
            body=body,
        )
        self.tool_name = tool_name


class RpcError(GatewayError):
    """The JSON-RPC response carried an ``error`` member"""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(f"MCP RPC Error: {message}")
        self.rpc_message = message
        self.code = code
        self.data = data


class ProtocolError(GatewayError):
    """The JSON-RPC envelope is malformed or lacks required members"""


class DecodeError(GatewayError):
    """The response body could not be parsed as a JSON-RPC envelope"""
