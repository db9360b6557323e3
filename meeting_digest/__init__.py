"""Calendar meetings with AI summaries, fetched through the Composio MCP gateway."""

from .classifier import classify_meetings
from .config import Settings
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    DecodeError,
    GatewayError,
    NotConnectedError,
    ProtocolError,
    RpcError,
    ToolNotFoundError,
    TransportError,
)
from .gateway import GatewayClient
from .models import CalendarData, Meeting, NormalizedEvents
from .normalizer import normalize_events
from .pipeline import MeetingDigest
from .summaries import SummaryEnricher
from .transport import decode_envelope

__all__ = [
    "AuthenticationError",
    "CalendarData",
    "ConfigurationError",
    "DecodeError",
    "GatewayClient",
    "GatewayError",
    "Meeting",
    "MeetingDigest",
    "NormalizedEvents",
    "NotConnectedError",
    "ProtocolError",
    "RpcError",
    "Settings",
    "SummaryEnricher",
    "ToolNotFoundError",
    "TransportError",
    "classify_meetings",
    "decode_envelope",
    "normalize_events",
]

__version__ = "0.1.0"
