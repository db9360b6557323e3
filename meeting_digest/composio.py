"""Diagnostics against the Composio REST API and the gateway's tool catalogue"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from .exceptions import TransportError

logger = logging.getLogger(__name__)

COMPOSIO_API_URL = "https://backend.composio.dev"


def calendar_tools(tools: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Summarize a tools/list result, keeping the calendar-related tools."""

    def _is_calendar(name: str) -> bool:
        name = name.lower()
        return "calendar" in name or "event" in name or "google" in name

    matching = [t for t in tools if isinstance(t, dict) and _is_calendar(t.get("name") or "")]
    return {
        "totalTools": len(tools),
        "calendarTools": [
            {
                "name": t.get("name"),
                "description": t.get("description"),
                "inputSchema": t.get("inputSchema"),
            }
            for t in matching
        ],
        "allToolNames": [t.get("name") for t in tools if isinstance(t, dict)],
    }


class ComposioRestClient:
    def __init__(
        self,
        api_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = COMPOSIO_API_URL,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient()
        self._owns_client = http_client is None

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self._base_url}{path}"
        logger.debug(f"GET {url} params={params}")
        response = await self._client.get(url, params=params, headers={"X-API-Key": self._api_key})

        if not response.is_success:
            raise TransportError(
                f"Composio API error: {response.status_code}",
                status=response.status_code,
                body=response.text,
            )
        return response.json()

    async def list_integrations(self) -> Dict[str, Any]:
        data = await self._get("/api/v2/integrations")
        items = data.get("items") if isinstance(data, dict) else None

        def _is_google_calendar(integration: Dict[str, Any]) -> bool:
            app_name = (integration.get("appName") or "").lower()
            name = (integration.get("name") or "").lower()
            return app_name == "googlecalendar" or ("google" in name and "calendar" in name)

        return {
            "integrations": items if items is not None else data,
            "googleCalendarConnected": any(
                _is_google_calendar(i) for i in items or [] if isinstance(i, dict)
            ),
        }

    async def list_actions(self, app_name: str = "googlecalendar") -> Dict[str, Any]:
        data = await self._get("/api/v2/actions", params={"appNames": app_name})
        raw_items = data.get("items") if isinstance(data, dict) else None
        items = [a for a in raw_items or [] if isinstance(a, dict)]

        def _is_listing(action: Dict[str, Any]) -> bool:
            name = (action.get("name") or "").lower()
            return "list" in name or "event" in name

        return {
            "allActions": [a.get("name") for a in items],
            "listActions": [
                {"name": a.get("name"), "description": a.get("description")}
                for a in items
                if _is_listing(a)
            ],
        }

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
