import logging
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Optional

import httpx
from langchain_core.callbacks.manager import adispatch_custom_event
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph
from typing_extensions import NotRequired, TypedDict

from .classifier import classify_meetings
from .config import Settings
from .gateway import GatewayClient
from .mock_data import get_mock_calendar_data
from .models import CalendarData, Meeting
from .normalizer import normalize_events, to_iso
from .summaries import SummaryEnricher

logger = logging.getLogger(__name__)

FETCH_WINDOW = timedelta(days=7)
MAX_RESULTS = 20

EVENTS_PROMPT = (
    "Get calendar events from primary calendar for the last 7 days and the next 7 days. "
    "Include single events only and order by start time."
)

STATUS_EVENTS = (
    "calendar_status",
    "calendar_parser_status",
    "classifier_status",
    "summary_status",
)


class State(TypedDict):
    now: datetime

    # Gateway call + parsing
    calendar_result: NotRequired[Any]
    meetings: NotRequired[List[Meeting]]
    parse_error: NotRequired[Optional[str]]

    # Classified / enriched output
    calendar_data: NotRequired[CalendarData]


class MeetingDigest:
    def __init__(
        self,
        env: Optional[Mapping[str, str]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        llm: Optional[BaseChatModel] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        MeetingDigest constructor.

        Args:
            env: Environment mapping for gateway credentials and options.
                Defaults to ``os.environ``.
            http_client: httpx client handed to each GatewayClient (tests inject
                one backed by httpx.MockTransport).
            llm: Chat model used for summaries. When omitted it is built from
                OPENAI_* settings, or summaries are skipped if no key is set.
            clock: Returns the reference instant for classification.
        """
        self.settings = Settings.from_env(env)
        self._env = env
        self._http_client = http_client
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        if llm is not None:
            self.enricher: Optional[SummaryEnricher] = SummaryEnricher(llm)
        else:
            self.enricher = SummaryEnricher.from_settings(self.settings)

    def _gateway(self) -> GatewayClient:
        """A fresh client per fetch; never shared between executions."""
        return GatewayClient(
            env=self._env,
            http_client=self._http_client,
            api_key_header=self.settings.mcp_api_key_header,
        )

    def _now(self) -> datetime:
        now = self._clock()
        return now if now.tzinfo else now.replace(tzinfo=timezone.utc)

    def tool_arguments(self, now: datetime) -> Dict[str, Any]:
        return {
            "calendar_id": "primary",
            "timeMin": to_iso(now - FETCH_WINDOW),
            "timeMax": to_iso(now + FETCH_WINDOW),
            "max_results": MAX_RESULTS,
            "single_events": True,
            "order_by": "startTime",
        }

    async def calendar_node(self, state: State, config: RunnableConfig):
        """
        LangGraph node: fetch raw events through the Composio gateway.

        Uses the tool path by default, or the natural-language prompt path
        when MCP_FETCH_MODE=prompt. Gateway errors propagate.
        """
        await adispatch_custom_event(
            "calendar_status", "Connecting to Google Calendar gateway...", config=config
        )

        client = self._gateway()
        try:
            await client.connect()

            if self.settings.fetch_mode == "prompt":
                result = await client.execute(EVENTS_PROMPT)
            else:
                action_name = self.settings.composio_action_name
                logger.info(f"Calling Composio action: {action_name}")
                result = await client.call_tool(action_name, self.tool_arguments(state["now"]))
        finally:
            await client.disconnect()

        return {"calendar_result": result}

    async def calendar_parser_node(self, state: State, config: RunnableConfig):
        """LangGraph node: normalize the gateway payload into meetings"""
        await adispatch_custom_event("calendar_parser_status", "Parsing calendar events...", config=config)

        parsed = normalize_events(state["calendar_result"], state["now"])
        if not parsed.ok:
            logger.warning(f"Calendar payload could not be parsed: {parsed.error}")

        return {"meetings": parsed.meetings, "parse_error": parsed.error}

    async def classifier_node(self, state: State, config: RunnableConfig):
        await adispatch_custom_event(
            "classifier_status", "Sorting upcoming and past meetings...", config=config
        )

        calendar_data = classify_meetings(state["meetings"], state["now"])
        logger.info(
            f"Classified {len(calendar_data.upcoming)} upcoming and {len(calendar_data.past)} past meetings"
        )
        return {"calendar_data": calendar_data}

    async def summary_node(self, state: State, config: RunnableConfig):
        """
        LangGraph node: attach AI summaries to the (already limited) past meetings.

        Failures are absorbed per meeting by SummaryEnricher.
        """
        calendar_data = state["calendar_data"]

        if self.enricher is None:
            await adispatch_custom_event(
                "summary_status", "AI summaries disabled (missing OPENAI_API_KEY)", config=config
            )
            return {"calendar_data": calendar_data}

        await adispatch_custom_event("summary_status", "Generating meeting summaries...", config=config)
        past = await self.enricher.enrich(calendar_data.past)

        return {"calendar_data": CalendarData(upcoming=calendar_data.upcoming, past=past)}

    def build_graph(self):
        """
        Build and compile the LangGraph execution graph.

        1. Fetch events from the gateway
        2. Normalize them into meetings
        3. Split into upcoming / past and limit each
        4. Summarize past meetings
        """
        graph_builder = StateGraph(State)

        graph_builder.add_node("Google Calendar Gateway", self.calendar_node)
        graph_builder.add_node("Calendar Parser", self.calendar_parser_node)
        graph_builder.add_node("Meeting Classifier", self.classifier_node)
        graph_builder.add_node("Meeting Summaries", self.summary_node)

        graph_builder.add_edge(START, "Google Calendar Gateway")
        graph_builder.add_edge("Google Calendar Gateway", "Calendar Parser")
        graph_builder.add_edge("Calendar Parser", "Meeting Classifier")
        graph_builder.add_edge("Meeting Classifier", "Meeting Summaries")
        graph_builder.add_edge("Meeting Summaries", END)

        return graph_builder.compile()

    async def fetch_calendar_data(self) -> CalendarData:
        now = self._now()

        if self.settings.use_mock_data:
            logger.info("Using mock calendar data for demonstration")
            return get_mock_calendar_data(now)

        graph = self.build_graph()
        final_state = await graph.ainvoke({"now": now})
        return final_state["calendar_data"]

    async def astream(self) -> AsyncIterator[Dict[str, Any]]:
        """
        Run the fetch and yield progress events.

        Yields ``{"type": <status event>, "content": str}`` per node, then a
        single ``{"type": "complete", "data": CalendarData}``.
        """
        now = self._now()

        if self.settings.use_mock_data:
            yield {"type": "complete", "data": get_mock_calendar_data(now)}
            return

        graph = self.build_graph()
        calendar_data: Optional[CalendarData] = None

        async for event in graph.astream_events({"now": now}, version="v2"):
            kind = event["event"]

            if kind == "on_custom_event" and event["name"] in STATUS_EVENTS:
                yield {"type": event["name"], "content": event["data"]}

            elif kind == "on_chain_end" and not event.get("parent_ids"):
                output = event["data"].get("output") or {}
                calendar_data = output.get("calendar_data")

        yield {"type": "complete", "data": calendar_data or CalendarData()}
