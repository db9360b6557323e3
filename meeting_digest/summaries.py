import asyncio
import logging
from typing import List, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from .config import Settings
from .models import Meeting

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful assistant that summarizes meetings. Provide concise, professional summaries."

NO_SUMMARY = "No summary available"
SUMMARY_UNAVAILABLE = "AI summary unavailable"

MAX_TOKENS = 100
TEMPERATURE = 0.7


def build_prompt(meeting: Meeting) -> str:
    attendees = ", ".join(meeting.attendees) or "No attendees listed"
    description = f"Description: {meeting.description}" if meeting.description else ""

    return (
        "Generate a brief, professional summary for this past meeting:\n"
        f"Title: {meeting.title}\n"
        f"Duration: {meeting.duration} minutes\n"
        f"Attendees: {attendees}\n"
        f"{description}\n"
        "\n"
        "Provide a 1-2 sentence summary that captures the likely purpose and outcome of this meeting."
    )


class SummaryEnricher:
    def __init__(self, llm: BaseChatModel):
        self.llm = llm

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["SummaryEnricher"]:
        """
        Build an enricher backed by an OpenAI-compatible chat model.

        Returns None when no completion API key is configured, in which case
        past meetings are returned without summaries.
        """
        if not settings.openai_api_key:
            return None

        llm = ChatOpenAI(
            model=settings.openai_model,
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            max_tokens=MAX_TOKENS,
            temperature=TEMPERATURE,
        )
        return cls(llm)

    async def generate_summary(self, meeting: Meeting) -> str:
        """Ask the model for a summary. Errors propagate to the caller."""
        response = await self.llm.ainvoke(
            [
                SystemMessage(content=SYSTEM_PROMPT),
                HumanMessage(content=build_prompt(meeting)),
            ]
        )
        content = response.content if isinstance(response.content, str) else ""
        return content.strip() or NO_SUMMARY

    async def summarize(self, meeting: Meeting) -> str:
        try:
            return await self.generate_summary(meeting)
        except Exception as e:
            logger.error(f"Failed to generate AI summary for {meeting.id!r}: {e}")
            return SUMMARY_UNAVAILABLE

    async def enrich(self, meetings: List[Meeting]) -> List[Meeting]:
        """Attach ai_summary to every meeting; all calls run concurrently."""
        summaries = await asyncio.gather(*(self.summarize(m) for m in meetings))
        for meeting, summary in zip(meetings, summaries):
            meeting.ai_summary = summary

        logger.info(f"Generated summaries for {len(meetings)} past meetings")
        return meetings
