from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Meeting(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = "No Title"
    start: str
    end: str
    duration: int = 0  # minutes
    attendees: List[str] = Field(default_factory=list)
    description: str = ""
    # Only set on past meetings once enrichment has run
    ai_summary: Optional[str] = Field(default=None, alias="aiSummary")

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class CalendarData(BaseModel):
    upcoming: List[Meeting] = Field(default_factory=list)
    past: List[Meeting] = Field(default_factory=list)

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class NormalizedEvents(BaseModel):
    """Outcome of normalizing a gateway payload; failure is a value, not an exception"""

    meetings: List[Meeting] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
