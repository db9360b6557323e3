"""Static demo calendar used when USE_MOCK_DATA=true"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from .models import CalendarData, Meeting
from .normalizer import to_iso

# (id, title, start offset hours, length hours, attendees, description, summary)
_UPCOMING = [
    ("mock-1", "Team Standup", 2, 0.5,
     ["john@company.com", "sarah@company.com", "mike@company.com"],
     "Daily team standup to discuss progress and blockers", None),
    ("mock-2", "Client Presentation", 24, 1,
     ["client@example.com", "you@company.com"],
     "Q4 roadmap presentation to client stakeholders", None),
    ("mock-3", "Sprint Planning", 48, 2,
     ["dev-team@company.com"],
     "Planning for the next 2-week sprint", None),
    ("mock-4", "1:1 with Manager", 72, 0.5,
     ["manager@company.com"],
     "Weekly one-on-one sync", None),
    ("mock-5", "Product Demo", 96, 0.75,
     ["product@company.com", "engineering@company.com"],
     "Demo of new features to product team", None),
]

_PAST = [
    ("mock-6", "Architecture Review", -2, 1,
     ["tech-leads@company.com", "architects@company.com"],
     "Review of microservices architecture proposal",
     "Discussed the proposed microservices architecture and identified potential scalability "
     "issues. Team agreed to prototype the solution before full implementation."),
    ("mock-7", "Customer Feedback Session", -24, 0.5,
     ["customer-success@company.com"],
     "Gathering feedback on recent product updates",
     "Collected valuable feedback on the new dashboard UI. Customers requested better export "
     "functionality and mobile responsiveness improvements."),
    ("mock-8", "Security Audit Meeting", -48, 1.5,
     ["security@company.com", "devops@company.com"],
     "Quarterly security audit and compliance review",
     "Completed Q4 security audit with minor findings. Action items assigned for updating "
     "dependencies and implementing additional logging for compliance."),
    ("mock-9", "Marketing Campaign Kickoff", -72, 1,
     ["marketing@company.com", "design@company.com"],
     "Launch planning for winter campaign",
     "Aligned on campaign timeline and creative direction. Design team to deliver mockups by "
     "end of week, with campaign launch scheduled for next month."),
    ("mock-10", "Bug Triage", -96, 0.5,
     ["qa@company.com", "dev-team@company.com"],
     "Weekly bug triage and prioritization",
     "Triaged 15 bugs, prioritized 3 critical issues for immediate fix. Remaining bugs "
     "scheduled for upcoming sprints based on severity."),
]


def _meeting(now: datetime, row) -> Meeting:
    meeting_id, title, offset, length, attendees, description, summary = row
    start = now + timedelta(hours=offset)
    return Meeting(
        id=meeting_id,
        title=title,
        start=to_iso(start),
        end=to_iso(start + timedelta(hours=length)),
        duration=round(length * 60),
        attendees=list(attendees),
        description=description,
        ai_summary=summary,
    )


def get_mock_calendar_data(now: Optional[datetime] = None) -> CalendarData:
    now = now or datetime.now(timezone.utc)
    return CalendarData(
        upcoming=[_meeting(now, row) for row in _UPCOMING],
        past=[_meeting(now, row) for row in _PAST],
    )
