"""Extract a creation-date range from a todo chat question.

Used only when the question contains date-like language. The model gets
the current UTC time and returns the window the question refers to, or
says no filtering is needed ("what did I change recently?" style noise).
"""

from datetime import datetime, time, timezone
from typing import Optional

from dateutil import parser as dateutil_parser
from pydantic import BaseModel

from app.core.config import get_settings
from app.core.llm import get_llm, parse_llm_json
from app.core.logging import get_logger
from app.core.schemas_chat import DateRange

logger = get_logger(__name__)


class DateRangeParseError(Exception):
    """The model's answer could not be turned into a date range."""


class DateRangeOutput(BaseModel):
    needsFiltering: bool = True
    startDate: Optional[str] = None
    endDate: Optional[str] = None


SYSTEM_PROMPT = """You extract date ranges from questions about a todo list.

The current date and time is {now} (UTC, {weekday}).

Return the creation-date window the question refers to, in UTC.
- "today" is {today}T00:00:00Z to {today}T23:59:59Z
- "yesterday", "last week", "this month", "3 days ago", weekday and month names
  resolve relative to the current date
- A single day spans 00:00:00 to 23:59:59
- If the question does not restrict todos by date, set needsFiltering to false

Output valid JSON only:
{{"needsFiltering": true, "startDate": "YYYY-MM-DDTHH:MM:SSZ", "endDate": "YYYY-MM-DDTHH:MM:SSZ"}}
or
{{"needsFiltering": false}}"""


def _is_date_only(value: str) -> bool:
    return "T" not in value and ":" not in value


def _to_bound(value: str, end_of_day: bool) -> datetime:
    parsed = dateutil_parser.isoparse(value.strip())
    if _is_date_only(value.strip()):
        parsed = datetime.combine(
            parsed.date(),
            time(23, 59, 59) if end_of_day else time(0, 0, 0),
        )
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize_date_range(output: DateRangeOutput) -> Optional[DateRange]:
    """
    Turn the model output into a UTC DateRange.

    Date-only bounds are widened to whole days. Returns None when no
    filtering is needed.

    Raises:
        DateRangeParseError: If filtering is requested but bounds are missing or invalid
    """
    if not output.needsFiltering:
        return None
    if not output.startDate or not output.endDate:
        raise DateRangeParseError("Date range is missing startDate or endDate")

    try:
        start = _to_bound(output.startDate, end_of_day=False)
        end = _to_bound(output.endDate, end_of_day=True)
    except (ValueError, OverflowError) as e:
        raise DateRangeParseError(f"Invalid date in range: {e}") from e

    if end < start:
        start, end = end, start
    return DateRange(start=start, end=end)


async def parse_date_range(query: str, now: datetime) -> Optional[DateRange]:
    """
    Ask the model which creation-date window a question is about.

    Args:
        query: The chat question
        now: Current time (UTC)

    Returns:
        DateRange, or None when the question needs no date filtering

    Raises:
        DateRangeParseError: If the call fails or the answer can't be parsed
    """
    settings = get_settings()
    now_utc = now.astimezone(timezone.utc) if now.tzinfo else now.replace(tzinfo=timezone.utc)

    llm = get_llm(model=settings.DATE_PARSER_MODEL, temperature=0)
    messages = [
        {
            "role": "system",
            "content": SYSTEM_PROMPT.format(
                now=now_utc.strftime("%Y-%m-%dT%H:%M:%SZ"),
                weekday=now_utc.strftime("%A"),
                today=now_utc.strftime("%Y-%m-%d"),
            ),
        },
        {"role": "user", "content": query},
    ]

    try:
        response = await llm.ainvoke(messages)
        output = parse_llm_json(str(response.content), DateRangeOutput)
    except Exception as e:
        logger.warning(f"Date range extraction failed: {e}")
        raise DateRangeParseError(str(e)) from e

    date_range = normalize_date_range(output)
    if date_range:
        logger.debug(f"Date range for query: {date_range.start} -> {date_range.end}")
    return date_range
