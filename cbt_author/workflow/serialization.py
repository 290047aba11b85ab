"""Conversions at the boundary between form values and request bodies."""

from datetime import datetime, timezone, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo

from cbt_author.models.exam import (
    ExamPaper,
    ExamSession,
    PresentationType,
    Question,
    QuestionType,
    format_utc,
)

DATETIME_LOCAL_FORMAT = "%Y-%m-%dT%H:%M"
_DATETIME_LOCAL_INPUT_FORMATS = (DATETIME_LOCAL_FORMAT, "%Y-%m-%dT%H:%M:%S")

# Sent for papers that have no per-question timer; ignored by the service
TIME_PER_QUESTION_PLACEHOLDER = 1


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Look up an IANA zone name. None means the system zone."""
    return ZoneInfo(name) if name else None


def parse_local_input(value: str, tz: Optional[tzinfo] = None) -> datetime:
    """
    Read a datetime-local value (``YYYY-MM-DDTHH:MM``) as wall-clock time.

    Args:
        value: The value as typed into the form
        tz: Zone the wall clock belongs to; the system zone when omitted

    Returns:
        Aware datetime in UTC

    Raises:
        ValueError: If the value is not a datetime-local string
    """
    text = value.strip()
    for fmt in _DATETIME_LOCAL_INPUT_FORMATS:
        try:
            naive = datetime.strptime(text, fmt)
            break
        except ValueError:
            continue
    else:
        raise ValueError(f"{value!r} is not a date and time like 2025-06-01T09:00")

    if tz is None:
        # Naive astimezone() interprets the value in the system zone, DST included
        return naive.astimezone(timezone.utc)
    return naive.replace(tzinfo=tz).astimezone(timezone.utc)


def to_utc_iso(value: str, tz: Optional[tzinfo] = None) -> str:
    """Convert a datetime-local value to the UTC timestamp the service stores."""
    return format_utc(parse_local_input(value, tz))


def utc_iso_to_local_input(value: str, tz: Optional[tzinfo] = None) -> str:
    """Turn a UTC timestamp from the service back into a datetime-local value."""
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    local = moment.astimezone(tz) if tz is not None else moment.astimezone()
    return local.strftime(DATETIME_LOCAL_FORMAT)


def apply_time_per_question_placeholder(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Compatibility shim for the paper endpoint.

    The service validates ``defaultTimePerQuestionInMinutes`` on every paper,
    even when the presentation type has no per-question timer. For those
    papers a valid placeholder is sent in place of whatever the form holds.
    This is the only place that knows about the workaround.
    """
    if payload.get("presentationType") != PresentationType.QUESTION_PREVIEW:
        payload["defaultTimePerQuestionInMinutes"] = TIME_PER_QUESTION_PLACEHOLDER
    return payload


def serialize_session(session: ExamSession) -> dict[str, Any]:
    """Request body for creating an exam session."""
    return session.model_dump(mode="json", by_alias=True, exclude={"id"})


def serialize_paper(paper: ExamPaper) -> dict[str, Any]:
    """Request body for adding a paper."""
    payload = paper.model_dump(mode="json", by_alias=True, exclude={"id"})
    return apply_time_per_question_placeholder(payload)


def serialize_question(question: Question, presentation_type: PresentationType) -> dict[str, Any]:
    """
    Request body for adding a question.

    Options are always present: the real text for multiple choice, empty
    strings otherwise. ``timeInMinutes`` is only sent when the parent paper
    times each question.
    """
    payload = question.model_dump(
        mode="json", by_alias=True, exclude={"id", "time_in_minutes"}
    )
    if question.question_type != QuestionType.MULTIPLE_CHOICE:
        for key in ("optionA", "optionB", "optionC", "optionD"):
            payload[key] = ""
    if presentation_type == PresentationType.QUESTION_PREVIEW:
        payload["timeInMinutes"] = question.time_in_minutes
    return payload
