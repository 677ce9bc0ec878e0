"""Data models for dashboard events."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class EventStatus:
    """Event status values reported by the events API."""
    OPEN = 'OPEN'
    CLOSED = 'CLOSED'


@dataclass(frozen=True)
class EventListItem:
    """Event summary as returned by the event list endpoint."""
    event_id: int
    title: str
    start_time: datetime
    status: str
    max_seats: int = 0
    banner_url: Optional[str] = None
    venue_location: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class EventDetail(EventListItem):
    """Full event record fetched for the detail modal."""
    end_time: Optional[datetime] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CategorizedEvents:
    """Events bucketed by start date, each bucket ordered by start time."""
    today: tuple = ()
    this_week: tuple = ()
    upcoming: tuple = ()

    @property
    def total(self) -> int:
        return len(self.today) + len(self.this_week) + len(self.upcoming)


_LIST_FIELDS = {
    'eventId', 'title', 'startTime', 'status', 'maxSeats',
    'bannerUrl', 'venueLocation', 'location', 'description',
}


def parse_timestamp(value: Any, tz: tzinfo) -> Optional[datetime]:
    """
    Parse an API timestamp into an aware datetime in ``tz``.

    Naive timestamps are taken to be local to ``tz``.

    Returns:
        Aware datetime or None if the value cannot be parsed
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=tz)
    return parsed.astimezone(tz)


def _list_item_kwargs(record: Dict[str, Any], tz: tzinfo) -> Optional[Dict[str, Any]]:
    start_time = parse_timestamp(record.get('startTime'), tz)
    if start_time is None:
        logger.warning(
            f"Invalid startTime for event {record.get('eventId')!r}: "
            f"{record.get('startTime')!r}"
        )
        return None

    try:
        event_id = int(record['eventId'])
        max_seats = max(int(record.get('maxSeats') or 0), 0)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Skipping event with invalid identifier or seats: {e}")
        return None

    return {
        'event_id': event_id,
        'title': str(record.get('title') or ''),
        'start_time': start_time,
        'status': str(record.get('status') or ''),
        'max_seats': max_seats,
        'banner_url': record.get('bannerUrl') or None,
        'venue_location': record.get('venueLocation') or None,
        'location': record.get('location') or None,
        'description': record.get('description') or None,
    }


def event_from_record(record: Any, tz: tzinfo) -> Optional[EventListItem]:
    """
    Build an EventListItem from an event list JSON record.

    Args:
        record: Decoded JSON object for one event
        tz: Dashboard timezone used for naive timestamps

    Returns:
        EventListItem or None if the record is unusable
    """
    if not isinstance(record, dict):
        logger.warning(f"Skipping non-object event record: {record!r}")
        return None

    kwargs = _list_item_kwargs(record, tz)
    if kwargs is None:
        return None
    return EventListItem(**kwargs)


def detail_from_record(record: Any, tz: tzinfo) -> Optional[EventDetail]:
    """Build an EventDetail from the detail endpoint's JSON body."""
    if not isinstance(record, dict):
        logger.warning(f"Event detail body is not an object: {record!r}")
        return None

    kwargs = _list_item_kwargs(record, tz)
    if kwargs is None:
        return None

    extra = {
        key: value for key, value in record.items()
        if key not in _LIST_FIELDS and key != 'endTime'
    }
    return EventDetail(
        end_time=parse_timestamp(record.get('endTime'), tz),
        extra=extra,
        **kwargs
    )
