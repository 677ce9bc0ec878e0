"""Event categorizer for grouping dashboard events by start date."""
import logging
from collections.abc import Sequence
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, List, Optional, Tuple

from processor.models import CategorizedEvents, EventListItem, EventStatus

logger = logging.getLogger(__name__)


def start_of_day(moment: datetime, tz: tzinfo) -> date:
    """
    Truncate a timestamp to its calendar day in the dashboard timezone.

    Naive timestamps are taken to be local to ``tz``.
    """
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


def week_bounds(day: date) -> Tuple[date, date]:
    """
    Get the Monday and Sunday of the week containing ``day``.

    Returns:
        Tuple of (week_start, week_end), both inclusive
    """
    week_start = day - timedelta(days=day.weekday())
    return week_start, week_start + timedelta(days=6)


class EventCategorizer:
    """Splits OPEN events into today / this week / upcoming buckets."""

    def __init__(self, tz: tzinfo):
        """
        Initialize the categorizer.

        Args:
            tz: Timezone that defines calendar days for the dashboard
        """
        self.tz = tz
        self._cached_events: Optional[Any] = None
        self._cached_day: Optional[date] = None
        self._cached_result: Optional[CategorizedEvents] = None

    def categorize(self, events: Any, reference_date: datetime) -> CategorizedEvents:
        """
        Partition events into three buckets by start date.

        Only OPEN events starting today or later are kept. Each bucket is
        sorted ascending by start time; ties keep their input order.

        Args:
            events: Sequence of EventListItem; anything else counts as empty
            reference_date: Moment treated as "now"

        Returns:
            CategorizedEvents for the reference day
        """
        today = start_of_day(reference_date, self.tz)

        if (
            self._cached_result is not None
            and events is self._cached_events
            and today == self._cached_day
        ):
            return self._cached_result

        result = self._categorize(events, today)

        self._cached_events = events
        self._cached_day = today
        self._cached_result = result
        return result

    def _categorize(self, events: Any, today: date) -> CategorizedEvents:
        if isinstance(events, (str, bytes)) or not isinstance(events, Sequence):
            if events is not None:
                logger.warning(
                    f"Expected a list of events, got {type(events).__name__}"
                )
            events = ()

        _, week_end = week_bounds(today)
        today_bucket: List[EventListItem] = []
        week_bucket: List[EventListItem] = []
        upcoming_bucket: List[EventListItem] = []

        for event in events:
            if event.status != EventStatus.OPEN:
                continue

            event_day = start_of_day(event.start_time, self.tz)
            if event_day < today:
                continue

            # Day equality first so today's events never land in this_week
            if event_day == today:
                today_bucket.append(event)
            elif event_day <= week_end:
                week_bucket.append(event)
            else:
                upcoming_bucket.append(event)

        logger.debug(
            f"Categorized {len(events)} events for {today.isoformat()}: "
            f"{len(today_bucket)} today, {len(week_bucket)} this week, "
            f"{len(upcoming_bucket)} upcoming"
        )

        return CategorizedEvents(
            today=self._sorted(today_bucket),
            this_week=self._sorted(week_bucket),
            upcoming=self._sorted(upcoming_bucket),
        )

    def _sorted(self, bucket: List[EventListItem]) -> tuple:
        return tuple(sorted(bucket, key=lambda event: self._sort_key(event.start_time)))

    def _sort_key(self, moment: datetime) -> datetime:
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.tz)
        return moment
