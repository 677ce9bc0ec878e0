"""JSON view model for the dashboard page and the detail modal."""
from datetime import datetime, tzinfo
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup

from processor.event_categorizer import start_of_day, week_bounds
from processor.models import CategorizedEvents, EventDetail, EventListItem

ONLINE_LOCATION = 'Online'

EMPTY_TODAY = 'No events today'
EMPTY_THIS_WEEK = 'No more events this week'
EMPTY_UPCOMING = 'No events scheduled yet'


def format_event_time(moment: datetime, tz: tzinfo) -> str:
    """Format a start time as ``dd/MM/yyyy • Weekday • h:mm AM``."""
    local = moment.astimezone(tz) if moment.tzinfo else moment
    hour = local.hour % 12 or 12
    meridiem = 'AM' if local.hour < 12 else 'PM'
    return f"{local.strftime('%d/%m/%Y')} • {local.strftime('%A')} • {hour}:{local.minute:02d} {meridiem}"


def display_location(event: EventListItem) -> str:
    return event.venue_location or event.location or ONLINE_LOCATION


def plain_text(html: Optional[str]) -> str:
    """Strip markup from a rich-text description."""
    if not html:
        return ''
    soup = BeautifulSoup(html, 'html.parser')
    return soup.get_text(separator=' ', strip=True)


def build_card(event: EventListItem, tz: tzinfo, highlight: bool = False) -> Dict[str, Any]:
    return {
        'event_id': event.event_id,
        'title': event.title,
        'when': format_event_time(event.start_time, tz),
        'start_time': event.start_time.isoformat(),
        'location': display_location(event),
        'banner_url': event.banner_url,
        'highlight': highlight,
    }


def build_dashboard_view(categorized: CategorizedEvents, reference_date: datetime,
                         tz: tzinfo) -> Dict[str, Any]:
    """
    Build the dashboard sections from categorized events.

    Args:
        categorized: Buckets produced by EventCategorizer
        reference_date: Moment treated as "now"
        tz: Dashboard timezone

    Returns:
        Dict with ``sections`` (today, this_week, upcoming) and ``stats``
    """
    today = start_of_day(reference_date, tz)
    week_start, week_end = week_bounds(today)

    sections = {
        'today': {
            'heading': 'Today\'s events',
            'date_label': today.strftime('%d/%m'),
            'empty_message': EMPTY_TODAY,
            'cards': [build_card(e, tz, highlight=True) for e in categorized.today],
        },
        'this_week': {
            'heading': 'This week',
            'date_label': f"{week_start.strftime('%d/%m')} - {week_end.strftime('%d/%m')}",
            'empty_message': EMPTY_THIS_WEEK,
            'cards': [build_card(e, tz) for e in categorized.this_week],
        },
        'upcoming': {
            'heading': 'Register early for upcoming events',
            'date_label': None,
            'empty_message': EMPTY_UPCOMING,
            'cards': [build_card(e, tz) for e in categorized.upcoming],
        },
    }

    return {
        'sections': sections,
        'stats': {
            'today': len(categorized.today),
            'this_week': len(categorized.this_week),
            'upcoming': len(categorized.upcoming),
            'total': categorized.total,
        },
    }


def build_detail_view(detail: EventDetail, tz: tzinfo) -> Dict[str, Any]:
    """Build the detail modal body for one event."""
    view = build_card(detail, tz)
    view.update({
        'status': detail.status,
        'max_seats': detail.max_seats,
        'end_time': detail.end_time.isoformat() if detail.end_time else None,
        'description': plain_text(detail.description),
        'extra': detail.extra,
    })
    return view
