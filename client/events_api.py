"""Client for the event management REST API."""
import logging
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any, List, Optional

import requests

from client.exceptions import (
    NOT_AVAILABLE_MESSAGE,
    HttpStatusError,
    InvalidCredentialError,
    UnauthenticatedError,
)
from processor.models import (
    EventDetail,
    EventListItem,
    detail_from_record,
    event_from_record,
)

logger = logging.getLogger(__name__)


@dataclass
class EventListResult:
    """Outcome of an event list fetch."""
    events: List[EventListItem] = field(default_factory=list)
    notice: Optional[str] = None


@dataclass
class EventDetailResult:
    """Outcome of an event detail fetch."""
    detail: Optional[EventDetail] = None
    notice: Optional[str] = None


class EventsApiClient:
    """Authenticated reader for the event list and event detail endpoints."""

    EVENTS_PATH = '/api/events'
    DETAIL_PATH = '/api/events/detail'

    def __init__(self, base_url: str, tz: tzinfo, timeout: int = 30,
                 session: Optional[requests.Session] = None):
        """
        Initialize the API client.

        Args:
            base_url: Root URL of the events API (no trailing path)
            tz: Dashboard timezone for naive timestamps
            timeout: HTTP request timeout in seconds (default: 30)
            session: Optional requests session to reuse connections
        """
        self.base_url = base_url.rstrip('/')
        self.tz = tz
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_events(self, auth_token: Optional[str]) -> EventListResult:
        """
        Fetch the event list visible to the token holder.

        Args:
            auth_token: Bearer token of the signed in user

        Returns:
            EventListResult; a 404 yields no events and a notice

        Raises:
            UnauthenticatedError: If no token is given (no request is made)
            InvalidCredentialError: On HTTP 401
            HttpStatusError: On any other non-2xx status
            requests.RequestException: On transport failures
        """
        response = self._get(self.EVENTS_PATH, auth_token)

        if response.status_code == 404:
            logger.info("Event list endpoint returned 404, no events available yet")
            return EventListResult(events=[], notice=NOT_AVAILABLE_MESSAGE)

        records = self._normalize_event_list(response.json())
        events = []
        for record in records:
            event = event_from_record(record, self.tz)
            if event:
                events.append(event)

        logger.info(f"Fetched {len(events)} events ({len(records)} records)")
        return EventListResult(events=events)

    def fetch_event_detail(self, auth_token: Optional[str], event_id: int) -> EventDetailResult:
        """
        Fetch the full record of one event.

        Args:
            auth_token: Bearer token of the signed in user
            event_id: Identifier of the event

        Returns:
            EventDetailResult; a 404 yields no detail and a notice

        Raises:
            Same as fetch_events
        """
        response = self._get(self.DETAIL_PATH, auth_token, params={'id': event_id})

        if response.status_code == 404:
            logger.info(f"Event {event_id} is not available (404)")
            return EventDetailResult(detail=None, notice=NOT_AVAILABLE_MESSAGE)

        detail = detail_from_record(response.json(), self.tz)
        if detail is None:
            raise ValueError(f"Malformed detail record for event {event_id}")
        return EventDetailResult(detail=detail)

    def _get(self, path: str, auth_token: Optional[str], params: Optional[dict] = None) -> requests.Response:
        """
        Issue an authenticated GET and apply the shared status policy.

        404 responses are returned to the caller; every other failure
        status raises.
        """
        if not auth_token:
            logger.warning(f"No auth token, skipping request to {path}")
            raise UnauthenticatedError()

        response = self.session.get(
            f"{self.base_url}{path}",
            params=params,
            headers={
                'Content-Type': 'application/json',
                'Authorization': f"Bearer {auth_token}",
            },
            timeout=self.timeout
        )

        if response.ok or response.status_code == 404:
            return response

        if response.status_code == 401:
            logger.warning(f"Token rejected by {path} (401)")
            raise InvalidCredentialError()

        logger.error(f"Request to {path} failed with HTTP {response.status_code}")
        raise HttpStatusError(response.status_code)

    @staticmethod
    def _normalize_event_list(data: Any) -> list:
        """
        Flatten the event list body into one list of records.

        Accepts either a JSON array or an object with ``openEvents`` and
        ``closedEvents`` arrays (open first).
        """
        if isinstance(data, list):
            return data

        if isinstance(data, dict):
            open_events = data.get('openEvents')
            closed_events = data.get('closedEvents')
            return (
                (open_events if isinstance(open_events, list) else [])
                + (closed_events if isinstance(closed_events, list) else [])
            )

        logger.warning(f"Unexpected event list body type: {type(data).__name__}")
        return []
