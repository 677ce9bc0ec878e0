"""Event list state for the dashboard."""
import logging
import threading
from datetime import datetime
from typing import List, Optional

from client.events_api import EventsApiClient
from client.exceptions import EventsApiError, UnauthenticatedError, display_message
from processor.event_categorizer import EventCategorizer
from processor.models import CategorizedEvents, EventListItem

logger = logging.getLogger(__name__)

DEFAULT_LIST_ERROR = 'Unable to load the event list'


class EventListController:
    """Owns the event list, its loading flag, error and notice."""

    def __init__(self, client: EventsApiClient, auth_token: Optional[str],
                 categorizer: Optional[EventCategorizer] = None):
        self.client = client
        self.auth_token = auth_token
        self.categorizer = categorizer or EventCategorizer(client.tz)

        self.events: List[EventListItem] = []
        self.loading = False
        self.error: Optional[str] = None
        self.notice: Optional[str] = None
        self.failure: Optional[Exception] = None

        self._lock = threading.Lock()
        self._request_seq = 0

    def load(self) -> None:
        """
        Fetch the event list and store the outcome.

        Failures are converted to a display string in ``error``; a 404 sets
        ``notice`` and empties the list. A response from a superseded
        ``load()`` is discarded.
        """
        if not self.auth_token:
            with self._lock:
                self._request_seq += 1
                self.failure = UnauthenticatedError()
                self.error = str(self.failure)
                self.loading = False
            return

        with self._lock:
            self._request_seq += 1
            seq = self._request_seq
            self.loading = True
            self.error = None
            self.notice = None
            self.failure = None

        try:
            result = self.client.fetch_events(self.auth_token)
        except EventsApiError as e:
            logger.warning(f"Event list fetch failed: {e}")
            self._settle(seq, error=display_message(e, DEFAULT_LIST_ERROR), failure=e)
        except Exception as e:
            logger.error(
                f"Unexpected error loading events: {e}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            self._settle(seq, error=display_message(e, DEFAULT_LIST_ERROR), failure=e)
        else:
            self._settle(seq, events=result.events, notice=result.notice)

    def categorized(self, reference_date: datetime) -> CategorizedEvents:
        """Bucket the current events relative to ``reference_date``."""
        return self.categorizer.categorize(self.events, reference_date)

    def _settle(self, seq: int, events: Optional[List[EventListItem]] = None,
                notice: Optional[str] = None, error: Optional[str] = None,
                failure: Optional[Exception] = None) -> None:
        with self._lock:
            if seq != self._request_seq:
                logger.debug(f"Dropping stale event list response #{seq}")
                return

            if error is None:
                self.events = list(events or [])
                self.notice = notice
            self.error = error
            self.failure = failure
            self.loading = False
