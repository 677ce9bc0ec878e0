"""State machine for the event detail modal."""
import enum
import logging
import threading
from typing import Optional

from client.events_api import EventsApiClient
from client.exceptions import EventsApiError, display_message
from processor.models import EventDetail

logger = logging.getLogger(__name__)

DEFAULT_DETAIL_ERROR = 'Unable to load event details'


class ModalState(enum.Enum):
    CLOSED = 'closed'
    OPENING = 'opening'
    OPEN_WITH_DATA = 'open_with_data'
    OPEN_WITH_ERROR = 'open_with_error'


class DetailModalController:
    """
    Tracks the detail modal: which event is shown, loading and error.

    Every ``open()`` takes a new request number and only the newest
    request may write its result, so a slow response for an earlier
    selection never replaces a later one. ``close()`` also invalidates
    whatever is in flight.
    """

    def __init__(self, client: EventsApiClient, auth_token: Optional[str]):
        self.client = client
        self.auth_token = auth_token

        self.state = ModalState.CLOSED
        self.selected_event: Optional[EventDetail] = None
        self.loading = False
        self.error: Optional[str] = None
        self.not_available = False
        self.failure: Optional[Exception] = None

        self._lock = threading.Lock()
        self._request_seq = 0

    @property
    def is_open(self) -> bool:
        return self.state is not ModalState.CLOSED

    def open(self, event_id: int) -> None:
        """
        Open the modal for ``event_id`` and fetch its detail.

        Does nothing when there is no auth token.
        """
        if not self.auth_token:
            logger.debug(f"Ignoring open({event_id}) without auth token")
            return

        with self._lock:
            self._request_seq += 1
            seq = self._request_seq
            self.state = ModalState.OPENING
            self.selected_event = None
            self.loading = True
            self.error = None
            self.not_available = False
            self.failure = None

        try:
            result = self.client.fetch_event_detail(self.auth_token, event_id)
        except EventsApiError as e:
            logger.warning(f"Detail fetch for event {event_id} failed: {e}")
            self._settle(seq, error=display_message(e, DEFAULT_DETAIL_ERROR), failure=e)
        except Exception as e:
            logger.error(
                f"Unexpected error loading event {event_id}: {e}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            self._settle(seq, error=display_message(e, DEFAULT_DETAIL_ERROR), failure=e)
        else:
            if result.detail is None:
                self._settle(seq, error=result.notice, not_available=True)
            else:
                self._settle(seq, detail=result.detail)

    def close(self) -> None:
        """Close the modal and clear selection and error."""
        with self._lock:
            self._request_seq += 1
            self.state = ModalState.CLOSED
            self.selected_event = None
            self.loading = False
            self.error = None
            self.not_available = False
            self.failure = None

    def _settle(self, seq: int, detail: Optional[EventDetail] = None,
                error: Optional[str] = None, not_available: bool = False,
                failure: Optional[Exception] = None) -> None:
        with self._lock:
            if seq != self._request_seq:
                logger.debug(f"Dropping stale detail response #{seq}")
                return

            self.loading = False
            if detail is not None:
                self.state = ModalState.OPEN_WITH_DATA
                self.selected_event = detail
            else:
                self.state = ModalState.OPEN_WITH_ERROR
                self.selected_event = None
                self.error = error or DEFAULT_DETAIL_ERROR
                self.not_available = not_available
                self.failure = failure
