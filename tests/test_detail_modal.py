"""Unit tests for DetailModalController."""
import threading
from datetime import datetime
from unittest.mock import Mock
from zoneinfo import ZoneInfo

import pytest
from requests.exceptions import Timeout

from client.events_api import EventDetailResult
from client.exceptions import (
    NOT_AVAILABLE_MESSAGE,
    HttpStatusError,
    InvalidCredentialError,
)
from dashboard.detail_modal import (
    DEFAULT_DETAIL_ERROR,
    DetailModalController,
    ModalState,
)
from processor.models import EventDetail

TZ = ZoneInfo('Asia/Ho_Chi_Minh')


def make_detail(event_id):
    return EventDetail(
        event_id=event_id,
        title=f"Event {event_id}",
        start_time=datetime(2024, 6, 12, 9, 0, tzinfo=TZ),
        status='OPEN',
        max_seats=30
    )


@pytest.fixture
def mock_client():
    return Mock()


class TestDetailModalController:
    """Test cases for DetailModalController class."""

    def test_initial_state(self, mock_client):
        modal = DetailModalController(mock_client, 'token')

        assert modal.state is ModalState.CLOSED
        assert not modal.is_open
        assert modal.selected_event is None
        assert modal.loading is False

    def test_open_success(self, mock_client):
        detail = make_detail(7)
        mock_client.fetch_event_detail.return_value = EventDetailResult(detail=detail)
        modal = DetailModalController(mock_client, 'token')

        modal.open(7)

        mock_client.fetch_event_detail.assert_called_once_with('token', 7)
        assert modal.state is ModalState.OPEN_WITH_DATA
        assert modal.is_open
        assert modal.selected_event == detail
        assert modal.error is None
        assert modal.loading is False

    def test_open_not_available(self, mock_client):
        """A retired event shows the informational message with no selection."""
        mock_client.fetch_event_detail.return_value = EventDetailResult(
            detail=None, notice=NOT_AVAILABLE_MESSAGE
        )
        modal = DetailModalController(mock_client, 'token')

        modal.open(99)

        assert modal.state is ModalState.OPEN_WITH_ERROR
        assert modal.error == NOT_AVAILABLE_MESSAGE
        assert modal.not_available is True
        assert modal.failure is None
        assert modal.selected_event is None
        assert modal.loading is False

    @pytest.mark.parametrize('error, expected', [
        (InvalidCredentialError(), 'Token is invalid or has expired'),
        (HttpStatusError(500), 'HTTP 500'),
        (Timeout('read timed out'), 'read timed out'),
        (Exception(''), DEFAULT_DETAIL_ERROR),
    ])
    def test_open_errors(self, mock_client, error, expected):
        mock_client.fetch_event_detail.side_effect = error
        modal = DetailModalController(mock_client, 'token')

        modal.open(1)

        assert modal.state is ModalState.OPEN_WITH_ERROR
        assert modal.error == expected
        assert modal.failure is error
        assert modal.not_available is False
        assert modal.selected_event is None
        assert modal.loading is False

    def test_open_without_token_does_nothing(self, mock_client):
        modal = DetailModalController(mock_client, None)

        modal.open(1)

        mock_client.fetch_event_detail.assert_not_called()
        assert modal.state is ModalState.CLOSED

    def test_reopen_clears_previous_selection_and_error(self, mock_client):
        mock_client.fetch_event_detail.side_effect = [
            HttpStatusError(500),
            EventDetailResult(detail=make_detail(2)),
        ]
        modal = DetailModalController(mock_client, 'token')

        modal.open(1)
        assert modal.error == 'HTTP 500'

        modal.open(2)
        assert modal.error is None
        assert modal.selected_event.event_id == 2

    def test_close_resets_everything(self, mock_client):
        mock_client.fetch_event_detail.return_value = EventDetailResult(detail=make_detail(3))
        modal = DetailModalController(mock_client, 'token')
        modal.open(3)

        modal.close()

        assert modal.state is ModalState.CLOSED
        assert modal.selected_event is None
        assert modal.error is None
        assert modal.failure is None
        assert modal.loading is False

    def test_close_when_already_closed(self, mock_client):
        modal = DetailModalController(mock_client, 'token')

        modal.close()

        assert modal.state is ModalState.CLOSED


class TestDetailModalStaleResponses:
    """A slow response for an earlier selection must not win."""

    def _blocking_client(self, slow_event_id):
        started = threading.Event()
        release = threading.Event()

        def fetch(token, event_id):
            if event_id == slow_event_id:
                started.set()
                release.wait(timeout=5)
            return EventDetailResult(detail=make_detail(event_id))

        client = Mock()
        client.fetch_event_detail.side_effect = fetch
        return client, started, release

    def test_earlier_response_arriving_late_is_dropped(self):
        client, started, release = self._blocking_client(slow_event_id=1)
        modal = DetailModalController(client, 'token')

        slow = threading.Thread(target=modal.open, args=(1,))
        slow.start()
        assert started.wait(timeout=5)

        modal.open(2)
        release.set()
        slow.join(timeout=5)

        assert modal.state is ModalState.OPEN_WITH_DATA
        assert modal.selected_event.event_id == 2
        assert modal.loading is False

    def test_response_after_close_is_dropped(self):
        client, started, release = self._blocking_client(slow_event_id=1)
        modal = DetailModalController(client, 'token')

        slow = threading.Thread(target=modal.open, args=(1,))
        slow.start()
        assert started.wait(timeout=5)

        modal.close()
        release.set()
        slow.join(timeout=5)

        assert modal.state is ModalState.CLOSED
        assert modal.selected_event is None
