"""AWS Lambda handler for the event dashboard API."""
import json
import logging
import os
import re
import time
from datetime import datetime
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from client.events_api import EventsApiClient
from client.exceptions import (
    NOT_SIGNED_IN_MESSAGE,
    InvalidCredentialError,
    UnauthenticatedError,
)
from dashboard.detail_modal import DetailModalController, ModalState
from dashboard.event_list import EventListController
from dashboard.view import build_dashboard_view, build_detail_view

DETAIL_PATH_PATTERN = re.compile(r'^/dashboard/events(?:/(?P<event_id>[^/]+))?/?$')

# Context keys copied from ``extra=`` into the JSON log line
LOG_CONTEXT_KEYS = (
    'route', 'event_id', 'error_type', 'duration_seconds',
    'events_today', 'events_this_week', 'events_upcoming',
)


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """JSON formatter for structured CloudWatch logs."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key in LOG_CONTEXT_KEYS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure the root logger with the JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def load_config() -> Dict[str, Any]:
    """Read handler configuration from environment variables."""
    return {
        'base_url': os.environ.get('EVENTS_API_BASE_URL', 'http://localhost:8080'),
        'log_level': os.environ.get('LOG_LEVEL', 'INFO'),
        'timeout_seconds': int(os.environ.get('TIMEOUT_SECONDS', '30')),
        'timezone': ZoneInfo(os.environ.get('DASHBOARD_TIMEZONE', 'Asia/Ho_Chi_Minh')),
    }


def extract_bearer_token(event: Dict[str, Any]) -> Optional[str]:
    """Pull the bearer token out of the request's Authorization header."""
    headers = event.get('headers') or {}
    for name, value in headers.items():
        if name.lower() == 'authorization' and value:
            scheme, _, token = value.partition(' ')
            if scheme.lower() == 'bearer' and token.strip():
                return token.strip()
    return None


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body, default=str)
    }


def _error_status(failure: Optional[Exception]) -> int:
    """Map a controller failure to the status returned to the browser."""
    if isinstance(failure, (UnauthenticatedError, InvalidCredentialError)):
        return 401
    return 502


def _requested_event_id(event: Dict[str, Any], path: str) -> Optional[str]:
    """
    Event id for a detail request, or None when the path is not a detail route.

    Accepts ``/dashboard/events/{id}``, or ``/dashboard/events`` with the id
    in ``pathParameters`` or the ``?id=`` query string.
    """
    match = DETAIL_PATH_PATTERN.match(path)
    if not match:
        return None
    if match.group('event_id'):
        return match.group('event_id')

    for source in ('pathParameters', 'queryStringParameters'):
        params = event.get(source) or {}
        if params.get('id'):
            return params['id']
    return None


def handle_dashboard(client: EventsApiClient, token: Optional[str], config: Dict[str, Any]) -> Dict[str, Any]:
    """Load the event list and render the three dashboard sections."""
    logger = logging.getLogger(__name__)
    tz = config['timezone']

    controller = EventListController(client, token)
    controller.load()

    if controller.error:
        return _response(_error_status(controller.failure), {
            'message': 'Failed to load events',
            'error': controller.error
        })

    now = datetime.now(tz)
    categorized = controller.categorized(now)
    view = build_dashboard_view(categorized, now, tz)

    logger.info(
        "Dashboard rendered",
        extra={
            'events_today': len(categorized.today),
            'events_this_week': len(categorized.this_week),
            'events_upcoming': len(categorized.upcoming)
        }
    )

    view['notice'] = controller.notice
    return _response(200, view)


def handle_event_detail(client: EventsApiClient, token: Optional[str], raw_event_id: str,
                        config: Dict[str, Any]) -> Dict[str, Any]:
    """Open the detail modal for one event and render its body."""
    try:
        event_id = int(raw_event_id)
    except (TypeError, ValueError):
        return _response(400, {'message': 'Invalid event id', 'error': str(raw_event_id)})

    if not token:
        return _response(401, {'message': 'Failed to load event', 'error': NOT_SIGNED_IN_MESSAGE})

    modal = DetailModalController(client, token)
    modal.open(event_id)

    if modal.state is ModalState.OPEN_WITH_DATA:
        return _response(200, {'event': build_detail_view(modal.selected_event, config['timezone'])})

    if modal.not_available:
        return _response(200, {'event': None, 'notice': modal.error})

    return _response(_error_status(modal.failure), {
        'message': 'Failed to load event',
        'error': modal.error
    })


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler for the dashboard API.

    Args:
        event: API Gateway proxy event
        context: Lambda context object

    Returns:
        API Gateway proxy response
    """
    config = load_config()

    setup_logging(config['log_level'])
    logger = logging.getLogger(__name__)

    start_time = time.time()
    path = event.get('rawPath') or event.get('path') or '/dashboard'
    logger.info("Request started", extra={'route': path})

    try:
        client = EventsApiClient(
            base_url=config['base_url'],
            tz=config['timezone'],
            timeout=config['timeout_seconds']
        )
        token = extract_bearer_token(event)

        if path.rstrip('/') == '/dashboard':
            response = handle_dashboard(client, token, config)
        else:
            event_id = _requested_event_id(event, path)
            if event_id is None:
                response = _response(404, {'message': f"Unknown route: {path}"})
            else:
                response = handle_event_detail(client, token, event_id, config)

        logger.info(
            f"Request completed with status {response['statusCode']}",
            extra={'route': path, 'duration_seconds': round(time.time() - start_time, 2)}
        )
        return response

    except Exception as e:
        duration = time.time() - start_time
        logger.error(
            f"Request failed: {str(e)}",
            extra={
                'route': path,
                'duration_seconds': round(duration, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return _response(500, {
            'message': 'Request failed',
            'error': str(e),
            'error_type': type(e).__name__
        })
