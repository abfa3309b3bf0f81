"""Event subscribers: the activity log and the demo notifiers.

`ActivityRecorder` turns each domain event into a human-readable
`ActivityRecord` and stores it; the notifiers only log. A single event can
fan out to several of them (see `register_default_subscribers`).
"""
import datetime
import json
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Tuple

from .dto import ActivityRecord
from .errors import ConfigurationError
from .events import Event, EventBus, EventKind
from .logger import AppLogger


DEFAULT_ICON = '📝'


class Subscriber(Protocol):
    def handle(self, event: Event) -> None:
        ...


class ActivityStore(Protocol):
    def create_activity(self, record: ActivityRecord) -> ActivityRecord:
        ...


def _field(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    return '' if value is None else str(value)


# message formatter and icon for every event kind; payload keys are the ones
# command_handlers publishes
ACTIVITY_MESSAGES: Dict[EventKind, Tuple[Callable[[Mapping[str, Any]], str], str]] = {
    EventKind.POST_CREATED: (lambda p: f'New post created: "{_field(p, "title")}"', '✉️'),
    EventKind.POST_PUBLISHED: (lambda p: f'Post published: "{_field(p, "title")}"', '📊'),
    EventKind.POST_UPDATED: (lambda p: f'Post updated: "{_field(p, "title")}"', '✏️'),
    EventKind.POST_DELETED: (lambda p: f'Post deleted by {_field(p, "username") or "user"}', '🗑️'),
    EventKind.USER_REGISTERED: (lambda p: f'New user registered: {_field(p, "username")}', '👤'),
    EventKind.USER_LOGGED_IN: (lambda p: f'User logged in: {_field(p, "username")}', '🔐'),
}


def check_activity_table(table: Optional[Mapping[EventKind, Any]] = None):
    """Raise ConfigurationError unless every EventKind has a message entry."""
    table = ACTIVITY_MESSAGES if table is None else table
    missing = [k.value for k in EventKind if k not in table]
    if missing:
        raise ConfigurationError(f'No activity message for event kind(s): {", ".join(missing)}')


def describe(event: Event, table: Optional[Mapping[EventKind, Any]] = None) -> Tuple[str, str, bool]:
    """Return (message, icon, known) for an event."""
    table = ACTIVITY_MESSAGES if table is None else table
    entry = table.get(event.kind)
    if entry is None:
        return '', DEFAULT_ICON, False
    fmt, icon = entry
    return fmt(event.payload), icon, True


class ActivityRecorder:
    def __init__(self, store: ActivityStore, logger: Optional[AppLogger] = None,
                 table: Optional[Mapping[EventKind, Any]] = None):
        self.store = store
        self.logger = logger or AppLogger(__name__)
        self.table = ACTIVITY_MESSAGES if table is None else table

    def handle(self, event: Event) -> None:
        message, icon, known = describe(event, self.table)
        if not known:
            self.logger.warning(f'No activity message configured for {event.kind.value}')
        record = ActivityRecord(
            kind=event.kind.value,
            message=message,
            icon=icon,
            actor_id=event.payload.get('userId'),
            # the metadata column is JSON; datetimes, Decimals and UUIDs become strings
            metadata=json.loads(json.dumps(dict(event.payload), default=str)),
            timestamp=datetime.datetime.now(datetime.timezone.utc),
        )
        try:
            self.store.create_activity(record)
        except Exception as e:
            self.logger.error(f'Failed to log activity: {e}')
            return
        self.logger.info(f'Activity logged: {message}')


class EmailNotifier:
    """Demo notifier: logs what an email would contain."""

    def __init__(self, logger: Optional[AppLogger] = None):
        self.logger = logger or AppLogger(__name__)

    def handle(self, event: Event) -> None:
        self.logger.info(f'Email Notification: {event.kind.value} - {json.dumps(dict(event.payload), default=str)}')


class AnalyticsTracker:
    def __init__(self, logger: Optional[AppLogger] = None):
        self.logger = logger or AppLogger(__name__)

    def handle(self, event: Event) -> None:
        self.logger.info(f'Analytics: {event.kind.value} - {json.dumps(dict(event.payload), default=str)}')


def register_default_subscribers(bus: EventBus, store: ActivityStore, logger: Optional[AppLogger] = None) -> Dict[str, Any]:
    """Attach the standard subscribers to `bus` and return them by name."""
    check_activity_table()
    recorder = ActivityRecorder(store, logger)
    email = EmailNotifier(logger)
    analytics = AnalyticsTracker(logger)

    for kind in EventKind:
        bus.subscribe(kind, recorder)
    bus.subscribe(EventKind.POST_CREATED, email)
    bus.subscribe(EventKind.POST_PUBLISHED, analytics)
    return {'activity': recorder, 'email': email, 'analytics': analytics}
