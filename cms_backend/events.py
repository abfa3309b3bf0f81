"""Lightweight in-process event bus for domain events.

Command handlers publish an event after a successful write; subscribers
(activity log, notifiers) react to it. Delivery is synchronous and in
registration order, and a failing subscriber never stops the fan-out.
"""
import enum
import types
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .logger import AppLogger


class EventKind(str, enum.Enum):
    POST_CREATED = 'post_created'
    POST_PUBLISHED = 'post_published'
    POST_UPDATED = 'post_updated'
    POST_DELETED = 'post_deleted'
    USER_REGISTERED = 'user_registered'
    USER_LOGGED_IN = 'user_logged_in'

    @classmethod
    def parse(cls, value: Union['EventKind', str]) -> 'EventKind':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f'Unknown event kind: {value!r}')


@dataclass(frozen=True)
class Event:
    kind: EventKind
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # freeze a private copy so subscribers cannot alter what others see
        object.__setattr__(self, 'payload', types.MappingProxyType(dict(self.payload or {})))


class EventBus:
    def __init__(self, logger: Optional[AppLogger] = None):
        self._subs: Dict[EventKind, List[Any]] = defaultdict(list)
        self._logger = logger or AppLogger(__name__)

    def subscribe(self, kind: Union[EventKind, str], subscriber: Any):
        """Register `subscriber` (anything with `handle(event)`) for `kind`.

        Registering the same subscriber twice delivers each event to it twice.
        """
        self._subs[EventKind.parse(kind)].append(subscriber)

    def unsubscribe(self, kind: Union[EventKind, str], subscriber: Any):
        """Remove every registration of this exact subscriber object for `kind`.

        An unknown kind has nothing registered, so this is a no-op.
        """
        try:
            kind = EventKind.parse(kind)
        except ValueError:
            return
        if kind not in self._subs:
            return
        self._subs[kind] = [s for s in self._subs[kind] if s is not subscriber]

    def subscribers(self, kind: Union[EventKind, str]) -> Tuple[Any, ...]:
        return tuple(self._subs.get(EventKind.parse(kind), ()))

    def publish(self, kind: Union[EventKind, str], payload: Optional[Mapping[str, Any]] = None) -> int:
        """Deliver an event to all subscribers of `kind` and return how many succeeded.

        Subscribers run synchronously in registration order. An exception in
        one subscriber is logged and the remaining subscribers still run.
        """
        event = Event(EventKind.parse(kind), payload or {})
        handlers = list(self._subs.get(event.kind, ()))
        delivered = 0
        for h in handlers:
            try:
                h.handle(event)
                delivered += 1
            except Exception as e:
                self._logger.exception(f'[EventBus] subscriber {type(h).__name__} failed for {event.kind.value}: {e}')
        return delivered
