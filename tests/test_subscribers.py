import datetime
import decimal
import uuid

import pytest

from cms_backend.errors import ConfigurationError
from cms_backend.events import Event, EventBus, EventKind
from cms_backend.logger import AppLogger
from cms_backend.subscribers import (
    ACTIVITY_MESSAGES,
    DEFAULT_ICON,
    ActivityRecorder,
    AnalyticsTracker,
    EmailNotifier,
    check_activity_table,
    register_default_subscribers,
)


class MemoryStore:
    def __init__(self):
        self.records = []

    def create_activity(self, record):
        self.records.append(record)
        return record


class BrokenStore:
    def create_activity(self, record):
        raise IOError('database is down')


def test_post_created_produces_one_record(repo):
    bus = EventBus()
    register_default_subscribers(bus, repo, AppLogger('test'))

    bus.publish(EventKind.POST_CREATED, {'postId': 7, 'title': 'Hello', 'userId': None})

    records = repo.find_activities(limit=10)
    assert len(records) == 1
    assert records[0].kind == 'post_created'
    assert 'Hello' in records[0].message
    assert records[0].icon == ACTIVITY_MESSAGES[EventKind.POST_CREATED][1]
    assert records[0].metadata['postId'] == 7


def test_payload_values_outside_json_are_stored_as_strings(repo):
    bus = EventBus()
    register_default_subscribers(bus, repo, AppLogger('test'))
    when = datetime.datetime(2024, 5, 1, 12, 30, tzinfo=datetime.timezone.utc)
    ref = uuid.uuid4()

    bus.publish(EventKind.POST_CREATED, {'title': 'x', 'when': when, 'price': decimal.Decimal('9.99'), 'ref': ref})

    records = repo.find_activities(limit=10)
    assert len(records) == 1
    assert records[0].metadata['when'] == str(when)
    assert records[0].metadata['price'] == '9.99'
    assert records[0].metadata['ref'] == str(ref)


@pytest.mark.parametrize('kind,payload,expected', [
    (EventKind.POST_CREATED, {'title': 'A'}, 'New post created: "A"'),
    (EventKind.POST_PUBLISHED, {'title': 'A'}, 'Post published: "A"'),
    (EventKind.POST_UPDATED, {'title': 'A'}, 'Post updated: "A"'),
    (EventKind.POST_DELETED, {'username': 'bob'}, 'Post deleted by bob'),
    (EventKind.POST_DELETED, {}, 'Post deleted by user'),
    (EventKind.USER_REGISTERED, {'username': 'bob'}, 'New user registered: bob'),
    (EventKind.USER_LOGGED_IN, {'username': 'bob'}, 'User logged in: bob'),
])
def test_activity_messages(kind, payload, expected):
    store = MemoryStore()
    ActivityRecorder(store).handle(Event(kind, dict(payload, userId=3)))
    assert store.records[0].message == expected
    assert store.records[0].actor_id == 3


def test_table_gap_yields_empty_message_and_default_icon():
    store = MemoryStore()
    recorder = ActivityRecorder(store, table={})
    recorder.handle(Event(EventKind.USER_LOGGED_IN, {'username': 'x'}))
    assert store.records[0].message == ''
    assert store.records[0].icon == DEFAULT_ICON


def test_check_activity_table_reports_missing_kinds():
    check_activity_table()
    partial = {EventKind.POST_CREATED: ACTIVITY_MESSAGES[EventKind.POST_CREATED]}
    with pytest.raises(ConfigurationError) as exc:
        check_activity_table(partial)
    assert 'user_logged_in' in str(exc.value)


def test_persistence_failure_is_contained():
    logger = AppLogger('test-broken')
    recorder = ActivityRecorder(BrokenStore(), logger)
    recorder.handle(Event(EventKind.POST_CREATED, {'title': 'x'}))
    assert any('Failed to log activity' in e['message'] for e in logger.entries())


def test_notifiers_log_payload():
    logger = AppLogger('test-notifiers')
    EmailNotifier(logger).handle(Event(EventKind.POST_CREATED, {'title': 'x'}))
    AnalyticsTracker(logger).handle(Event(EventKind.POST_PUBLISHED, {'postId': 2}))
    messages = [e['message'] for e in logger.entries()]
    assert messages[0].startswith('Email Notification: post_created')
    assert messages[1] == 'Analytics: post_published - {"postId": 2}'


def test_default_wiring():
    bus = EventBus()
    subs = register_default_subscribers(bus, MemoryStore())
    for kind in EventKind:
        assert subs['activity'] in bus.subscribers(kind)
    assert subs['email'] in bus.subscribers(EventKind.POST_CREATED)
    assert subs['analytics'] in bus.subscribers(EventKind.POST_PUBLISHED)
    assert len(bus.subscribers(EventKind.USER_REGISTERED)) == 1
