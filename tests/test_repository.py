import datetime

import pytest

from cms_backend.config import get_config
from cms_backend.content import ContentManagementFacade, category_slug
from cms_backend.dto import ActivityRecord
from cms_backend.manage_db import create_admin


def test_create_and_list_posts_in_memory(repo):
    user = repo.create_user('ann', 'ann@example.com', 'hash', 'editor')
    facade = ContentManagementFacade(repo)

    post = facade.create_complete_post({'title': 'First', 'content': 'Body'}, 'Tech News', user.id)

    assert post.category == {'id': post.category['id'], 'name': 'Tech News', 'slug': 'tech-news'}
    assert post.author['username'] == 'ann'
    assert [p.title for p in repo.list_posts()] == ['First']


def test_category_defaults_and_reuse(repo):
    user = repo.create_user('ann', 'ann@example.com', 'hash', 'editor')
    facade = ContentManagementFacade(repo)
    a = facade.create_complete_post({'title': 'A', 'content': 'x'}, None, user.id)
    b = facade.create_complete_post({'title': 'B', 'content': 'y'}, 'General', user.id)
    assert a.category['name'] == 'General'
    assert a.category['id'] == b.category['id']
    assert category_slug('  Big   Ideas ') == 'big-ideas'


def test_publish_sets_status_and_timestamp(repo):
    user = repo.create_user('ann', 'ann@example.com', 'hash', 'admin')
    facade = ContentManagementFacade(repo)
    post = facade.create_complete_post({'title': 'A', 'content': 'x'}, None, user.id)
    published = facade.publish_post(post.id)
    assert published.status == 'published'
    assert published.published_at is not None


def test_find_activities_newest_first_and_limited(repo):
    base = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)
    for i in range(12):
        repo.create_activity(ActivityRecord(kind='post_created', message=f'm{i}', icon='x',
                                            timestamp=base + datetime.timedelta(minutes=i)))
    records = repo.find_activities(limit=10)
    assert len(records) == 10
    assert records[0].message == 'm11'
    assert records[-1].message == 'm2'


def test_sessions_expire_and_deactivate(repo):
    user = repo.create_user('ann', 'ann@example.com', 'hash', 'viewer')
    now = datetime.datetime.now(datetime.timezone.utc)
    repo.create_session(user.id, 'live', now + datetime.timedelta(hours=1))
    repo.create_session(user.id, 'stale', now - datetime.timedelta(seconds=1))

    assert repo.get_active_session('live', user.id) is not None
    assert repo.get_active_session('stale', user.id) is None

    assert repo.deactivate_user_sessions(user.id) == 2
    assert repo.get_active_session('live', user.id) is None


def test_manage_db_create_admin():
    cfg = get_config(DATABASE_URL='sqlite:///:memory:')
    user = create_admin('root', 'root@example.com', 'pw', cfg=cfg)
    assert user.role == 'admin'
    with pytest.raises(ValueError):
        create_admin('root', 'not-an-email', 'pw', cfg=cfg)
