"""Command handlers that perform write-side actions and publish domain events.

Each handler does the store work first and publishes only after it
succeeded, so subscribers never see an event for a write that failed.
The payload keys used here are the ones `subscribers.ACTIVITY_MESSAGES`
formats.
"""
import datetime
from typing import Any, Dict, Optional, Tuple

from .content import ContentManagementFacade
from .dto import PostRecord, UserRecord
from .errors import Forbidden, NotFound, Unauthorized, ValidationError
from .events import EventBus, EventKind
from .roles import Role
from .security import AuthContext, Authenticator, hash_password, verify_password
from .validators import is_valid_email

POST_STATUSES = ('draft', 'published')


def _ensure_can_modify(post: PostRecord, actor: AuthContext):
    if post.author_id != actor.user_id and actor.role is not Role.ADMIN:
        raise Forbidden('Access denied')


def handle_create_post(facade: ContentManagementFacade, bus: EventBus, actor: AuthContext,
                       title: str, content: str, category: Optional[str] = None) -> PostRecord:
    """Create a post through the facade and publish post_created."""
    if not title or not content:
        raise ValidationError('Title and content are required')
    post = facade.create_complete_post({'title': title, 'content': content}, category, actor.user_id)
    bus.publish(EventKind.POST_CREATED, {'postId': post.id, 'title': post.title, 'userId': actor.user_id})
    return post


def handle_update_post(repo: Any, bus: EventBus, actor: AuthContext, post_id: int,
                       changes: Dict[str, Any]) -> PostRecord:
    """Apply title/content/status changes and publish post_updated.

    Only the author or an admin may edit. Status must be draft or published,
    and only an admin may publish; publishing stamps published_at.
    """
    post = repo.get_post(post_id)
    if post is None:
        raise NotFound('Post not found')
    _ensure_can_modify(post, actor)

    fields = {k: changes[k] for k in ('title', 'content') if changes.get(k) is not None}
    status = changes.get('status')
    if status:
        if status not in POST_STATUSES:
            raise ValidationError(f'Invalid status: {status}')
        if status == 'published' and actor.role is not Role.ADMIN:
            raise Forbidden('Only administrators can publish posts')
        fields['status'] = status
        if status == 'published' and post.status != 'published':
            fields['published_at'] = datetime.datetime.now(datetime.timezone.utc)

    updated = repo.update_post(post_id, fields)
    if updated is None:
        raise NotFound('Post not found')
    bus.publish(EventKind.POST_UPDATED, {'postId': updated.id, 'title': updated.title, 'userId': actor.user_id})
    return updated


def handle_delete_post(repo: Any, bus: EventBus, actor: AuthContext, post_id: int) -> PostRecord:
    post = repo.get_post(post_id)
    if post is None:
        raise NotFound('Post not found')
    _ensure_can_modify(post, actor)
    repo.delete_post(post_id)
    bus.publish(EventKind.POST_DELETED, {
        'postId': post.id,
        'title': post.title,
        'userId': actor.user_id,
        'username': actor.username,
    })
    return post


def handle_publish_post(facade: ContentManagementFacade, bus: EventBus, actor: AuthContext, post_id: int) -> PostRecord:
    post = facade.publish_post(post_id)
    bus.publish(EventKind.POST_PUBLISHED, {'postId': post.id, 'title': post.title, 'userId': actor.user_id})
    return post


def handle_register_user(repo: Any, auth: Authenticator, bus: EventBus, username: str, email: str,
                         password: str, role: Optional[str] = None) -> Tuple[UserRecord, str]:
    """Create the account, open its first session and publish user_registered."""
    if not username or not email or not password:
        raise ValidationError('Username, email, and password are required')
    if not is_valid_email(email):
        raise ValidationError('Invalid email address')
    if repo.find_user_by_email(email) or repo.find_user_by_username(username):
        raise ValidationError('User already exists')

    user_role = Role.parse(role)
    user = repo.create_user(username, email, hash_password(password), user_role.value)
    token = auth.issue_token(user.id, user.role)
    bus.publish(EventKind.USER_REGISTERED, {'userId': user.id, 'username': user.username})
    return user, token


def handle_login(repo: Any, auth: Authenticator, bus: EventBus, email: str, password: str) -> Tuple[UserRecord, str]:
    """Check credentials, replace the user's sessions with a new one and publish user_logged_in."""
    if not email or not password:
        raise ValidationError('Email and password are required')
    user = repo.find_user_by_email(email)
    if user is None or not verify_password(user.password_hash, password):
        raise Unauthorized('Invalid credentials')
    if not user.is_active:
        raise Forbidden('Account is deactivated')

    repo.deactivate_user_sessions(user.id)
    token = auth.issue_token(user.id, user.role)
    bus.publish(EventKind.USER_LOGGED_IN, {'userId': user.id, 'username': user.username})
    return user, token


def handle_logout(auth: Authenticator, actor: AuthContext) -> bool:
    return auth.revoke(actor.token)
