"""Password hashing, JWT issuing and request authentication."""
import datetime
import functools
import uuid
from dataclasses import dataclass
from typing import Any, Optional

import jwt
from flask import current_app, g, jsonify, request
from werkzeug.security import generate_password_hash, check_password_hash

from .errors import Unauthorized
from .roles import Role


@dataclass(frozen=True)
class AuthContext:
    user_id: int
    role: Role
    username: str
    email: str
    token: str


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: Optional[str], password: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, password)


class Authenticator:
    """Issues session-backed access tokens and verifies them."""

    def __init__(self, repo: Any, secret: str, exp_seconds: int = 24 * 60 * 60):
        self.repo = repo
        self.secret = secret
        self.exp_seconds = exp_seconds

    def issue_token(self, user_id: int, role: str) -> str:
        """Create a signed token and record an active session for it."""
        now = datetime.datetime.now(datetime.timezone.utc)
        exp = now + datetime.timedelta(seconds=self.exp_seconds)
        payload = {
            'userId': user_id,
            'role': role,
            'iat': int(now.timestamp()),
            'exp': int(exp.timestamp()),
            # keeps tokens issued within the same second distinct
            'jti': uuid.uuid4().hex,
        }
        token = jwt.encode(payload, self.secret, algorithm='HS256')
        if isinstance(token, bytes):
            token = token.decode('utf-8')
        self.repo.create_session(user_id, token, exp)
        return token

    def verify(self, token: Optional[str]) -> AuthContext:
        if not token:
            raise Unauthorized('Authentication required')
        try:
            decoded = jwt.decode(token, self.secret, algorithms=['HS256'])
        except jwt.PyJWTError:
            raise Unauthorized('Invalid token')
        user_id = decoded.get('userId')
        if user_id is None:
            raise Unauthorized('Invalid token')
        if self.repo.get_active_session(token, user_id) is None:
            raise Unauthorized('Invalid or expired session')
        user = self.repo.get_user(user_id)
        if user is None or not user.is_active:
            raise Unauthorized('User not found or inactive')
        return AuthContext(user_id=user.id, role=Role.parse(user.role), username=user.username,
                           email=user.email, token=token)

    def revoke(self, token: str) -> bool:
        return self.repo.deactivate_session(token)


def bearer_token(header_value: Optional[str]) -> Optional[str]:
    if not header_value:
        return None
    if header_value.startswith('Bearer '):
        return header_value[len('Bearer '):].strip() or None
    return header_value.strip() or None


def require_auth(*roles: Role):
    """Route decorator: verify the bearer token and, if given, the caller's role.

    The verified `AuthContext` is available as `flask.g.user` in the view.
    """
    allowed = {Role.parse(r) if isinstance(r, str) else r for r in roles}

    def decorator(view):
        @functools.wraps(view)
        def wrapper(*args, **kwargs):
            container = current_app.extensions['cms']
            try:
                ctx = container.authenticator.verify(bearer_token(request.headers.get('Authorization')))
            except Unauthorized as e:
                container.logger.error(f'Authentication error: {e.message}')
                return jsonify(message=e.message), 401
            if allowed and ctx.role not in allowed:
                return jsonify(message='Access denied. Insufficient permissions.'), 403
            g.user = ctx
            return view(*args, **kwargs)
        return wrapper
    return decorator
