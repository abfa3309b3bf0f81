import datetime
from dataclasses import dataclass, field
from typing import Optional, Dict, Any


def _iso(value: Optional[datetime.datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class UserRecord:
    id: int
    username: str
    email: str
    role: str = 'viewer'
    is_active: bool = True
    password_hash: Optional[str] = None
    created_at: Optional[datetime.datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        # never expose the password hash
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "isActive": self.is_active,
            "createdAt": _iso(self.created_at),
        }

    def summary(self) -> Dict[str, Any]:
        return {"id": self.id, "username": self.username, "email": self.email, "role": self.role}


@dataclass
class SessionRecord:
    user_id: int
    token: str
    is_active: bool
    expires_at: datetime.datetime


@dataclass
class CategoryRecord:
    id: int
    name: str
    slug: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "slug": self.slug}


@dataclass
class PostRecord:
    id: int
    title: str
    content: str
    author_id: Optional[int] = None
    author: Optional[Dict[str, Any]] = None
    category: Optional[Dict[str, Any]] = None
    status: str = 'draft'
    views: int = 0
    likes: int = 0
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None
    published_at: Optional[datetime.datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "author": self.author,
            "category": self.category,
            "status": self.status,
            "views": self.views,
            "likes": self.likes,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
            "publishedAt": _iso(self.published_at),
        }


@dataclass(frozen=True)
class ActivityRecord:
    """A persisted, human-readable trace of one domain event."""
    kind: str
    message: str
    icon: str
    actor_id: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: Optional[datetime.datetime] = None
    actor_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "message": self.message,
            "icon": self.icon,
            "timestamp": _iso(self.timestamp),
            "user": self.actor_name,
        }
