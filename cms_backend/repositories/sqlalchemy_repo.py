import datetime
import os
from typing import Any, Dict, List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..models.sql_models import Base, User, Session as SessionModel, Category, Post, Activity
from ..dto import UserRecord, SessionRecord, CategoryRecord, PostRecord, ActivityRecord


def _utc(value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _make_engine(url: str):
    if url.startswith('sqlite:'):
        if ':memory:' in url or url in ('sqlite://', 'sqlite:///'):
            # one shared connection, otherwise every session sees an empty DB
            return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
        path = url[len('sqlite:///'):]
        if path:
            os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url)


class SQLAlchemyRepository:
    """Repository implementation using SQLAlchemy.

    Supports optional read/write splitting by providing separate `write_db_url`
    (primary) and `read_db_url` (replica). If no split is configured the
    repository uses a single engine for both reads and writes.

    The activity methods (`create_activity`, `find_activities`) are the
    persistence side of the event pipeline: `ActivityRecorder` writes through
    them and the activity feed reads through them.
    """

    def __init__(self, write_db_url: str = None, read_db_url: str = None):
        if not write_db_url and not read_db_url:
            db_path = os.path.join(os.path.dirname(__file__), '..', 'data', 'cms.db')
            write_db_url = f'sqlite:///{os.path.abspath(db_path)}'

        # If only one url provided, use it for both roles
        write_db_url = write_db_url or read_db_url
        read_db_url = read_db_url or write_db_url

        self.write_engine = _make_engine(write_db_url)
        if read_db_url == write_db_url:
            self.read_engine = self.write_engine
        else:
            # in many setups this points to a replica
            self.read_engine = _make_engine(read_db_url)

        # Ensure schema exists on the write engine (primary)
        Base.metadata.create_all(self.write_engine)

        self.WriteSession = sessionmaker(bind=self.write_engine)
        self.ReadSession = sessionmaker(bind=self.read_engine)

    def _write_session(self) -> Session:
        return self.WriteSession()

    def _read_session(self) -> Session:
        return self.ReadSession()

    # --- users ---

    @staticmethod
    def _user_record(u: User) -> UserRecord:
        return UserRecord(id=u.id, username=u.username, email=u.email, role=u.role,
                          is_active=bool(u.is_active), password_hash=u.password_hash,
                          created_at=_utc(u.created_at))

    def create_user(self, username: str, email: str, password_hash: str, role: str) -> UserRecord:
        with self._write_session() as s:
            user = User(username=username, email=email, password_hash=password_hash, role=role, is_active=True)
            s.add(user)
            s.commit()
            s.refresh(user)
            return self._user_record(user)

    def get_user(self, user_id: int) -> Optional[UserRecord]:
        with self._read_session() as s:
            user = s.get(User, user_id)
            return self._user_record(user) if user else None

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        with self._read_session() as s:
            user = s.query(User).filter(User.email == email).first()
            return self._user_record(user) if user else None

    def find_user_by_username(self, username: str) -> Optional[UserRecord]:
        with self._read_session() as s:
            user = s.query(User).filter(User.username == username).first()
            return self._user_record(user) if user else None

    def list_users(self) -> List[UserRecord]:
        with self._read_session() as s:
            return [self._user_record(u) for u in s.query(User).order_by(User.id).all()]

    def set_user_active(self, user_id: int, active: bool) -> bool:
        with self._write_session() as s:
            user = s.get(User, user_id)
            if user is None:
                return False
            user.is_active = active
            s.commit()
            return True

    # --- sessions ---

    def create_session(self, user_id: int, token: str, expires_at: datetime.datetime) -> None:
        with self._write_session() as s:
            s.add(SessionModel(user_id=user_id, token=token, is_active=True, expires_at=expires_at))
            s.commit()

    def get_active_session(self, token: str, user_id: int) -> Optional[SessionRecord]:
        with self._read_session() as s:
            row = (s.query(SessionModel)
                   .filter(SessionModel.token == token, SessionModel.user_id == user_id,
                           SessionModel.is_active.is_(True))
                   .first())
            if row is None:
                return None
            expires = _utc(row.expires_at)
            if expires <= _now():
                return None
            return SessionRecord(user_id=row.user_id, token=row.token, is_active=True, expires_at=expires)

    def deactivate_session(self, token: str) -> bool:
        with self._write_session() as s:
            row = s.query(SessionModel).filter(SessionModel.token == token).first()
            if row is None:
                return False
            row.is_active = False
            s.commit()
            return True

    def deactivate_user_sessions(self, user_id: int) -> int:
        with self._write_session() as s:
            count = (s.query(SessionModel)
                     .filter(SessionModel.user_id == user_id, SessionModel.is_active.is_(True))
                     .update({SessionModel.is_active: False}, synchronize_session=False))
            s.commit()
            return count

    # --- categories ---

    def get_or_create_category(self, name: str, slug: str) -> CategoryRecord:
        with self._write_session() as s:
            cat = s.query(Category).filter(Category.name == name).first()
            if cat is None:
                cat = Category(name=name, slug=slug)
                s.add(cat)
                s.commit()
                s.refresh(cat)
            return CategoryRecord(id=cat.id, name=cat.name, slug=cat.slug)

    # --- posts ---

    @staticmethod
    def _post_record(p: Post) -> PostRecord:
        author = None
        if p.author is not None:
            author = {'id': p.author.id, 'username': p.author.username, 'email': p.author.email}
        category = None
        if p.category is not None:
            category = {'id': p.category.id, 'name': p.category.name, 'slug': p.category.slug}
        return PostRecord(id=p.id, title=p.title, content=p.content, author_id=p.author_id,
                          author=author, category=category, status=p.status,
                          views=p.views or 0, likes=p.likes or 0,
                          created_at=_utc(p.created_at), updated_at=_utc(p.updated_at),
                          published_at=_utc(p.published_at))

    def create_post(self, title: str, content: str, author_id: int, category_id: Optional[int] = None,
                    status: str = 'draft') -> PostRecord:
        with self._write_session() as s:
            post = Post(title=title, content=content, author_id=author_id, category_id=category_id,
                        status=status, views=0, likes=0, created_at=_now())
            s.add(post)
            s.commit()
            s.refresh(post)
            return self._post_record(post)

    def get_post(self, post_id: int) -> Optional[PostRecord]:
        with self._read_session() as s:
            post = s.get(Post, post_id)
            return self._post_record(post) if post else None

    def list_posts(self) -> List[PostRecord]:
        with self._read_session() as s:
            return [self._post_record(p) for p in s.query(Post).order_by(Post.id).all()]

    def update_post(self, post_id: int, fields: Dict[str, Any]) -> Optional[PostRecord]:
        """Apply `fields` (title, content, status, published_at, views, likes) and return the post."""
        allowed = {'title', 'content', 'status', 'published_at', 'views', 'likes'}
        with self._write_session() as s:
            post = s.get(Post, post_id)
            if post is None:
                return None
            for key, value in fields.items():
                if key not in allowed:
                    raise KeyError(f'Cannot update post field {key!r}')
                setattr(post, key, value)
            post.updated_at = _now()
            s.commit()
            s.refresh(post)
            return self._post_record(post)

    def delete_post(self, post_id: int) -> bool:
        with self._write_session() as s:
            post = s.get(Post, post_id)
            if post is None:
                return False
            s.delete(post)
            s.commit()
            return True

    # --- activity log ---

    def create_activity(self, record: ActivityRecord) -> ActivityRecord:
        with self._write_session() as s:
            row = Activity(type=record.kind, message=record.message, icon=record.icon,
                           user_id=record.actor_id, meta=dict(record.metadata or {}),
                           timestamp=record.timestamp or _now())
            s.add(row)
            s.commit()
            s.refresh(row)
            return self._activity_record(row)

    @staticmethod
    def _activity_record(row: Activity) -> ActivityRecord:
        return ActivityRecord(kind=row.type, message=row.message, icon=row.icon, actor_id=row.user_id,
                              metadata=dict(row.meta or {}), timestamp=_utc(row.timestamp),
                              actor_name=row.user.username if row.user is not None else None)

    def find_activities(self, limit: int = 10, kind: Optional[str] = None) -> List[ActivityRecord]:
        """Return the most recent activity records, newest first."""
        with self._read_session() as s:
            q = s.query(Activity)
            if kind:
                q = q.filter(Activity.type == kind)
            rows = q.order_by(Activity.timestamp.desc(), Activity.id.desc()).limit(limit).all()
            return [self._activity_record(r) for r in rows]
