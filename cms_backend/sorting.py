"""Sort orders for the post listing (`GET /api/posts?sortBy=`)."""
import datetime
import enum
from typing import Any, Callable, Dict, List, Optional


def _get(post: Any, key: str, default: Any = None) -> Any:
    if isinstance(post, dict):
        return post.get(key, default)
    return getattr(post, key, default)


_EPOCH = datetime.datetime.min.replace(tzinfo=datetime.timezone.utc)


def _created(post: Any) -> datetime.datetime:
    value = _get(post, 'created_at') or _EPOCH
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value


def _by_date(posts: List[Any]) -> List[Any]:
    return sorted(posts, key=_created, reverse=True)


def _by_popularity(posts: List[Any]) -> List[Any]:
    return sorted(posts, key=lambda p: (_get(p, 'views') or 0) + (_get(p, 'likes') or 0), reverse=True)


def _by_title(posts: List[Any]) -> List[Any]:
    return sorted(posts, key=lambda p: (_get(p, 'title') or '').casefold())


class SortOrder(str, enum.Enum):
    DATE = 'date'
    POPULARITY = 'popularity'
    TITLE = 'title'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'SortOrder':
        """Map a `sortBy` query value to an order; anything unknown sorts by date."""
        try:
            return cls(value)
        except ValueError:
            return cls.DATE


_STRATEGIES: Dict[SortOrder, Callable[[List[Any]], List[Any]]] = {
    SortOrder.DATE: _by_date,
    SortOrder.POPULARITY: _by_popularity,
    SortOrder.TITLE: _by_title,
}


def sort_posts(posts: List[Any], order: SortOrder = SortOrder.DATE) -> List[Any]:
    """Return a new list of posts in the requested order."""
    return _STRATEGIES[order](list(posts))
