"""Composable post detail views.

A `BaseView` projects the stored post into `{title, content, author}`; each
decorator wraps another view and adds one facet to its `details()` output.
Decorators may be stacked in any order:

    view = SeoDecorator(EngagementDecorator(BaseView(post)))
    view.details()
"""
import re
from typing import Any, Dict, List, Optional, Protocol


META_DESCRIPTION_LENGTH = 160
MAX_KEYWORDS = 5
NO_DESCRIPTION = 'No description available'
UNTITLED_SLUG = 'untitled-post'

_WHITESPACE = re.compile(r'\s+')
_SLUG_STRIP = re.compile(r'[^A-Za-z0-9_-]')


class PostView(Protocol):
    post: Any

    def details(self) -> Dict[str, Any]:
        ...


def _get(post: Any, key: str, default: Any = None) -> Any:
    # posts arrive either as mappings (PostRecord.to_dict) or as objects
    if isinstance(post, dict):
        return post.get(key, default)
    return getattr(post, key, default)


def _number(value: Any) -> int:
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else 0


class BaseView:
    def __init__(self, post: Any):
        self.post = post

    def details(self) -> Dict[str, Any]:
        return {
            'title': _get(self.post, 'title'),
            'content': _get(self.post, 'content'),
            'author': _get(self.post, 'author'),
        }


class EngagementDecorator:
    """Adds `views` and `popularity` (views + 2 * likes)."""

    def __init__(self, inner: PostView):
        self.inner = inner
        self.post = inner.post

    def popularity(self) -> int:
        return _number(_get(self.post, 'views')) + 2 * _number(_get(self.post, 'likes'))

    def details(self) -> Dict[str, Any]:
        details = dict(self.inner.details())
        details['views'] = _number(_get(self.post, 'views'))
        details['popularity'] = self.popularity()
        return details


def meta_description(content: Any) -> str:
    if not isinstance(content, str):
        return NO_DESCRIPTION
    if len(content) > META_DESCRIPTION_LENGTH:
        return content[:META_DESCRIPTION_LENGTH] + '...'
    return content


def extract_keywords(title: Any, content: Any) -> List[str]:
    text = ' '.join(v for v in (title, content) if isinstance(v, str)).lower()
    keywords: List[str] = []
    for word in text.split():
        if len(word) > 4 and word not in keywords:
            keywords.append(word)
            if len(keywords) == MAX_KEYWORDS:
                break
    return keywords


def slugify(title: Any) -> str:
    if not isinstance(title, str):
        return UNTITLED_SLUG
    slug = _WHITESPACE.sub('-', title.lower())
    return _SLUG_STRIP.sub('', slug)


class SeoDecorator:
    """Adds `seo: {metaDescription, keywords, slug}` from the post's title and content."""

    def __init__(self, inner: PostView):
        self.inner = inner
        self.post = inner.post

    def details(self) -> Dict[str, Any]:
        details = dict(self.inner.details())
        title = _get(self.post, 'title')
        content = _get(self.post, 'content')
        details['seo'] = {
            'metaDescription': meta_description(content),
            'keywords': extract_keywords(title, content),
            'slug': slugify(title),
        }
        return details


def enrich_post(post: Any, logger: Optional[Any] = None) -> Dict[str, Any]:
    """Build the detail payload served by GET /api/posts/<id>."""
    view = SeoDecorator(EngagementDecorator(BaseView(post)))
    details = view.details()
    if logger is not None:
        logger.info('Post decorated with view count and SEO metadata')
    return details
