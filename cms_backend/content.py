"""Facade over the multi-step content operations.

Route handlers call one method here instead of coordinating categories,
posts and timestamps against the repository themselves.
"""
import datetime
import re
from typing import Any, Dict, Optional

from .dto import PostRecord
from .errors import ContentError, NotFound

DEFAULT_CATEGORY = 'General'


def category_slug(name: str) -> str:
    return re.sub(r'\s+', '-', name.strip().lower())


class ContentManagementFacade:
    def __init__(self, repo: Any):
        self.repo = repo

    def create_complete_post(self, post_data: Dict[str, Any], category_name: Optional[str], author_id: int) -> PostRecord:
        """Find or create the category, then create the post under it."""
        name = (category_name or '').strip() or DEFAULT_CATEGORY
        try:
            category = self.repo.get_or_create_category(name, category_slug(name))
            return self.repo.create_post(
                title=post_data['title'],
                content=post_data['content'],
                author_id=author_id,
                category_id=category.id,
            )
        except Exception as e:
            raise ContentError(f'Failed to create post: {e}') from e

    def publish_post(self, post_id: int) -> PostRecord:
        try:
            post = self.repo.update_post(post_id, {
                'status': 'published',
                'published_at': datetime.datetime.now(datetime.timezone.utc),
            })
        except Exception as e:
            raise ContentError(f'Failed to publish post: {e}') from e
        if post is None:
            raise NotFound('Post not found')
        return post

    def get_post(self, post_id: int) -> PostRecord:
        post = self.repo.get_post(post_id)
        if post is None:
            raise NotFound('Post not found')
        return post
