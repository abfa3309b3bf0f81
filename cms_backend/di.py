"""
Dependency container / composition root for the CMS backend.
Provides a single place to instantiate Config, logger, repository, event bus,
subscribers, the content facade and the request pipeline.
Every component receives its collaborators from here; nothing is a module global.
"""
from typing import Any, Optional

from .config import Config, get_config
from .content import ContentManagementFacade
from .events import EventBus
from .logger import AppLogger
from .pipeline import build_default_pipeline
from .repo_factory import get_repository
from .security import Authenticator
from .subscribers import register_default_subscribers


class Container:
    def __init__(self, cfg: Optional[Config] = None):
        self.cfg = cfg or get_config()
        self.logger = AppLogger('cms_backend', history_size=self.cfg.LOG_HISTORY_SIZE, level=self.cfg.LOG_LEVEL)
        # repository factory uses cfg to decide the database URLs
        self.repo = get_repository(self.cfg)
        self.authenticator = Authenticator(self.repo, self.cfg.JWT_SECRET, self.cfg.JWT_EXP_SECONDS)
        self.bus = EventBus(self.logger)
        # raises ConfigurationError if an event kind has no activity message
        self.subscribers = register_default_subscribers(self.bus, self.repo, self.logger)
        self.content = ContentManagementFacade(self.repo)
        self.pipeline = build_default_pipeline(self.logger)


def build_container(**overrides: Any) -> Container:
    """Create and return a Container wired for the current app.

    Keyword overrides are applied to the Config, so tests can point the
    container at an in-memory database.
    """
    return Container(get_config(**overrides))
