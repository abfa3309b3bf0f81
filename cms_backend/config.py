import os
from typing import Any


class Config:
    # Database URLs. If READ/WRITE separation is desired, set both:
    # - WRITE_DATABASE_URL: used for writes (primary)
    # - READ_DATABASE_URL: used for reads (replica)
    # Otherwise DATABASE_URL (or the bundled SQLite file) serves both.
    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    DATA_DIR = os.getenv('CMS_DATA_DIR') or os.path.join(BASE_DIR, 'data')
    DATABASE_URL = os.getenv('DATABASE_URL') or 'sqlite:///' + os.path.join(DATA_DIR, 'cms.db')
    WRITE_DATABASE_URL = os.getenv('WRITE_DATABASE_URL') or DATABASE_URL
    READ_DATABASE_URL = os.getenv('READ_DATABASE_URL') or DATABASE_URL

    JWT_SECRET = os.getenv('JWT_SECRET', 'your-secret-key')
    JWT_EXP_SECONDS = int(os.getenv('JWT_EXP_SECONDS', str(24 * 60 * 60)))

    CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', 'http://localhost:3000').split(',') if o.strip()]

    # how many entries GET /api/activity returns
    ACTIVITY_FEED_LIMIT = int(os.getenv('ACTIVITY_FEED_LIMIT', '10'))

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_HISTORY_SIZE = int(os.getenv('LOG_HISTORY_SIZE', '500'))

    PORT = int(os.getenv('PORT', '5001'))

    def __init__(self, **overrides: Any):
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f'Unknown config option: {key}')
            setattr(self, key, value)
        # a plain DATABASE_URL override should move both roles with it
        if 'DATABASE_URL' in overrides:
            if 'WRITE_DATABASE_URL' not in overrides:
                self.WRITE_DATABASE_URL = self.DATABASE_URL
            if 'READ_DATABASE_URL' not in overrides:
                self.READ_DATABASE_URL = self.DATABASE_URL


def get_config(**overrides: Any) -> Config:
    return Config(**overrides)
