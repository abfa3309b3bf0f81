from typing import Any

from .config import Config


def get_repository(cfg: Config) -> Any:
    # Lazy import to keep SQLAlchemy out of modules that only need the config
    from .repositories.sqlalchemy_repo import SQLAlchemyRepository
    # Reads go to READ_DATABASE_URL and writes to WRITE_DATABASE_URL; both
    # default to DATABASE_URL, in which case one engine serves both.
    return SQLAlchemyRepository(write_db_url=cfg.WRITE_DATABASE_URL, read_db_url=cfg.READ_DATABASE_URL)
