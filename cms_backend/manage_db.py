"""Simple DB management helpers: create the schema and seed an administrator.

Usage:
  python -m cms_backend.manage_db create
  python -m cms_backend.manage_db create_admin <username> <email> <password>
"""
import logging
import sys

from .config import get_config
from .logger import configure_logging
from .repo_factory import get_repository
from .roles import Role
from .security import hash_password
from .validators import is_valid_email

log = logging.getLogger('cms_backend.manage_db')


def create_db(cfg=None):
    # engine and metadata are created in the repository constructor
    get_repository(cfg or get_config())
    log.info('Database initialized.')


def create_admin(username: str, email: str, password: str, cfg=None):
    if not is_valid_email(email):
        raise ValueError(f'Invalid email address: {email}')
    repo = get_repository(cfg or get_config())
    if repo.find_user_by_email(email) or repo.find_user_by_username(username):
        raise ValueError('User already exists')
    user = repo.create_user(username, email, hash_password(password), Role.ADMIN.value)
    log.info('Created admin user %s (id=%s)', user.username, user.id)
    return user


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    configure_logging(get_config().LOG_LEVEL)
    if not argv:
        print('Usage: manage_db.py create | create_admin <username> <email> <password>')
        return 1
    cmd = argv[0]
    if cmd == 'create':
        create_db()
    elif cmd == 'create_admin' and len(argv) >= 4:
        try:
            create_admin(argv[1], argv[2], argv[3])
        except ValueError as e:
            log.error(str(e))
            return 1
    else:
        print('Unknown command')
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
