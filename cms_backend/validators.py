import re
from typing import Optional

_EMAIL = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

PERSONAL_DOMAINS = ('gmail.com', 'yahoo.com', 'hotmail.com', 'outlook.com')


def is_valid_email(email) -> bool:
    return isinstance(email, str) and _EMAIL.match(email) is not None


def email_domain(email) -> Optional[str]:
    if not is_valid_email(email):
        return None
    return email.split('@')[1]


def is_work_email(email) -> bool:
    domain = email_domain(email)
    return domain is not None and domain.lower() not in PERSONAL_DOMAINS
