"""User roles and what each role may do."""
import enum
from typing import Optional, Tuple


class Role(str, enum.Enum):
    ADMIN = 'admin'
    EDITOR = 'editor'
    VIEWER = 'viewer'

    @classmethod
    def parse(cls, value: Optional[str]) -> 'Role':
        # registration without (or with an unknown) role yields a viewer
        try:
            return cls(value)
        except ValueError:
            return cls.VIEWER

    @property
    def permissions(self) -> Tuple[str, ...]:
        return _PERMISSIONS[self]

    @property
    def capabilities(self) -> Tuple[str, ...]:
        return _CAPABILITIES[self]

    def can(self, action: str) -> bool:
        return action in self.permissions


_PERMISSIONS = {
    Role.ADMIN: ('create', 'read', 'update', 'delete', 'publish', 'manage_users'),
    Role.EDITOR: ('create', 'read', 'update', 'publish'),
    Role.VIEWER: ('read',),
}

_CAPABILITIES = {
    Role.ADMIN: ('Full system access', 'User management', 'All content operations'),
    Role.EDITOR: ('Create content', 'Edit content', 'Publish content'),
    Role.VIEWER: ('Read content', 'View published posts'),
}
