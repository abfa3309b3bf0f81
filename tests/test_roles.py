from cms_backend.roles import Role
from cms_backend.validators import is_valid_email, is_work_email


def test_role_parse_defaults_to_viewer():
    assert Role.parse('admin') is Role.ADMIN
    assert Role.parse('editor') is Role.EDITOR
    assert Role.parse(None) is Role.VIEWER
    assert Role.parse('superuser') is Role.VIEWER


def test_permissions():
    assert Role.ADMIN.can('manage_users')
    assert Role.EDITOR.can('publish')
    assert not Role.EDITOR.can('delete')
    assert Role.VIEWER.permissions == ('read',)
    assert 'User management' in Role.ADMIN.capabilities


def test_email_validation():
    assert is_valid_email('ann@example.com')
    assert not is_valid_email('ann@example')
    assert not is_valid_email(None)
    assert is_work_email('ann@acme.io')
    assert not is_work_email('ann@gmail.com')
