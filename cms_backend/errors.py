"""Exception types shared by the service layer and the HTTP handlers.

Each error carries the HTTP status the Flask handlers answer with, so
route code can catch `CmsError` once and respond with `{message}`.
"""


class CmsError(Exception):
    status_code = 500

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message = message


class ValidationError(CmsError):
    status_code = 400


class Unauthorized(CmsError):
    status_code = 401


class Forbidden(CmsError):
    status_code = 403


class NotFound(CmsError):
    status_code = 404


class ContentError(CmsError):
    """Raised by the content facade when a multi-step write fails."""


class ConfigurationError(CmsError):
    """Raised at startup when the wiring is incomplete."""
