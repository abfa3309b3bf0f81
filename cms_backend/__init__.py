"""Backend package initializer for the CMS API.

This file makes `cms_backend` a Python package so tests and the WSGI
entry point can import `cms_backend.app` directly.
"""

__all__ = ["app"]
