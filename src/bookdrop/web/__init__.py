# ABOUTME: Web package for bookdrop, built on Flask.
# ABOUTME: Exposes the application factory for the JSON endpoint.

from bookdrop.web.app import create_app

__all__ = ["create_app"]
