"""
Task Tracker API package.

Exposes the application factory for convenience imports
(`from src.api import create_app`).
"""

from .main import create_app  # noqa: F401
