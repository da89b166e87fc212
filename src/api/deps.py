from __future__ import annotations

from fastapi import Request

from .repositories import Repository


# PUBLIC_INTERFACE
def get_repository(request: Request) -> Repository:
    """
    Dependency returning the store handle the application was built with.
    """
    return request.app.state.repository
