from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .settings import ClientSettings, get_client_settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Any failed request: non-2xx status or a transport failure."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def build_async_client(settings: ClientSettings, **kwargs: Any) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` rooted at the API with JSON headers."""
    return httpx.AsyncClient(
        base_url=settings.api_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers={"Content-Type": "application/json"},
        **kwargs,
    )


def _error_message(response: httpx.Response) -> str:
    message = f"HTTP {response.status_code}"
    try:
        data = response.json()
    except ValueError:
        return message
    if isinstance(data, dict):
        return data.get("error") or data.get("message") or message
    return message


class TaskApiClient:
    """
    Thin async wrapper over the task HTTP API.

    Never retries; every failure surfaces as `ApiError`.
    """

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    @classmethod
    def from_settings(cls, settings: Optional[ClientSettings] = None) -> "TaskApiClient":
        return cls(build_async_client(settings or get_client_settings()))

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._http.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.debug("%s %s failed: %s", method, path, exc)
            raise ApiError(str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            message = _error_message(response)
            logger.debug("%s %s -> %s %s", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)
        if response.status_code == 204:
            return None
        return response.json()

    async def list_tasks(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/tasks")

    async def create_task(self, title: str, done: bool = False) -> Dict[str, Any]:
        return await self._request("POST", "/tasks", json={"title": title, "done": done})

    async def update_task(
        self, task_id: str, *, title: Optional[str] = None, done: Optional[bool] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if title is not None:
            body["title"] = title
        if done is not None:
            body["done"] = done
        return await self._request("PUT", f"/tasks/{task_id}", json=body)

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "/health")
