from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_title(value: Optional[str]) -> Optional[str]:
    """
    Trim surrounding whitespace. Emptiness is left for the route layer to
    report, so that a blank title yields the API's own 400 body instead of a
    framework validation error.
    """
    if value is None:
        return None
    return value.strip()


def _coerce_done(value: Any) -> Optional[bool]:
    """
    Coerce any JSON value to a boolean by truthiness: false, 0, "" are false,
    every other value (including "false", [] and {}) is true. null stays
    null, meaning "not supplied".
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value != ""
    return True


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new Task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "done": False,
            }
        }
    )

    title: Optional[str] = Field(default=None, description="Title of the task; required and non-blank")
    done: Optional[bool] = Field(default=None, description="Completion flag; defaults to false")

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        return _strip_title(v)

    @field_validator("done", mode="before")
    @classmethod
    def coerce_done(cls, v: Any) -> Optional[bool]:
        return _coerce_done(v)


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for partially updating an existing Task.
    Only fields present in the request body are applied.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "done": True,
            }
        }
    )

    title: Optional[str] = Field(default=None, description="New title; trimmed, must not be blank")
    done: Optional[bool] = Field(default=None, description="New completion flag")

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: Optional[str]) -> Optional[str]:
        return _strip_title(v)

    @field_validator("done", mode="before")
    @classmethod
    def coerce_done(cls, v: Any) -> Optional[bool]:
        return _coerce_done(v)


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a Task. Timestamps are exposed in camelCase.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "3f6c1e0a-6b8e-4f57-9a53-1f0c9b2c7d11",
                "title": "Buy milk",
                "done": False,
                "createdAt": "2025-01-25T10:15:30.123456Z",
                "updatedAt": "2025-01-26T09:00:00.000001Z",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Title of the task")
    done: bool = Field(..., description="Completion flag")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")
    updated_at: datetime = Field(..., alias="updatedAt", description="Last update timestamp")


# PUBLIC_INTERFACE
class HealthOut(BaseModel):
    """Health check payload."""

    ok: bool = Field(..., description="Whether the store answered a ping")
    driver: str = Field(..., description="Configured storage backend")
    uptime: float = Field(..., description="Seconds since the application started")


# PUBLIC_INTERFACE
class ErrorOut(BaseModel):
    """Error body for 400/404/500 responses."""

    error: str = Field(..., description="Human readable error message")
