from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..deps import get_repository
from ..errors import TaskNotFoundError, TaskValidationError
from ..repositories import Repository
from ..schemas import ErrorOut, TaskCreate, TaskOut, TaskUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a new task with a generated id and return it.",
    responses={
        201: {"description": "Task created successfully"},
        400: {"model": ErrorOut, "description": "Title missing or blank"},
    },
)
def create_task(payload: TaskCreate, repo: Repository = Depends(get_repository)) -> TaskOut:
    """
    Create a new Task. The title is trimmed; a blank title is rejected.
    """
    if not payload.title:
        raise TaskValidationError("title required")
    created = repo.create(payload)
    logger.info("created task %s", created["id"])
    return TaskOut(**created)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="Return every task, most recently created first.",
    responses={
        200: {"description": "List retrieved successfully"},
    },
)
def list_tasks(repo: Repository = Depends(get_repository)) -> List[TaskOut]:
    """
    List all tasks, newest first.
    """
    return [TaskOut(**it) for it in repo.list()]


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description=(
        "Partially update a task. Only `title` and `done` fields present in the body "
        "are modified; absent fields are left untouched."
    ),
    responses={
        200: {"description": "Task updated"},
        400: {"model": ErrorOut, "description": "Title supplied but blank"},
        404: {"model": ErrorOut, "description": "Task not found"},
    },
)
def update_task(task_id: str, payload: TaskUpdate, repo: Repository = Depends(get_repository)) -> TaskOut:
    """
    Partial update of a Task.
    """
    if payload.title is not None and not payload.title:
        # an unknown id wins over a bad body
        if repo.get(task_id) is None:
            raise TaskNotFoundError("not found")
        raise TaskValidationError("title required")

    updated = repo.update(task_id, payload)
    if updated is None:
        raise TaskNotFoundError("not found")
    return TaskOut(**updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete Task",
    description="Delete a task by id.",
    responses={
        204: {"description": "Task deleted"},
        404: {"model": ErrorOut, "description": "Task not found"},
    },
)
def delete_task(task_id: str, repo: Repository = Depends(get_repository)) -> Response:
    """
    Delete a Task. Returns 204 on success, 404 if not found.
    """
    if not repo.delete(task_id):
        raise TaskNotFoundError("not found")
    logger.info("deleted task %s", task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
