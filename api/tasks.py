"""
Task routes.  Every route requires a bearer token and acts on the caller's
own tasks only.

Route prefix: /api/v1/tasks
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from api.dependencies import get_task_service
from api.errors import unwrap
from auth.dependencies import get_current_user_id
from core.task_service import TaskService
from utils.schemas import CreateTaskRequest, TaskView, UpdateTaskRequest

router = APIRouter(tags=["tasks"])


@router.get("", response_model=List[TaskView])
async def list_tasks(
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service),
) -> List[TaskView]:
    return unwrap(await tasks.list(user_id))


@router.post("", response_model=TaskView, status_code=status.HTTP_201_CREATED)
async def create_task(
    req: CreateTaskRequest,
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service),
) -> TaskView:
    return unwrap(await tasks.create(req.title, req.description, user_id))


@router.get("/{task_id}", response_model=TaskView)
async def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service),
) -> TaskView:
    return unwrap(await tasks.get_by_id(task_id, user_id))


@router.patch("/{task_id}", response_model=TaskView)
async def update_task(
    task_id: str,
    req: UpdateTaskRequest,
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service),
) -> TaskView:
    # Only the keys the client actually sent.
    changes = req.model_dump(exclude_unset=True)
    return unwrap(await tasks.update(task_id, user_id, **changes))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    tasks: TaskService = Depends(get_task_service),
) -> Response:
    unwrap(await tasks.delete(task_id, user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
