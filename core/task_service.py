"""
Ownership-scoped task operations.

Every read and write is keyed by the caller's identity.  A task that exists
but belongs to someone else is reported exactly like a task that does not
exist.  Update and delete check ownership first and mutate in a second,
separate gateway call; if the row disappears in between, the mutation fails
with NOT_FOUND.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from core.errors import ErrorKind, Result
from database.gateway import PersistenceGateway
from database.translator import translate
from utils.schemas import UNSET, TaskView, present_fields
from utils.validators import normalize_status

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"


class TaskService:
    def __init__(self, gateway: PersistenceGateway) -> None:
        self.gateway = gateway

    @staticmethod
    def _not_found() -> Result:
        return Result.fail(ErrorKind.NOT_FOUND, TASK_NOT_FOUND)

    @staticmethod
    def _storage_failure(exc: SQLAlchemyError, *allowed: ErrorKind) -> Result:
        error = translate(exc, allowed=allowed)
        if error.kind is ErrorKind.NOT_FOUND:
            return TaskService._not_found()
        return Result.failure(error)

    async def list(self, owner_id: str) -> Result[List[TaskView]]:
        """All tasks owned by ``owner_id``, newest first."""
        logger.info("Getting all tasks for user: %s", owner_id)
        try:
            return Result.success(await self.gateway.list_tasks_by_owner(owner_id))
        except SQLAlchemyError as exc:
            logger.error("Failed to get tasks for %s: %s", owner_id, exc)
            return self._storage_failure(exc)

    async def create(
        self, title: str, description: Optional[str], owner_id: str
    ) -> Result[TaskView]:
        logger.info("Creating task %r for user: %s", title, owner_id)
        try:
            task = await self.gateway.create_task(title, description, owner_id)
        except SQLAlchemyError as exc:
            result = self._storage_failure(exc, ErrorKind.OWNER_NOT_FOUND)
            if result.error.kind is ErrorKind.OWNER_NOT_FOUND:
                logger.warning("Create task failed: user not found - %s", owner_id)
            else:
                logger.error("Failed to create task: %s", exc)
            return result
        return Result.success(task)

    async def get_by_id(self, task_id: str, requester_id: str) -> Result[TaskView]:
        logger.info("Getting task %s for user: %s", task_id, requester_id)
        try:
            task = await self.gateway.find_task_by_id(task_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to get task %s: %s", task_id, exc)
            return self._storage_failure(exc)

        if task is None:
            logger.warning("Task not found: %s", task_id)
            return self._not_found()
        if str(task.owner_id) != str(requester_id):
            logger.warning(
                "Unauthorized access attempt: user %s tried to access task %s",
                requester_id,
                task_id,
            )
            return self._not_found()
        return Result.success(task)

    async def update(
        self,
        task_id: str,
        requester_id: str,
        *,
        title: Any = UNSET,
        description: Any = UNSET,
        status: Any = UNSET,
    ) -> Result[TaskView]:
        """
        Apply the supplied fields to a task the requester owns.

        ``status`` is case-insensitive and accepts ``completed`` for DONE;
        an unrecognised status is dropped while the other fields still apply.
        ``description=None`` clears the description.
        """
        logger.info("Updating task %s for user: %s", task_id, requester_id)
        checked = await self.get_by_id(task_id, requester_id)
        if not checked.ok:
            return checked

        fields = present_fields(title=title, description=description)
        if status is not UNSET and status is not None:
            normalized = normalize_status(status)
            if normalized is not None:
                fields["status"] = normalized.value

        try:
            task = await self.gateway.update_task(task_id, fields)
        except SQLAlchemyError as exc:
            logger.warning("Update task failed for %s: %s", task_id, exc)
            return self._storage_failure(exc, ErrorKind.NOT_FOUND)
        return Result.success(task)

    async def delete(self, task_id: str, requester_id: str) -> Result[None]:
        logger.info("Deleting task %s for user: %s", task_id, requester_id)
        checked = await self.get_by_id(task_id, requester_id)
        if not checked.ok:
            return Result.failure(checked.error)

        try:
            await self.gateway.delete_task(task_id)
        except SQLAlchemyError as exc:
            logger.warning("Delete task failed for %s: %s", task_id, exc)
            return self._storage_failure(exc, ErrorKind.NOT_FOUND)
        return Result.success(None)
