"""
Persistence gateway — CRUD primitives for users and tasks.

The gateway owns the async engine and session factory.  It is constructed
explicitly, opened at process start and closed at shutdown (the FastAPI
lifespan does both).  Every method runs in its own short session: one
statement, committed on success, rolled back on error.

Failures are not interpreted here.  Constraint violations surface as
``IntegrityError``; updates and deletes that find no row raise
``NoResultFound``.  ``database.translator`` turns both into domain errors.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy import event, select
from sqlalchemy.exc import NoResultFound
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import Settings
from database.models import Base, Task, User
from utils.schemas import TaskView, UserRecord

logger = logging.getLogger(__name__)

_USER_FIELDS = {"email", "name", "password_hash"}
_TASK_FIELDS = {"title", "description", "status"}


def _to_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    """Parse an id; anything that is not a UUID cannot name a row."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _user_record(row: User, include_hash: bool = False) -> UserRecord:
    return UserRecord(
        id=row.user_id,
        email=row.email,
        name=row.name,
        created_at=row.created_at,
        updated_at=row.updated_at,
        password_hash=row.password_hash if include_hash else None,
    )


def _task_view(row: Task) -> TaskView:
    return TaskView(
        id=row.task_id,
        title=row.title,
        description=row.description,
        status=row.status,
        owner_id=row.owner_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class PersistenceGateway:
    def __init__(
        self,
        database_url: str,
        *,
        echo: bool = False,
        create_schema: bool = False,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_recycle: int = 3600,
    ) -> None:
        self.database_url = database_url
        self.echo = echo
        self.create_schema = create_schema
        self._pool_options = {
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_recycle": pool_recycle,
        }
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "PersistenceGateway":
        return cls(
            settings.database_url,
            echo=settings.db_echo,
            create_schema=settings.db_create_schema,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=settings.db_pool_recycle,
        )

    # ── Lifecycle ──────────────────────────────────────────────────────

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        if self._engine is not None:
            return
        is_sqlite = self.database_url.startswith("sqlite")
        options: Dict[str, Any] = {} if is_sqlite else dict(self._pool_options)
        engine = create_async_engine(self.database_url, echo=self.echo, **options)
        if is_sqlite:
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        if self.create_schema:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Persistence gateway opened (%s)", engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Persistence gateway closed")

    async def __aenter__(self) -> "PersistenceGateway":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._session_factory is None:
            raise RuntimeError("PersistenceGateway is not open")
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    # ── Users ──────────────────────────────────────────────────────────

    async def create_user(self, email: str, name: str, password_hash: str) -> UserRecord:
        async with self.session() as session:
            user = User(email=email, name=name, password_hash=password_hash)
            session.add(user)
            await session.flush()
            return _user_record(user)

    async def find_user_by_email(
        self, email: str, include_hash: bool = False
    ) -> Optional[UserRecord]:
        async with self.session() as session:
            result = await session.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
            return _user_record(user, include_hash) if user else None

    async def find_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        uid = _to_uuid(user_id)
        if uid is None:
            return None
        async with self.session() as session:
            user = await session.get(User, uid)
            return _user_record(user) if user else None

    async def list_users(self) -> List[UserRecord]:
        async with self.session() as session:
            result = await session.execute(select(User).order_by(User.created_at.asc()))
            return [_user_record(user) for user in result.scalars()]

    async def update_user(self, user_id: str, fields: Dict[str, Any]) -> UserRecord:
        unknown = set(fields) - _USER_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)}")
        async with self.session() as session:
            user = await self._get_or_raise(session, User, user_id)
            for name, value in fields.items():
                setattr(user, name, value)
            user.updated_at = datetime.now(timezone.utc)
            await session.flush()
            return _user_record(user)

    async def delete_user(self, user_id: str) -> UserRecord:
        async with self.session() as session:
            user = await self._get_or_raise(session, User, user_id)
            record = _user_record(user)
            await session.delete(user)
            await session.flush()
            return record

    # ── Tasks ──────────────────────────────────────────────────────────

    async def create_task(
        self, title: str, description: Optional[str], owner_id: str
    ) -> TaskView:
        async with self.session() as session:
            task = Task(title=title, description=description, owner_id=_to_uuid(owner_id))
            session.add(task)
            await session.flush()
            return _task_view(task)

    async def find_task_by_id(self, task_id: str) -> Optional[TaskView]:
        tid = _to_uuid(task_id)
        if tid is None:
            return None
        async with self.session() as session:
            task = await session.get(Task, tid)
            return _task_view(task) if task else None

    async def list_tasks_by_owner(self, owner_id: str) -> List[TaskView]:
        uid = _to_uuid(owner_id)
        if uid is None:
            return []
        async with self.session() as session:
            result = await session.execute(
                select(Task)
                .where(Task.owner_id == uid)
                .order_by(Task.created_at.desc())
            )
            return [_task_view(task) for task in result.scalars()]

    async def update_task(self, task_id: str, fields: Dict[str, Any]) -> TaskView:
        unknown = set(fields) - _TASK_FIELDS
        if unknown:
            raise ValueError(f"Unknown task fields: {sorted(unknown)}")
        async with self.session() as session:
            task = await self._get_or_raise(session, Task, task_id)
            for name, value in fields.items():
                setattr(task, name, value)
            task.updated_at = datetime.now(timezone.utc)
            await session.flush()
            return _task_view(task)

    async def delete_task(self, task_id: str) -> TaskView:
        async with self.session() as session:
            task = await self._get_or_raise(session, Task, task_id)
            view = _task_view(task)
            await session.delete(task)
            await session.flush()
            return view

    @staticmethod
    async def _get_or_raise(session: AsyncSession, model: type, row_id: str):
        pk = _to_uuid(row_id)
        row = await session.get(model, pk) if pk is not None else None
        if row is None:
            raise NoResultFound(f"No {model.__tablename__} row with id {row_id}")
        return row
