"""
Storage failure → domain error translation.

This is the only module that knows what storage-engine errors look like.
PostgreSQL reports constraint violations through SQLSTATE codes (asyncpg
and psycopg both expose them); SQLite reports them through extended error
names on Python 3.11+ and through the message text everywhere.  Missing
rows on update/delete are signalled by the gateway as ``NoResultFound``.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, NoResultFound

from core.errors import DomainError, ErrorKind

logger = logging.getLogger(__name__)

_PG_UNIQUE_VIOLATION = "23505"
_PG_FOREIGN_KEY_VIOLATION = "23503"

_SQLITE_UNIQUE = ("SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY")
_SQLITE_FOREIGN_KEY = ("SQLITE_CONSTRAINT_FOREIGNKEY",)


class StorageSignal(str, Enum):
    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"
    MISSING_ROW = "missing_row"
    OTHER = "other"


def _sqlstate(orig: object) -> Optional[str]:
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def _constraint_hint(exc: IntegrityError) -> str:
    """Best-effort text naming the violated constraint / column."""
    orig = exc.orig
    pieces = [str(orig)]
    for candidate in (orig, getattr(orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        diag = getattr(candidate, "diag", None)
        if name:
            pieces.append(name)
        if diag is not None and getattr(diag, "constraint_name", None):
            pieces.append(diag.constraint_name)
    return " ".join(pieces).lower()


def classify(exc: BaseException) -> StorageSignal:
    """Reduce a storage exception to the signal the domain cares about."""
    if isinstance(exc, NoResultFound):
        return StorageSignal.MISSING_ROW
    if not isinstance(exc, IntegrityError):
        return StorageSignal.OTHER

    orig = exc.orig
    state = _sqlstate(orig)
    if state == _PG_UNIQUE_VIOLATION:
        return StorageSignal.UNIQUE
    if state == _PG_FOREIGN_KEY_VIOLATION:
        return StorageSignal.FOREIGN_KEY

    error_name = getattr(orig, "sqlite_errorname", None)
    if error_name in _SQLITE_UNIQUE:
        return StorageSignal.UNIQUE
    if error_name in _SQLITE_FOREIGN_KEY:
        return StorageSignal.FOREIGN_KEY

    message = str(orig).lower()
    if "unique constraint" in message or "duplicate key" in message:
        return StorageSignal.UNIQUE
    if "foreign key constraint" in message:
        return StorageSignal.FOREIGN_KEY
    return StorageSignal.OTHER


def translate(
    exc: BaseException,
    allowed: Iterable[ErrorKind] = (),
) -> DomainError:
    """
    Map a storage exception onto a ``DomainError``.

    ``allowed`` lists the kinds the calling operation can meaningfully
    report; any other outcome collapses to ``INTERNAL`` with the original
    error kept as server-side detail.
    """
    signal = classify(exc)
    kind = ErrorKind.INTERNAL

    if signal is StorageSignal.UNIQUE and isinstance(exc, IntegrityError):
        # users.email is the only unique column outside primary keys.
        if "email" in _constraint_hint(exc):
            kind = ErrorKind.DUPLICATE_EMAIL
    elif signal is StorageSignal.FOREIGN_KEY:
        kind = ErrorKind.OWNER_NOT_FOUND
    elif signal is StorageSignal.MISSING_ROW:
        kind = ErrorKind.NOT_FOUND

    if kind is not ErrorKind.INTERNAL and kind in set(allowed):
        return DomainError.of(kind)

    logger.debug("Untranslatable storage failure (%s): %s", signal.value, exc)
    return DomainError.internal(f"{type(exc).__name__}: {exc}")
