"""
Input normalizers shared by the auth and task services.
"""

from __future__ import annotations

import logging
from typing import Optional

from utils.schemas import TaskStatus

logger = logging.getLogger(__name__)

# Alternate spellings accepted for a task status, after case-folding.
_STATUS_ALIASES = {
    "completed": TaskStatus.DONE,
}


def normalize_email(email: str) -> str:
    """Lowercase (and trim) an email.  Applying it twice changes nothing."""
    return email.strip().lower()


def normalize_status(value: str) -> Optional[TaskStatus]:
    """
    Map a user-supplied status onto ``TaskStatus``.

    Matching is case-insensitive.  Returns ``None`` for anything that is not
    a known status or alias; callers leave the stored status untouched then.
    """
    folded = value.strip().casefold()
    for status in TaskStatus:
        if folded == status.value.casefold():
            return status
    alias = _STATUS_ALIASES.get(folded)
    if alias is None:
        logger.debug("Ignoring unknown task status %r", value)
    return alias
