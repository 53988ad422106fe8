# mplus/api/deps.py
import logging

from fastapi import Header, HTTPException, Request

from mplus.domain.errors import (
    DraftNotFound,
    LockedError,
    NotInDraft,
    OrganizerError,
    PermissionDenied,
    RoleMismatch,
    SessionNotFound,
)
from mplus.repositories.state_repos import StateStore

logger = logging.getLogger(__name__)

ERROR_STATUS = [
    ((SessionNotFound, NotInDraft, DraftNotFound), 404),
    (PermissionDenied, 403),
    (LockedError, 423),
    (RoleMismatch, 409),
]


def get_store(request: Request) -> StateStore:
    return request.app.state.store


def is_officer(x_officer: bool = Header(False)) -> bool:
    """Privilege flag supplied by whatever fronts the API (bot, gateway)."""
    return x_officer


def http_error(exc: Exception, action: str) -> HTTPException:
    """
    Translate an exception raised by a service call.

    Organizer errors are the caller's fault and keep their message. Anything
    else (corrupt state, storage outage) is logged with its traceback and
    reported as 500. Call from inside the `except` block.
    """
    if isinstance(exc, OrganizerError):
        for kinds, status_code in ERROR_STATUS:
            if isinstance(exc, kinds):
                return HTTPException(status_code=status_code, detail=str(exc))
        return HTTPException(status_code=400, detail=str(exc))

    logger.exception("%s failed", action)
    return HTTPException(status_code=500, detail="Internal error")
