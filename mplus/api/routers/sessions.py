# mplus/api/routers/sessions.py
"""
Session endpoints: create a signup session, read its summary, change its lock.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from mplus.api.deps import get_store, http_error, is_officer
from mplus.domain.models import to_document
from mplus.repositories.state_repos import StateStore
from mplus.services import organizer_service as service

router = APIRouter()


class CreateSessionReq(BaseModel):
    title: str
    description: str = ""
    lock_in_minutes: Optional[int] = None


class SetLockReq(BaseModel):
    minutes_from_now: int


def summary_to_dict(summary: service.SignupSummary) -> dict:
    return {
        "session_id": summary.session_id,
        "title": summary.title,
        "description": summary.description,
        "lock_at": summary.lock_at,
        "locked": summary.locked,
        "counts": {
            "tanks": summary.counts.tanks,
            "heals": summary.counts.heals,
            "dps": summary.counts.dps,
            "players": summary.counts.players,
        },
        "possible_groups": summary.possible_groups,
        "roster": {pid: to_document(signup) for pid, signup in summary.roster.items()},
    }


@router.post("/{guild_id}/sessions", summary="Create a new signup session (officer)")
async def create_session(
    guild_id: str,
    req: CreateSessionReq,
    store: StateStore = Depends(get_store),
    officer: bool = Depends(is_officer),
):
    try:
        session = await service.create_session(
            store,
            guild_id,
            req.title,
            description=req.description,
            lock_in_minutes=req.lock_in_minutes,
            is_officer=officer,
        )
    except Exception as e:
        raise http_error(e, "create_session")
    return to_document(session)


@router.get("/{guild_id}/sessions/current", summary="Summary of the current session")
async def current_session(guild_id: str, store: StateStore = Depends(get_store)):
    try:
        summary = await service.get_signup_summary(store, guild_id)
    except Exception as e:
        raise http_error(e, "current_session")
    return summary_to_dict(summary)


@router.get("/{guild_id}/sessions/{session_id}", summary="Summary of a session by id")
async def get_session(guild_id: str, session_id: str, store: StateStore = Depends(get_store)):
    try:
        summary = await service.get_signup_summary(store, guild_id, session_id)
    except Exception as e:
        raise http_error(e, "get_session")
    return summary_to_dict(summary)


@router.post("/{guild_id}/sessions/current/lock", summary="Set the lock time (officer)")
async def set_lock(
    guild_id: str,
    req: SetLockReq,
    store: StateStore = Depends(get_store),
    officer: bool = Depends(is_officer),
):
    try:
        session = await service.set_lock(store, guild_id, req.minutes_from_now, is_officer=officer)
    except Exception as e:
        raise http_error(e, "set_lock")
    return {"session_id": session.id, "lock_at": session.lock_at}


@router.post("/{guild_id}/sessions/current/unlock", summary="Remove the lock time (officer)")
async def unlock(guild_id: str, store: StateStore = Depends(get_store), officer: bool = Depends(is_officer)):
    try:
        session = await service.unlock_session(store, guild_id, is_officer=officer)
    except Exception as e:
        raise http_error(e, "unlock")
    return {"session_id": session.id, "lock_at": session.lock_at}


@router.post("/{guild_id}/sessions/current/clear", summary="Clear signups and draft (officer)")
async def clear(guild_id: str, store: StateStore = Depends(get_store), officer: bool = Depends(is_officer)):
    try:
        session = await service.clear_session(store, guild_id, is_officer=officer)
    except Exception as e:
        raise http_error(e, "clear")
    return {"session_id": session.id, "status": "cleared"}
