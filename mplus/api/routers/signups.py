# mplus/api/routers/signups.py
"""
Self-service signup endpoints. Refused with 423 once the session is locked.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from mplus.api.deps import get_store, http_error
from mplus.domain.models import to_document
from mplus.domain.roles import Role, allowed_classes
from mplus.repositories.state_repos import StateStore
from mplus.services import organizer_service as service

router = APIRouter()


class ToggleRoleReq(BaseModel):
    participant_id: str
    display_name: Optional[str] = None


class SelectClassReq(BaseModel):
    participant_id: str
    class_id: Optional[str] = None


@router.get("/classes/{role}", summary="Classes that can perform a role")
async def list_classes(role: Role):
    return [{"id": cid, "label": label} for cid, label in allowed_classes(role)]


@router.post("/guilds/{guild_id}/sessions/{session_id}/roles/{role}/toggle", summary="Toggle a role")
async def toggle_role(
    guild_id: str,
    session_id: str,
    role: Role,
    req: ToggleRoleReq,
    store: StateStore = Depends(get_store),
):
    try:
        signup = await service.toggle_role(
            store, guild_id, session_id, req.participant_id, role, display_name=req.display_name
        )
    except Exception as e:
        raise http_error(e, "toggle_role")
    return {"participant_id": req.participant_id, **to_document(signup)}


@router.post("/guilds/{guild_id}/sessions/{session_id}/classes/{role}", summary="Select the class for a role")
async def select_class(
    guild_id: str,
    session_id: str,
    role: Role,
    req: SelectClassReq,
    store: StateStore = Depends(get_store),
):
    try:
        signup = await service.select_class(store, guild_id, session_id, req.participant_id, role, req.class_id)
    except Exception as e:
        raise http_error(e, "select_class")
    return {"participant_id": req.participant_id, **to_document(signup)}


@router.delete("/guilds/{guild_id}/sessions/{session_id}/signups/{participant_id}", summary="Leave a session")
async def leave(guild_id: str, session_id: str, participant_id: str, store: StateStore = Depends(get_store)):
    try:
        removed = await service.leave_session(store, guild_id, session_id, participant_id)
    except Exception as e:
        raise http_error(e, "leave")
    return {"participant_id": participant_id, "removed": removed}
