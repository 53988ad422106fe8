# mplus/api/routers/drafts.py
"""
Draft endpoints (officer): roll, preview, swap, publish.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from mplus.api.deps import get_store, http_error, is_officer
from mplus.domain.models import to_document
from mplus.repositories.state_repos import StateStore
from mplus.services import organizer_service as service

router = APIRouter()


class RollReq(BaseModel):
    groups: Optional[int] = None
    attempts: Optional[int] = None


class SwapReq(BaseModel):
    a: str
    b: str
    force: bool = False


def outcome_to_dict(outcome: service.DraftOutcome) -> dict:
    return {
        "session_id": outcome.session_id,
        "reason": outcome.reason,
        "draft": to_document(outcome.draft),
    }


@router.post("/{guild_id}/draft/roll", summary="Roll groups without saving a draft")
async def roll(
    guild_id: str,
    req: RollReq,
    store: StateStore = Depends(get_store),
    officer: bool = Depends(is_officer),
):
    try:
        result = await service.roll_groups(store, guild_id, req.groups, req.attempts, is_officer=officer)
    except Exception as e:
        raise http_error(e, "roll")
    return {
        "reason": result.reason,
        "target_groups": result.target_groups,
        "groups": [to_document(g) for g in result.groups],
        "bench": [to_document(p) for p in result.bench],
    }


@router.post("/{guild_id}/draft/preview", summary="Roll groups into an editable draft")
async def preview(
    guild_id: str,
    req: RollReq,
    store: StateStore = Depends(get_store),
    officer: bool = Depends(is_officer),
):
    try:
        outcome = await service.preview_draft(store, guild_id, req.groups, req.attempts, is_officer=officer)
    except Exception as e:
        raise http_error(e, "preview")
    return outcome_to_dict(outcome)


@router.post("/{guild_id}/draft/swap", summary="Swap two players in the draft")
async def swap(
    guild_id: str,
    req: SwapReq,
    store: StateStore = Depends(get_store),
    officer: bool = Depends(is_officer),
):
    try:
        outcome = await service.swap_players(store, guild_id, req.a, req.b, force=req.force, is_officer=officer)
    except Exception as e:
        raise http_error(e, "swap")
    return outcome_to_dict(outcome)


@router.post("/{guild_id}/draft/publish", summary="Publish the current draft")
async def publish(guild_id: str, store: StateStore = Depends(get_store), officer: bool = Depends(is_officer)):
    try:
        outcome = await service.publish_draft(store, guild_id, is_officer=officer)
    except Exception as e:
        raise http_error(e, "publish")
    return outcome_to_dict(outcome)


@router.get("/{guild_id}/draft", summary="Current draft")
async def get_draft(guild_id: str, store: StateStore = Depends(get_store)):
    try:
        outcome = await service.get_draft(store, guild_id)
    except Exception as e:
        raise http_error(e, "get_draft")
    return outcome_to_dict(outcome)
