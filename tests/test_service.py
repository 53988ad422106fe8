# tests/test_service.py
import logging

import pytest

from mplus.domain.errors import (
    DraftNotFound,
    InvalidRequest,
    LockedError,
    PermissionDenied,
    RoleMismatch,
    SessionNotFound,
)
from mplus.domain.roles import Role
from mplus.repositories.state_repos import JsonFileStateStore
from mplus.services import organizer_service as service

GUILD = "g1"

# one full group plus a spare dps
SMALL = {"t0": [Role.TANK], "h0": [Role.HEAL], "d0": [Role.DPS], "d1": [Role.DPS], "d2": [Role.DPS], "d3": [Role.DPS]}


async def _session_with(store, roster_layout, title="Weekly keys"):
    session = await service.create_session(store, GUILD, title, is_officer=True)
    for pid, roles in roster_layout.items():
        for role in roles:
            await service.toggle_role(store, GUILD, session.id, pid, role, display_name=pid.upper())
    return session


# -------------------------------
# Permissions
# -------------------------------

@pytest.mark.asyncio
async def test_officer_operations_refuse_members(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    with pytest.raises(PermissionDenied):
        await service.create_session(store, GUILD, "Nope")

    await _session_with(store, SMALL)
    with pytest.raises(PermissionDenied):
        await service.preview_draft(store, GUILD)
    with pytest.raises(PermissionDenied):
        await service.set_lock(store, GUILD, 10)
    with pytest.raises(PermissionDenied):
        await service.clear_session(store, GUILD)
    with pytest.raises(PermissionDenied):
        await service.swap_players(store, GUILD, "d0", "d1")


@pytest.mark.asyncio
async def test_no_session_yet(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    with pytest.raises(SessionNotFound):
        await service.get_signup_summary(store, GUILD)
    with pytest.raises(SessionNotFound):
        await service.toggle_role(store, GUILD, "s-missing", "u1", Role.DPS)


# -------------------------------
# Signups
# -------------------------------

@pytest.mark.asyncio
async def test_signups_show_up_in_summary(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    session = await _session_with(store, SMALL)
    await service.select_class(store, GUILD, session.id, "t0", Role.TANK, "DEMON_HUNTER")

    summary = await service.get_signup_summary(store, GUILD)
    assert summary.session_id == session.id
    assert summary.possible_groups == 1
    assert (summary.counts.tanks, summary.counts.heals, summary.counts.dps) == (1, 1, 4)
    assert summary.roster["t0"].classes[Role.TANK] == "DEMON_HUNTER"
    assert not summary.locked

    assert await service.leave_session(store, GUILD, session.id, "d3")
    assert not await service.leave_session(store, GUILD, session.id, "d3")
    assert (await service.get_signup_summary(store, GUILD, session.id)).counts.players == 5


@pytest.mark.asyncio
async def test_lock_blocks_signups_but_not_drafting(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    session = await _session_with(store, SMALL)
    await service.set_lock(store, GUILD, 0, is_officer=True)

    with pytest.raises(LockedError):
        await service.toggle_role(store, GUILD, session.id, "late", Role.DPS)
    with pytest.raises(LockedError):
        await service.leave_session(store, GUILD, session.id, "d0")

    outcome = await service.preview_draft(store, GUILD, is_officer=True, seed=1)
    assert len(outcome.draft.groups) == 1
    await service.swap_players(store, GUILD, "d0", "d3", is_officer=True)

    await service.unlock_session(store, GUILD, is_officer=True)
    await service.toggle_role(store, GUILD, session.id, "late", Role.DPS)


@pytest.mark.asyncio
async def test_set_lock_rejects_out_of_range(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    await _session_with(store, SMALL)
    with pytest.raises(ValueError):
        await service.set_lock(store, GUILD, -1, is_officer=True)


@pytest.mark.asyncio
async def test_create_session_rejects_out_of_range_lock(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    with pytest.raises(InvalidRequest):
        await service.create_session(store, GUILD, "Keys", lock_in_minutes=-5, is_officer=True)
    with pytest.raises(InvalidRequest):
        await service.create_session(store, GUILD, "Keys", lock_in_minutes=60 * 24 * 365, is_officer=True)
    with pytest.raises(SessionNotFound):
        await service.get_signup_summary(store, GUILD)


@pytest.mark.asyncio
async def test_refusals_are_logged_as_warnings(tmp_path, caplog):
    store = JsonFileStateStore(tmp_path / "state.json")
    session = await _session_with(store, SMALL)
    await service.preview_draft(store, GUILD, is_officer=True, seed=2)
    await service.set_lock(store, GUILD, 0, is_officer=True)

    with caplog.at_level(logging.WARNING, logger="mplus.services.organizer_service"):
        with pytest.raises(PermissionDenied):
            await service.clear_session(store, GUILD)
        with pytest.raises(LockedError):
            await service.toggle_role(store, GUILD, session.id, "late", Role.DPS)
        with pytest.raises(RoleMismatch):
            await service.swap_players(store, GUILD, "t0", "d0", is_officer=True)

    refused = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert [r.getMessage().split(" ")[0] for r in refused] == ["clear_session", "toggle_role", "swap_players"]
    assert all(GUILD in r.getMessage() for r in refused)


@pytest.mark.asyncio
async def test_bad_attempt_count_is_a_request_error(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    await _session_with(store, SMALL)
    with pytest.raises(InvalidRequest):
        await service.roll_groups(store, GUILD, attempts=-3, is_officer=True)


# -------------------------------
# Drafts
# -------------------------------

@pytest.mark.asyncio
async def test_roll_does_not_store_a_draft(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    await _session_with(store, SMALL)

    result = await service.roll_groups(store, GUILD, is_officer=True, seed=3)
    assert result.ok
    assert len(result.groups) == 1
    with pytest.raises(DraftNotFound):
        await service.get_draft(store, GUILD)


@pytest.mark.asyncio
async def test_preview_then_swap_and_publish(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    await _session_with(store, SMALL)

    outcome = await service.preview_draft(store, GUILD, is_officer=True, seed=7)
    assert outcome.reason is None
    group = outcome.draft.groups[0]
    assert group.tank.id == "t0"
    assert group.heal.id == "h0"
    benched = outcome.draft.bench[0].id
    placed_dps = group.dps1.id

    swapped = await service.swap_players(store, GUILD, placed_dps, benched, is_officer=True)
    assert swapped.draft.groups[0].dps1.id == benched
    assert swapped.draft.bench[0].id == placed_dps

    published = await service.publish_draft(store, GUILD, is_officer=True)
    assert published.draft == swapped.draft

    # still editable after publishing
    again = await service.swap_players(store, GUILD, benched, placed_dps, is_officer=True)
    assert again.draft.groups[0].dps1.id == placed_dps


@pytest.mark.asyncio
async def test_rejected_swap_leaves_stored_draft_unchanged(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    await _session_with(store, SMALL)
    await service.preview_draft(store, GUILD, is_officer=True, seed=2)
    before = (await service.get_draft(store, GUILD)).draft

    with pytest.raises(RoleMismatch):
        await service.swap_players(store, GUILD, "t0", "d0", is_officer=True)

    assert (await service.get_draft(store, GUILD)).draft == before

    forced = await service.swap_players(store, GUILD, "t0", "h0", force=True, is_officer=True)
    assert forced.draft.groups[0].tank.id == "h0"


@pytest.mark.asyncio
async def test_swap_picks_up_class_changes(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    session = await _session_with(store, SMALL)
    await service.preview_draft(store, GUILD, is_officer=True, seed=2)
    await service.select_class(store, GUILD, session.id, "t0", Role.TANK, "WARRIOR")

    outcome = await service.swap_players(store, GUILD, "d0", "d1", is_officer=True)
    assert outcome.draft.groups[0].tank.classes[Role.TANK] == "WARRIOR"


@pytest.mark.asyncio
async def test_preview_without_enough_players_keeps_reason(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    await _session_with(store, {"t0": [Role.TANK], "d0": [Role.DPS]})

    outcome = await service.preview_draft(store, GUILD, is_officer=True)
    assert outcome.draft.groups == []
    assert outcome.reason.startswith("Cannot form any full groups")


@pytest.mark.asyncio
async def test_no_draft_to_swap_or_publish(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    await _session_with(store, SMALL)
    with pytest.raises(DraftNotFound):
        await service.swap_players(store, GUILD, "d0", "d1", is_officer=True)
    with pytest.raises(DraftNotFound):
        await service.publish_draft(store, GUILD, is_officer=True)


# -------------------------------
# Session lifecycle
# -------------------------------

@pytest.mark.asyncio
async def test_clear_keeps_session_and_lock(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    session = await _session_with(store, SMALL)
    await service.preview_draft(store, GUILD, is_officer=True)
    locked = await service.set_lock(store, GUILD, 30, is_officer=True)

    await service.clear_session(store, GUILD, is_officer=True)

    summary = await service.get_signup_summary(store, GUILD)
    assert summary.session_id == session.id
    assert summary.roster == {}
    assert summary.lock_at == locked.lock_at
    with pytest.raises(DraftNotFound):
        await service.get_draft(store, GUILD)


@pytest.mark.asyncio
async def test_new_session_replaces_current_and_old_stays_readable(tmp_path):
    store = JsonFileStateStore(tmp_path / "state.json")
    first = await _session_with(store, SMALL, title="First")
    second = await service.create_session(store, GUILD, "Second", lock_in_minutes=60, is_officer=True)

    current = await service.get_signup_summary(store, GUILD)
    assert current.session_id == second.id
    assert current.roster == {}
    assert current.lock_at is not None

    old = await service.get_signup_summary(store, GUILD, first.id)
    assert old.counts.players == 6
