# mplus/services/organizer_service.py
"""
Application services, one per trigger.

Each function runs inside a store transaction for the guild, so the
load -> mutate -> save cycle is serialized per guild. Officer-only operations
take the caller's privilege as `is_officer`; how it is determined is up to the
caller.
"""
import functools
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from mplus.config.settings import settings
from mplus.domain import roster as roster_logic
from mplus.domain import sessions as session_logic
from mplus.domain.draft import draft_from_result, hydrate_classes, swap
from mplus.domain.errors import DraftNotFound, InvalidRequest, OrganizerError, PermissionDenied
from mplus.domain.grouping import GroupingOptions, RollResult, roll_groups as solve
from mplus.domain.models import Draft, Session, Signup
from mplus.domain.roles import Role
from mplus.domain.roster import RoleCounts
from mplus.repositories.state_repos import StateStore

logger = logging.getLogger(__name__)


@dataclass
class SignupSummary:
    session_id: str
    title: str
    description: str
    lock_at: Optional[int]
    locked: bool
    counts: RoleCounts
    possible_groups: int
    roster: Dict[str, Signup]


@dataclass
class DraftOutcome:
    session_id: str
    draft: Draft
    reason: Optional[str] = None


def logs_refusals(func):
    """Log rejected calls at WARNING before the error reaches the caller."""

    @functools.wraps(func)
    async def wrapper(store, guild_id, *args, **kwargs):
        try:
            return await func(store, guild_id, *args, **kwargs)
        except OrganizerError as e:
            logger.warning("%s refused in guild %s: %s", func.__name__, guild_id, e)
            raise

    return wrapper


def require_officer(is_officer: bool) -> None:
    if not is_officer:
        raise PermissionDenied()


def _check_lock_minutes(minutes: int) -> None:
    if minutes < 0 or minutes > settings.LOCK_MINUTES_MAX:
        raise InvalidRequest(f"Lock minutes must be between 0 and {settings.LOCK_MINUTES_MAX}.")


def _grouping_options(groups: Optional[int], attempts: Optional[int], seed: Optional[int] = None) -> GroupingOptions:
    try:
        return GroupingOptions(
            desired_groups=groups,
            attempts=attempts or settings.SOLVER_ATTEMPTS_DEFAULT,
            shortlist_size=settings.SOLVER_SHORTLIST_SIZE,
            random_seed=seed,
        )
    except ValueError as e:
        raise InvalidRequest(str(e)) from e


def _require_draft(session: Session) -> Draft:
    if session.draft is None:
        raise DraftNotFound(session.id)
    return session.draft


# ----------------------------
# Session lifecycle (officer)
# ----------------------------

@logs_refusals
async def create_session(
    store: StateStore,
    guild_id: str,
    title: str,
    description: str = "",
    lock_in_minutes: Optional[int] = None,
    is_officer: bool = False,
) -> Session:
    require_officer(is_officer)
    if lock_in_minutes is not None:
        _check_lock_minutes(lock_in_minutes)
    async with store.transaction(guild_id) as guild_state:
        session = session_logic.create_session(
            guild_state,
            guild_id,
            title,
            description=description,
            lock_in_minutes=lock_in_minutes,
        )
    logger.info("Created session %s in guild %s", session.id, guild_id)
    return session


@logs_refusals
async def set_lock(store: StateStore, guild_id: str, minutes_from_now: int, is_officer: bool = False) -> Session:
    require_officer(is_officer)
    _check_lock_minutes(minutes_from_now)
    async with store.transaction(guild_id) as guild_state:
        session = session_logic.current_session(guild_state)
        session_logic.set_lock_in(session, minutes_from_now)
    logger.info("Session %s locks at %s", session.id, session.lock_at)
    return session


@logs_refusals
async def unlock_session(store: StateStore, guild_id: str, is_officer: bool = False) -> Session:
    require_officer(is_officer)
    async with store.transaction(guild_id) as guild_state:
        session = session_logic.unlock(session_logic.current_session(guild_state))
    logger.info("Session %s unlocked", session.id)
    return session


@logs_refusals
async def clear_session(store: StateStore, guild_id: str, is_officer: bool = False) -> Session:
    require_officer(is_officer)
    async with store.transaction(guild_id) as guild_state:
        session = session_logic.clear_signups(session_logic.current_session(guild_state))
    logger.info("Session %s signups cleared", session.id)
    return session


# ----------------------------
# Signups (self-service)
# ----------------------------

@logs_refusals
async def toggle_role(
    store: StateStore,
    guild_id: str,
    session_id: str,
    participant_id: str,
    role: Role,
    display_name: Optional[str] = None,
) -> Signup:
    async with store.transaction(guild_id) as guild_state:
        session = session_logic.get_session(guild_state, session_id)
        signup = roster_logic.toggle_role(session, participant_id, role, display_name=display_name)
    logger.info("%s toggled %s in %s", participant_id, Role(role).value, session_id)
    return signup


@logs_refusals
async def select_class(
    store: StateStore,
    guild_id: str,
    session_id: str,
    participant_id: str,
    role: Role,
    class_id: Optional[str],
) -> Signup:
    async with store.transaction(guild_id) as guild_state:
        session = session_logic.get_session(guild_state, session_id)
        signup = roster_logic.set_sub_attribute(session, participant_id, role, class_id)
    return signup


@logs_refusals
async def leave_session(store: StateStore, guild_id: str, session_id: str, participant_id: str) -> bool:
    async with store.transaction(guild_id) as guild_state:
        session = session_logic.get_session(guild_state, session_id)
        removed = roster_logic.remove_player(session, participant_id)
    if removed:
        logger.info("%s left %s", participant_id, session_id)
    return removed


async def get_signup_summary(store: StateStore, guild_id: str, session_id: Optional[str] = None) -> SignupSummary:
    guild_state = await store.read(guild_id)
    if session_id is None:
        session = session_logic.current_session(guild_state)
    else:
        session = session_logic.get_session(guild_state, session_id)

    counts = roster_logic.role_counts(session.roster)
    return SignupSummary(
        session_id=session.id,
        title=session.title,
        description=session.description,
        lock_at=session.lock_at,
        locked=roster_logic.is_locked(session),
        counts=counts,
        possible_groups=counts.max_groups,
        roster=session.roster,
    )


# ----------------------------
# Drafts (officer, never lock-gated)
# ----------------------------

@logs_refusals
async def roll_groups(
    store: StateStore,
    guild_id: str,
    groups: Optional[int] = None,
    attempts: Optional[int] = None,
    is_officer: bool = False,
    seed: Optional[int] = None,
) -> RollResult:
    """Roll groups for the current session without storing them as its draft."""
    require_officer(is_officer)
    guild_state = await store.read(guild_id)
    session = session_logic.current_session(guild_state)
    return solve(session.roster, _grouping_options(groups, attempts, seed))


@logs_refusals
async def preview_draft(
    store: StateStore,
    guild_id: str,
    groups: Optional[int] = None,
    attempts: Optional[int] = None,
    is_officer: bool = False,
    seed: Optional[int] = None,
) -> DraftOutcome:
    """Roll groups and store them as the current session's editable draft."""
    require_officer(is_officer)
    async with store.transaction(guild_id) as guild_state:
        session = session_logic.current_session(guild_state)
        result = solve(session.roster, _grouping_options(groups, attempts, seed))
        session.draft = draft_from_result(result)
    if result.is_no_solution:
        logger.warning("Draft for %s has no groups: %s", session.id, result.reason)
    else:
        logger.info("Draft for %s: %d groups, %d benched", session.id, len(result.groups), len(result.bench))
    return DraftOutcome(session_id=session.id, draft=session.draft, reason=result.reason)


@logs_refusals
async def swap_players(
    store: StateStore,
    guild_id: str,
    participant_a: str,
    participant_b: str,
    force: bool = False,
    is_officer: bool = False,
) -> DraftOutcome:
    require_officer(is_officer)
    async with store.transaction(guild_id) as guild_state:
        session = session_logic.current_session(guild_state)
        draft = _require_draft(session)
        swap(draft, participant_a, participant_b, force=force)
        hydrate_classes(draft, session.roster)
    logger.info("Swapped %s and %s in %s (force=%s)", participant_a, participant_b, session.id, force)
    return DraftOutcome(session_id=session.id, draft=draft)


@logs_refusals
async def publish_draft(store: StateStore, guild_id: str, is_officer: bool = False) -> DraftOutcome:
    """
    Hand the current draft to the caller for posting.

    Publishing is a notification only: the draft stays editable afterwards.
    """
    require_officer(is_officer)
    guild_state = await store.read(guild_id)
    session = session_logic.current_session(guild_state)
    draft = _require_draft(session)
    logger.info("Published draft for %s", session.id)
    return DraftOutcome(session_id=session.id, draft=draft)


async def get_draft(store: StateStore, guild_id: str) -> DraftOutcome:
    guild_state = await store.read(guild_id)
    session = session_logic.current_session(guild_state)
    return DraftOutcome(session_id=session.id, draft=_require_draft(session))
