# mplus/domain/sessions.py
"""
Signup session lifecycle within one guild.

A newly created session becomes the current one immediately; older sessions
stay reachable by id until retention prunes them.
"""
from typing import Optional

from mplus.config.settings import settings
from mplus.domain.errors import SessionNotFound
from mplus.domain.models import GuildState, Session, now_ms

MINUTE_MS = 60_000


def prune_sessions(guild_state: GuildState, keep: int = 12, protect: Optional[str] = None) -> list:
    """
    Keep the `keep` most recently created sessions. Returns the dropped ids.

    Sessions created in the same millisecond rank by insertion order, later
    first. The `protect` id is never dropped and counts towards `keep`.
    """
    ordered = [
        s for _, s in sorted(
            enumerate(guild_state.sessions.values()),
            key=lambda item: (item[1].created_at, item[0]),
            reverse=True,
        )
    ]
    floor = 0
    if protect in guild_state.sessions:
        ordered.sort(key=lambda s: s.id != protect)
        floor = 1
    dropped = [s.id for s in ordered[max(keep, floor):]]
    for session_id in dropped:
        del guild_state.sessions[session_id]
    if guild_state.current_session_id in dropped:
        guild_state.current_session_id = None
    return dropped


def create_session(
    guild_state: GuildState,
    guild_id: str,
    title: str,
    description: str = "",
    lock_in_minutes: Optional[int] = None,
    now: Optional[int] = None,
    keep: Optional[int] = None,
) -> Session:
    now = now_ms() if now is None else now
    keep = settings.SESSION_RETENTION_DEFAULT if keep is None else keep

    session_id = f"s-{guild_id}-{now}"
    suffix = 1
    while session_id in guild_state.sessions:
        suffix += 1
        session_id = f"s-{guild_id}-{now}-{suffix}"

    session = Session(
        id=session_id,
        title=title,
        description=description or "",
        lock_at=now + lock_in_minutes * MINUTE_MS if lock_in_minutes else None,
        created_at=now,
    )
    guild_state.sessions[session_id] = session
    guild_state.current_session_id = session_id

    prune_sessions(guild_state, keep, protect=session_id)
    return session


def current_session(guild_state: GuildState) -> Session:
    session_id = guild_state.current_session_id
    if not session_id or session_id not in guild_state.sessions:
        raise SessionNotFound()
    return guild_state.sessions[session_id]


def get_session(guild_state: GuildState, session_id: str) -> Session:
    session = guild_state.sessions.get(session_id)
    if session is None:
        raise SessionNotFound(session_id)
    return session


def set_lock(session: Session, lock_at: Optional[int]) -> Session:
    session.lock_at = lock_at
    return session


def set_lock_in(session: Session, minutes: int, now: Optional[int] = None) -> Session:
    now = now_ms() if now is None else now
    return set_lock(session, now + minutes * MINUTE_MS)


def unlock(session: Session) -> Session:
    return set_lock(session, None)


def clear_signups(session: Session) -> Session:
    session.roster = {}
    session.draft = None
    return session
