# mplus/domain/roster.py
"""
Self-service roster mutations for a signup session.

All mutators consult the session's lock deadline at call time and raise
LockedError once it has passed. They validate before writing, so a rejected
call leaves the roster untouched.
"""
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from mplus.domain.errors import InvalidSubAttribute, LockedError, RoleNotEligible
from mplus.domain.models import Session, Signup, now_ms
from mplus.domain.roles import DPS_PER_GROUP, GROUP_SIZE, ROLE_CLASSES, UNSET, Role


@dataclass(frozen=True)
class RoleCounts:
    tanks: int
    heals: int
    dps: int
    players: int

    @property
    def max_groups(self) -> int:
        return max(0, min(self.tanks, self.heals, self.dps // DPS_PER_GROUP, self.players // GROUP_SIZE))


def role_counts(roster: Mapping[str, Signup]) -> RoleCounts:
    signups = list(roster.values())
    return RoleCounts(
        tanks=sum(1 for s in signups if s.has_role(Role.TANK)),
        heals=sum(1 for s in signups if s.has_role(Role.HEAL)),
        dps=sum(1 for s in signups if s.has_role(Role.DPS)),
        players=len(signups),
    )


def is_locked(session: Session, now: Optional[int] = None) -> bool:
    if session.lock_at is None:
        return False
    now = now_ms() if now is None else now
    return now >= session.lock_at


def ensure_unlocked(session: Session, now: Optional[int] = None) -> None:
    if is_locked(session, now):
        raise LockedError(session.lock_at)


def toggle_role(
    session: Session,
    participant_id: str,
    role: Role,
    display_name: Optional[str] = None,
    now: Optional[int] = None,
) -> Signup:
    """Flip `role` in the participant's eligible set, creating the signup if needed."""
    ensure_unlocked(session, now)
    role = Role(role)

    signup = session.roster.get(participant_id)
    if signup is None:
        signup = Signup(display_name=display_name or "")
        session.roster[participant_id] = signup
    elif display_name:
        signup.display_name = display_name

    if role in signup.roles:
        signup.roles = [r for r in signup.roles if r != role]
    else:
        signup.roles = signup.roles + [role]
    return signup


def set_sub_attribute(
    session: Session,
    participant_id: str,
    role: Role,
    value: Optional[str],
    now: Optional[int] = None,
) -> Signup:
    """
    Attach a class to one of the participant's eligible roles.

    `None` or "UNSET" clears the stored class. The role must already be
    selected and the class must be able to perform it.
    """
    ensure_unlocked(session, now)
    role = Role(role)

    signup = session.roster.get(participant_id)
    if signup is None or not signup.has_role(role):
        raise RoleNotEligible(participant_id, role)

    if value is None or value == UNSET:
        class_id = None
    elif value in ROLE_CLASSES[role]:
        class_id = value
    else:
        raise InvalidSubAttribute(role, value)

    classes: Dict[Role, Optional[str]] = dict(signup.classes)
    classes[role] = class_id
    signup.classes = classes
    return signup


def remove_player(session: Session, participant_id: str, now: Optional[int] = None) -> bool:
    """Drop the participant's signup entirely. Returns False if they were not signed up."""
    ensure_unlocked(session, now)
    return session.roster.pop(participant_id, None) is not None
