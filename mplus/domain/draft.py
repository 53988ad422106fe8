# mplus/domain/draft.py
"""
Draft construction and officer-directed corrections.

A draft holds snapshots of the players it was built from. Swaps exchange two
occupied positions, so a participant can never end up in two places.
"""
from dataclasses import dataclass
from typing import Mapping, Optional

from mplus.domain.errors import NotInDraft, RoleMismatch
from mplus.domain.grouping import RollResult
from mplus.domain.models import Draft, PlayerRef, Signup, now_ms
from mplus.domain.roles import SLOT_ROLES, Role


@dataclass(frozen=True)
class SlotRef:
    group_index: Optional[int] = None
    slot: Optional[str] = None
    bench_index: Optional[int] = None

    @property
    def on_bench(self) -> bool:
        return self.bench_index is not None

    @property
    def required_role(self) -> Optional[Role]:
        if self.on_bench:
            return None
        return SLOT_ROLES[self.slot]

    @property
    def label(self) -> str:
        if self.on_bench:
            return "bench"
        return f"group {self.group_index + 1} {self.slot}"


def draft_from_result(result: RollResult, now: Optional[int] = None) -> Draft:
    return Draft(
        created_at=now_ms() if now is None else now,
        groups=[g.model_copy(deep=True) for g in result.groups],
        bench=list(result.bench),
    )


def locate(draft: Draft, participant_id: str) -> SlotRef:
    for gi, group in enumerate(draft.groups):
        for slot, player in group.members().items():
            if player is not None and player.id == participant_id:
                return SlotRef(group_index=gi, slot=slot)
    for bi, player in enumerate(draft.bench):
        if player.id == participant_id:
            return SlotRef(bench_index=bi)
    raise NotInDraft(participant_id)


def _get(draft: Draft, ref: SlotRef) -> PlayerRef:
    if ref.on_bench:
        return draft.bench[ref.bench_index]
    return getattr(draft.groups[ref.group_index], ref.slot)


def _put(draft: Draft, ref: SlotRef, player: PlayerRef) -> None:
    if ref.on_bench:
        draft.bench[ref.bench_index] = player
    else:
        setattr(draft.groups[ref.group_index], ref.slot, player)


def swap(draft: Draft, participant_a: str, participant_b: str, force: bool = False) -> Draft:
    """
    Exchange two participants between their positions (group slots or bench).

    Unless `force` is set, each player must be eligible for the role of the
    slot they move into; the bench accepts anyone. Every check runs before the
    draft is touched, so a rejected swap leaves it unchanged.
    """
    ref_a = locate(draft, participant_a)
    ref_b = locate(draft, participant_b)
    if ref_a == ref_b:
        return draft

    player_a = _get(draft, ref_a)
    player_b = _get(draft, ref_b)

    if not force:
        if not player_a.eligible_for(ref_b.required_role):
            raise RoleMismatch(player_a.id, ref_b.label)
        if not player_b.eligible_for(ref_a.required_role):
            raise RoleMismatch(player_b.id, ref_a.label)

    _put(draft, ref_a, player_b)
    _put(draft, ref_b, player_a)
    return draft


def hydrate_classes(draft: Draft, roster: Mapping[str, Signup]) -> Draft:
    """Refresh the class choices of every drafted player still on the roster."""

    def refreshed(player: Optional[PlayerRef]) -> Optional[PlayerRef]:
        if player is None or player.id not in roster:
            return player
        return player.model_copy(update={"classes": dict(roster[player.id].classes)})

    for group in draft.groups:
        for slot, player in group.members().items():
            setattr(group, slot, refreshed(player))
    draft.bench = [refreshed(p) for p in draft.bench]
    return draft
