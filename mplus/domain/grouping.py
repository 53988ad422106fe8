# mplus/domain/grouping.py
"""
Randomized group solver.

Each attempt reshuffles the whole roster, draws a random tank and healer for
every group, then fills the DPS slots with a small backtracking search that
prefers the least flexible candidates. The best completed attempt wins; a
perfect attempt (every group full) stops the search early.

This is an anytime heuristic: it never claims the assignment is maximal.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import FrozenSet, List, Mapping, Optional, Sequence

from mplus.domain.models import Group, PlayerRef, Signup
from mplus.domain.roles import DPS_PER_GROUP, DPS_SLOTS, GROUP_SIZE, Role
from mplus.domain.roster import RoleCounts, role_counts

logger = logging.getLogger(__name__)


@dataclass
class GroupingOptions:
    desired_groups: Optional[int] = None
    attempts: int = 200
    shortlist_size: int = 10
    random_seed: Optional[int] = None
    rng: Optional[random.Random] = None

    def __post_init__(self):
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")
        if self.shortlist_size < 1:
            raise ValueError("shortlist_size must be at least 1")

    def make_rng(self) -> random.Random:
        return self.rng or random.Random(self.random_seed)


@dataclass
class RollResult:
    groups: List[Group]
    bench: List[PlayerRef]
    counts: RoleCounts
    target_groups: int
    reason: Optional[str] = None
    attempts_used: int = 0

    @property
    def ok(self) -> bool:
        return self.reason is None

    @property
    def is_no_solution(self) -> bool:
        return self.reason is not None


@dataclass
class _Attempt:
    groups: List[Group] = field(default_factory=list)
    bench: List[PlayerRef] = field(default_factory=list)
    placed: FrozenSet[str] = frozenset()


def players_from_roster(roster: Mapping[str, Signup]) -> List[PlayerRef]:
    return [
        PlayerRef(
            id=pid,
            name=signup.display_name or pid,
            roles=tuple(signup.roles),
            classes=dict(signup.classes),
        )
        for pid, signup in roster.items()
    ]


def target_group_count(counts: RoleCounts, desired_groups: Optional[int] = None) -> int:
    # 0 behaves like "not given"
    if desired_groups:
        return min(desired_groups, counts.max_groups)
    return counts.max_groups


def _pick(rng: random.Random, pool: Sequence[PlayerRef], role: Role, placed: FrozenSet[str]) -> Optional[PlayerRef]:
    candidates = [p for p in pool if role in p.roles and p.id not in placed]
    if not candidates:
        return None
    return rng.choice(candidates)


def _fill_dps(
    rng: random.Random,
    candidates: Sequence[PlayerRef],
    placed: FrozenSet[str],
    open_slots: int,
    shortlist_size: int,
) -> Optional[List[PlayerRef]]:
    """
    Choose `open_slots` DPS players not in `placed`, left to right.

    Returns the chosen players in slot order, or None if the remaining slots
    cannot be filled. `placed` is never mutated; each recursive frame gets its
    own extended copy.
    """
    if open_slots == 0:
        return []

    remaining = [p for p in candidates if p.id not in placed]
    if len(remaining) < open_slots:
        return None

    # least flexible first; sort is stable so ties keep the shuffled order
    remaining.sort(key=lambda p: len(p.roles))
    shortlist = remaining[:shortlist_size]
    rng.shuffle(shortlist)

    for player in shortlist:
        rest = _fill_dps(rng, candidates, placed | {player.id}, open_slots - 1, shortlist_size)
        if rest is not None:
            return [player] + rest
    return None


def _run_attempt(
    rng: random.Random,
    players: Sequence[PlayerRef],
    target_groups: int,
    shortlist_size: int,
) -> Optional[_Attempt]:
    pool = list(players)
    rng.shuffle(pool)

    attempt = _Attempt()
    for _ in range(target_groups):
        tank = _pick(rng, pool, Role.TANK, attempt.placed)
        if tank is None:
            return None
        attempt.placed = attempt.placed | {tank.id}

        heal = _pick(rng, pool, Role.HEAL, attempt.placed)
        if heal is None:
            return None
        attempt.placed = attempt.placed | {heal.id}

        attempt.groups.append(Group(tank=tank, heal=heal))

    dps_candidates = [p for p in pool if Role.DPS in p.roles]
    chosen = _fill_dps(rng, dps_candidates, attempt.placed, target_groups * DPS_PER_GROUP, shortlist_size)
    if chosen is None:
        return None

    for index, group in enumerate(attempt.groups):
        trio = chosen[index * DPS_PER_GROUP:(index + 1) * DPS_PER_GROUP]
        for slot, player in zip(DPS_SLOTS, trio):
            setattr(group, slot, player)
    attempt.placed = attempt.placed | {p.id for p in chosen}

    # bench keeps this attempt's shuffled order
    attempt.bench = [p for p in pool if p.id not in attempt.placed]
    return attempt


def roll_groups(roster: Mapping[str, Signup], options: Optional[GroupingOptions] = None) -> RollResult:
    """
    Partition the roster into full groups plus a bench.

    Never raises for an infeasible roster: the result then carries a `reason`,
    the role counts used, and the whole roster as bench.

    Example:
    >>> result = roll_groups(session.roster, GroupingOptions(desired_groups=2, random_seed=7))
    >>> result.ok, len(result.groups)
    (True, 2)
    """
    options = options or GroupingOptions()
    rng = options.make_rng()

    players = players_from_roster(roster)
    counts = role_counts(roster)
    target = target_group_count(counts, options.desired_groups)

    if target <= 0:
        reason = (
            f"Cannot form any full groups (tanks={counts.tanks}, heals={counts.heals}, "
            f"dps={counts.dps}, players={counts.players})."
        )
        logger.info("No groups possible: %s", reason)
        return RollResult(groups=[], bench=players, counts=counts, target_groups=target, reason=reason)

    best: Optional[_Attempt] = None
    best_score = -1
    perfect = target * GROUP_SIZE
    attempts_used = 0

    for _ in range(options.attempts):
        attempts_used += 1
        attempt = _run_attempt(rng, players, target, options.shortlist_size)
        if attempt is None:
            continue

        score = len(attempt.placed)
        if score > best_score:
            best, best_score = attempt, score
            if score == perfect:
                break

    logger.debug("Solver finished: target=%s attempts=%s score=%s", target, attempts_used, best_score)

    if best is None:
        reason = (
            f"Tried {options.attempts} solves but couldn't find a valid assignment. "
            "Role distribution is probably too tight."
        )
        logger.info("Solver exhausted its budget: %s", counts)
        return RollResult(
            groups=[],
            bench=players,
            counts=counts,
            target_groups=target,
            reason=reason,
            attempts_used=attempts_used,
        )

    return RollResult(
        groups=best.groups,
        bench=best.bench,
        counts=counts,
        target_groups=target,
        attempts_used=attempts_used,
    )
