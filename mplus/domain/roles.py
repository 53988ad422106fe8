# mplus/domain/roles.py
"""
Role and class catalogue.

A group has one TANK slot, one HEAL slot and three DPS slots. A participant
may optionally attach a class to each role they signed up for; which classes
are allowed depends on the role.
"""
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple


class Role(str, Enum):
    TANK = "TANK"
    HEAL = "HEAL"
    DPS = "DPS"


UNSET = "UNSET"

# (id, label)
CLASSES: List[Tuple[str, str]] = [
    ("WARRIOR", "Warrior"),
    ("PALADIN", "Paladin"),
    ("HUNTER", "Hunter"),
    ("ROGUE", "Rogue"),
    ("PRIEST", "Priest"),
    ("DEATH_KNIGHT", "Death Knight"),
    ("SHAMAN", "Shaman"),
    ("MAGE", "Mage"),
    ("WARLOCK", "Warlock"),
    ("MONK", "Monk"),
    ("DRUID", "Druid"),
    ("DEMON_HUNTER", "Demon Hunter"),
    ("EVOKER", "Evoker"),
]

ROLE_CLASSES: Dict[Role, FrozenSet[str]] = {
    Role.TANK: frozenset({"WARRIOR", "PALADIN", "DEATH_KNIGHT", "MONK", "DRUID", "DEMON_HUNTER"}),
    Role.HEAL: frozenset({"PALADIN", "PRIEST", "SHAMAN", "MONK", "DRUID", "EVOKER"}),
    Role.DPS: frozenset(class_id for class_id, _ in CLASSES),
}

GROUP_SIZE = 5
DPS_PER_GROUP = 3

# slot name -> role the occupant must be eligible for
SLOT_ROLES: Dict[str, Role] = {
    "tank": Role.TANK,
    "heal": Role.HEAL,
    "dps1": Role.DPS,
    "dps2": Role.DPS,
    "dps3": Role.DPS,
}
SLOTS: Tuple[str, ...] = tuple(SLOT_ROLES)
DPS_SLOTS: Tuple[str, ...] = ("dps1", "dps2", "dps3")


def class_label(class_id: Optional[str]) -> str:
    for cid, label in CLASSES:
        if cid == class_id:
            return label
    return "Unset"


def allowed_classes(role: Role) -> List[Tuple[str, str]]:
    """Classes that may be selected for `role`, in catalogue order."""
    allowed = ROLE_CLASSES[role]
    return [(cid, label) for cid, label in CLASSES if cid in allowed]
