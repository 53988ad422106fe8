# mplus/domain/models.py
"""
State models for signup sessions and drafts.

Timestamps are epoch milliseconds. Field aliases give the camelCase names of
the persisted state document; older documents used `signups`, `lastDraft` and
`classes`, which are still accepted when validating.
"""
import time
from typing import Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from mplus.domain.roles import SLOTS, Role


def now_ms() -> int:
    return int(time.time() * 1000)


class Signup(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    roles: List[Role] = Field(default_factory=list)
    display_name: str = Field("", alias="displayName")
    # stale entries for roles that were toggled off are kept but ignored
    classes: Dict[Role, Optional[str]] = Field(
        default_factory=dict,
        alias="subAttributes",
        validation_alias=AliasChoices("subAttributes", "classes"),
    )

    def has_role(self, role: Role) -> bool:
        return role in self.roles


class PlayerRef(BaseModel):
    """Snapshot of a signup taken when a draft is built."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    roles: Tuple[Role, ...] = ()
    classes: Dict[Role, Optional[str]] = Field(
        default_factory=dict,
        alias="subAttributes",
        validation_alias=AliasChoices("subAttributes", "classes"),
    )

    def eligible_for(self, role: Optional[Role]) -> bool:
        return role is None or role in self.roles


class Group(BaseModel):
    tank: Optional[PlayerRef] = None
    heal: Optional[PlayerRef] = None
    dps1: Optional[PlayerRef] = None
    dps2: Optional[PlayerRef] = None
    dps3: Optional[PlayerRef] = None

    def members(self) -> Dict[str, Optional[PlayerRef]]:
        return {slot: getattr(self, slot) for slot in SLOTS}


class Draft(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    created_at: int = Field(default_factory=now_ms, alias="createdAt")
    groups: List[Group] = Field(default_factory=list)
    bench: List[PlayerRef] = Field(default_factory=list)

    def placed_ids(self) -> List[str]:
        return [p.id for g in self.groups for p in g.members().values() if p is not None]

    def all_ids(self) -> List[str]:
        return self.placed_ids() + [p.id for p in self.bench]


class Session(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = "Mythic+ Signups"
    description: str = ""
    lock_at: Optional[int] = Field(None, alias="lockAt")
    roster: Dict[str, Signup] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("roster", "signups"),
    )
    draft: Optional[Draft] = Field(
        None,
        validation_alias=AliasChoices("draft", "lastDraft"),
    )
    created_at: int = Field(default_factory=now_ms, alias="createdAt")


class GuildState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_session_id: Optional[str] = Field(None, alias="currentSessionId")
    sessions: Dict[str, Session] = Field(default_factory=dict)


class StateDocument(BaseModel):
    guilds: Dict[str, GuildState] = Field(default_factory=dict)


def to_document(model: BaseModel) -> dict:
    """JSON-ready dict using the persisted field names."""
    return model.model_dump(mode="json", by_alias=True)
