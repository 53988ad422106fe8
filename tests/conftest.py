# tests/conftest.py
import pytest

from mplus.domain.models import Session, Signup
from mplus.domain.roles import Role

T, H, D = Role.TANK, Role.HEAL, Role.DPS


def make_roster(layout):
    """Build a roster from {participant_id: roles}; display names are the upper-cased ids."""
    return {pid: Signup(roles=list(roles), display_name=pid.upper()) for pid, roles in layout.items()}


def twelve_player_roster():
    # 2 tank-only, 2 heal-only, 7 dps-only, 1 flexible
    layout = {}
    layout.update({f"t{i}": [T] for i in range(2)})
    layout.update({f"h{i}": [H] for i in range(2)})
    layout.update({f"d{i}": [D] for i in range(7)})
    layout["flex"] = [T, H, D]
    return make_roster(layout)


@pytest.fixture
def session():
    return Session(id="s-g1-1000", title="Weekly keys", created_at=1000)


@pytest.fixture
def roster12():
    return twelve_player_roster()
