from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

import restobid.rule_types  # noqa: F401 (register all rules)

from restobid.domain.models import Room
from restobid.engine.classifier import classify
from restobid.engine.session import AssessmentSession
from restobid.schemas.options import Answer
from restobid.storage.loader import load_reference_dataset
from restobid.storage.project_store import InMemoryProjectStore


@pytest.fixture(scope="session")
def dataset():
    # Real packaged reference data (also runs the consistency check)
    return load_reference_dataset()


@pytest.fixture
def fixed_now():
    return datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now):
    """Deterministic clock advancing one second per call."""
    ticks = {"n": 0}

    def _now():
        ticks["n"] += 1
        return fixed_now + timedelta(seconds=ticks["n"])

    return _now


@pytest.fixture
def store():
    return InMemoryProjectStore()


@pytest.fixture
def session(dataset, store, clock):
    return AssessmentSession.new_project(dataset, store, name="Smith residence", now=clock)


def answers_for(dataset, damage_type, selections):
    """Build an answer set from option indexes per question (0-based, dense)."""
    script = dataset.script(damage_type)
    out = {}
    for i, option_index in enumerate(selections):
        q = script[i]
        out[i] = Answer.from_option(q, q.options[option_index])
    return out


def classify_with(dataset, damage_type, selections):
    return classify(dataset, damage_type, answers_for(dataset, damage_type, selections))


@pytest.fixture
def water_cat3_class2(dataset):
    # sewage / <24h / carpet+pad / 5-40% / no mold
    return classify_with(dataset, "water", [3, 0, 1, 1, 0])


@pytest.fixture
def living_room():
    return Room(
        id="room-1",
        name="Living Room",
        room_type="living_room",
        length=20,
        width=15,
        height=9,
        floor_type="carpet",
        damage_percent=50,
        wall_wick_height=12,
        affected_walls=["north", "east"],
    )


@pytest.fixture
def make_answers(dataset):
    return lambda damage_type, selections: answers_for(dataset, damage_type, selections)


@pytest.fixture
def classify_selections(dataset):
    return lambda damage_type, selections: classify_with(dataset, damage_type, selections)
