from decimal import Decimal

import pytest

from restobid.calculators.geometry import derive_geometry
from restobid.domain.classification import MoldClassification
from restobid.engine.line_item_generator import generate


def mold(level=1, depth="surface"):
    return MoldClassification(level=level, depth=depth, level_name=f"Level {level}")


def quantities(items):
    return {i.code: i.quantity for i in items}


def test_rough_level1_surface(dataset):
    q = quantities(generate(dataset, "mold", mold(1)))
    assert q == {
        "HEPAFSH": Decimal("200.00"),
        "WTRGRM": Decimal("200.00"),
        "HMRASBTS": Decimal("2.00"),
    }


def test_level3_adds_containment(dataset):
    q = quantities(generate(dataset, "mold", mold(3)))
    assert q["HMRCNT"] == Decimal("1.00")
    assert q["WTRCNTLF"] == Decimal("60.00")
    assert q["WTRNAFAN"] == Decimal("3.00")
    assert "HMREQD" not in q


def test_hvac_contamination(dataset, classify_selections):
    c = classify_selections("mold", [0, 3, 0, 0])
    q = quantities(generate(dataset, "mold", c))
    assert c.level == 5
    assert "CLNDUCT" not in q
    assert q["HMREQD"] == Decimal("1.00")
    assert q["HMRDIS"] == Decimal("200.00")
    assert "WTRDRYWLF" not in q


def test_hidden_growth_in_room(dataset, living_room):
    items = generate(
        dataset,
        "mold",
        mold(3, "hidden"),
        derive_geometry(living_room),
        room_id="room-1",
        room_name="Living Room",
    )
    q = quantities(items)
    assert q["WTRDRYWLF"] == Decimal("35.00")
    assert q["HMRABR"] == Decimal("70.00")
    assert q["WTRCNTLF"] == Decimal("70.00")
    # sampling is part of the pre-room estimate only
    assert "HMRASBTS" not in q
    assert {i.room_id for i in items} == {"room-1"}


@pytest.mark.parametrize("level", [1, 4, 5])
def test_hvac_depth_never_adds_duct_cleaning(dataset, living_room, level):
    c = mold(level, "hvac")
    rough = {i.code for i in generate(dataset, "mold", c)}
    room = {
        i.code
        for i in generate(
            dataset, "mold", c, derive_geometry(living_room), room_id="room-1", room_name="Living Room"
        )
    }
    assert "CLNDUCT" not in rough | room
