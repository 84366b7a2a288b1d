from decimal import Decimal

import pytest

from restobid.calculators.geometry import derive_geometry
from restobid.domain.classification import WaterClassification
from restobid.engine.line_item_generator import generate, run_rules


def water(category=1, water_class=1, has_mold=False):
    return WaterClassification(
        category=category,
        water_class=water_class,
        has_mold=has_mold,
        category_name=f"Category {category}",
        class_name=f"Class {water_class}",
    )


def by_code(items):
    return {i.code: i for i in items}


def test_rough_estimate_cat3_class2(dataset, water_cat3_class2):
    items = generate(dataset, "water", water_cat3_class2)

    assert [i.code for i in items] == [
        "WTRDRY",
        "WTRDHM",
        "WTREQ",
        "WTREXT",
        "WTRPAD",
        "WTRGRM",
        "WTRCNTLF",
        "WTRFCC",
        "WTRDRYWLF",
        "WTRBLK",
    ]
    q = {i.code: i.quantity for i in items}
    assert q["WTRDRY"] == Decimal("4.00")
    assert q["WTRDHM"] == Decimal("1.00")
    assert q["WTREQ"] == Decimal("3.00")
    assert q["WTREXT"] == Decimal("200.00")
    assert q["WTRCNTLF"] == Decimal("60.00")
    assert q["WTRDRYWLF"] == Decimal("60.00")
    assert q["WTRBLK"] == Decimal("4.00")


def test_rough_items_are_labeled_estimates_without_room(dataset, water_cat3_class2):
    for item in generate(dataset, "water", water_cat3_class2):
        assert item.room_id is None
        assert item.room_name is None
        assert item.description.endswith("(estimate, pending actual measurements)")
        assert item.id is None


def test_rough_class1_has_no_flood_cut(dataset):
    codes = {i.code for i in generate(dataset, "water", water(1, 1))}
    assert "WTRDRYWLF" not in codes
    assert "WTRGRM" not in codes
    assert "WTRCNTLF" not in codes


def test_room_mode_category3_containment_uses_perimeter(dataset, living_room):
    geo = derive_geometry(living_room)
    items = by_code(
        generate(dataset, "water", water(3, 2), geo, room_id="room-1", room_name="Living Room")
    )

    assert items["WTRCNTLF"].quantity == Decimal("70.00")
    assert items["WTRCNTLF"].unit == "LF"
    assert items["WTRCNTLF"].room_id == "room-1"
    assert items["WTRCNTLF"].description == "Poly containment - Living Room"


def test_room_mode_quantities(dataset, living_room):
    geo = derive_geometry(living_room)
    items = by_code(
        generate(dataset, "water", water(3, 2), geo, room_id="room-1", room_name="Living Room")
    )

    assert items["WTRDRY"].quantity == Decimal("3.00")
    assert items["WTRDHM"].quantity == Decimal("1.00")
    assert items["WTREXT"].quantity == Decimal("150.00")
    # carpet removal belongs to the pre-room estimate only
    assert "WTRFCC" not in items
    # 12 inch wick -> 2 ft cut along north (15) + east (20)
    assert items["WTRDRYWLF"].quantity == Decimal("35.00")
    assert "WTRDRYW4" not in items
    assert items["WTRBLK"].quantity == Decimal("6.00")


def test_tall_wick_selects_4ft_cut_and_insulation(dataset, living_room):
    room = living_room.model_copy(update={"wall_wick_height": 30})
    geo = derive_geometry(room)
    items = by_code(
        generate(dataset, "water", water(2, 3), geo, room_id=room.id, room_name=room.name)
    )

    assert items["WTRDRYW4"].quantity == Decimal("35.00")
    assert "WTRDRYWLF" not in items
    # 35 LF x 4 ft
    assert items["WTRINS"].quantity == Decimal("140.00")


def test_no_walls_no_flood_cut(dataset, living_room):
    room = living_room.model_copy(update={"affected_walls": []})
    ctx = run_rules(
        dataset, "water", water(1, 2), derive_geometry(room), room_id=room.id, room_name=room.name
    )
    codes = {i.code for i in ctx.sheet.items()}
    assert "WTRDRYWLF" not in codes
    assert "WTRDRYW4" not in codes
    decisions = {t["rule"]: t["decision"] for t in ctx.trace}
    assert decisions["water_flood_cut"] == "SKIPPED"
    assert decisions["water_flood_cut_estimate"] == "OTHER_MODE"


def test_hard_floor_extraction(dataset, living_room):
    room = living_room.model_copy(update={"floor_type": "hardwood"})
    codes = {
        i.code
        for i in generate(
            dataset, "water", water(1, 1), derive_geometry(room), room_id=room.id, room_name=room.name
        )
    }
    assert "WTREXTH" in codes
    assert not {"WTREXT", "WTRPAD", "WTRBLK"} & codes


def test_mold_observed_adds_fogging(dataset):
    items = by_code(generate(dataset, "water", water(1, 1, has_mold=True)))
    assert items["HMRDIS"].quantity == Decimal("200.00")


def test_units_come_from_catalog(dataset, water_cat3_class2):
    for item in generate(dataset, "water", water_cat3_class2):
        assert item.unit == dataset.catalog_entry(item.code).unit


def test_generation_is_idempotent(dataset, living_room, water_cat3_class2):
    geo = derive_geometry(living_room)
    a = generate(dataset, "water", water_cat3_class2, geo, room_id="room-1", room_name="Living Room")
    b = generate(dataset, "water", water_cat3_class2, geo, room_id="room-1", room_name="Living Room")
    assert a == b


@pytest.mark.parametrize("water_class", [1, 2, 3, 4])
def test_equipment_present_for_every_class(dataset, water_class):
    codes = {i.code for i in generate(dataset, "water", water(1, water_class))}
    assert {"WTRDRY", "WTRDHM"} <= codes


def test_carpet_removal_in_rough_estimate_only(dataset, living_room):
    rough = {i.code for i in generate(dataset, "water", water(3, 1))}
    room = {
        i.code
        for i in generate(
            dataset,
            "water",
            water(3, 1),
            derive_geometry(living_room),
            room_id="room-1",
            room_name="Living Room",
        )
    }
    assert "WTRFCC" in rough
    assert "WTRFCC" not in room
