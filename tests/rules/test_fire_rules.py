from decimal import Decimal

from restobid.calculators.geometry import derive_geometry
from restobid.domain.classification import FireClassification
from restobid.engine.line_item_generator import generate


def fire(**kw):
    kw.setdefault("soot_type_name", "Soot")
    return FireClassification(**kw)


def quantities(items):
    return {i.code: i.quantity for i in items}


def test_rough_dry_light_soot(dataset):
    q = quantities(generate(dataset, "fire", fire(soot_type="dry", soot_level="light")))
    assert q == {
        "WTRNAFAN": Decimal("3.00"),
        "CLNFOG": Decimal("1800.00"),
        "CLNSOOT": Decimal("200.00"),
        "HEPAFSH": Decimal("200.00"),
        # 60 LF perimeter x 9 ft
        "CLNSMOKE": Decimal("540.00"),
    }


def test_protein_heavy_with_hvac(dataset):
    q = quantities(
        generate(
            dataset,
            "fire",
            fire(soot_type="protein", soot_level="heavy", hvac_affected=True),
        )
    )
    assert q["CLNSOOTW"] == Decimal("200.00")
    assert q["CLNSMOKEH"] == Decimal("540.00")
    assert q["CLNDUCT"] == Decimal("1.00")
    assert "CLNSOOT" not in q
    assert "HEPAFSH" not in q
    assert "CLNSMOKE" not in q


def test_mixed_soot_uses_wet_method(dataset, classify_selections):
    c = classify_selections("fire", [4, 1, 3, 0])
    codes = {i.code for i in generate(dataset, "fire", c)}
    assert "CLNSOOTW" in codes
    assert "CLNSMOKEH" in codes
    assert "CLNDUCT" not in codes


def test_room_mode_wall_area_uses_selected_walls(dataset, living_room):
    items = generate(
        dataset,
        "fire",
        fire(soot_type="synthetic", soot_level="odor_only"),
        derive_geometry(living_room),
        room_id="room-1",
        room_name="Living Room",
    )
    q = quantities(items)
    assert q["CLNFOG"] == Decimal("2700.00")
    assert q["CLNSOOT"] == Decimal("300.00")
    # (15 + 20) LF x 9 ft
    assert q["CLNSMOKE"] == Decimal("315.00")
    assert all(i.description.endswith(" - Living Room") for i in items)


def test_fog_unit_is_cubic_feet(dataset):
    items = {i.code: i for i in generate(dataset, "fire", fire())}
    assert items["CLNFOG"].unit == "CF"
    assert items["WTRNAFAN"].unit == "DAY"
