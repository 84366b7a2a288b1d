import itertools

import pytest

from restobid.core.errors import ValidationError
from restobid.domain.classification import (
    FireClassification,
    MoldClassification,
    WaterClassification,
)
from restobid.engine.classifier import classify
from restobid.schemas.options import (
    Answer,
    FireOptionData,
    MoldOptionData,
    WaterOptionData,
)


def _a(data):
    return Answer(prompt="q", label="o", data=data)


# -----------------------
# Water
# -----------------------


def test_water_defaults_with_no_hints(dataset):
    out = classify(dataset, "water", {})
    assert isinstance(out, WaterClassification)
    assert (out.category, out.water_class, out.has_mold) == (1, 1, False)


def test_water_escalation_example(dataset):
    answers = {
        0: _a(WaterOptionData(category=1)),
        1: _a(WaterOptionData(modifier="upgrade_category")),
    }
    assert classify(dataset, "water", answers).category == 2


def test_assume_cat3_escalates_once_per_answer(dataset):
    answers = {
        0: _a(WaterOptionData(category=1)),
        1: _a(WaterOptionData(modifier="assume_cat3")),
    }
    assert classify(dataset, "water", answers).category == 2


def test_upgrade_is_capped_at_category_3(dataset):
    answers = {
        0: _a(WaterOptionData(category=3)),
        1: _a(WaterOptionData(modifier="upgrade_category")),
    }
    assert classify(dataset, "water", answers).category == 3


def test_may_upgrade_raises_to_at_least_2(dataset):
    answers = {
        0: _a(WaterOptionData(category=1)),
        1: _a(WaterOptionData(modifier="may_upgrade_category")),
    }
    assert classify(dataset, "water", answers).category == 2


def test_may_upgrade_leaves_category_2_alone(dataset):
    answers = {
        0: _a(WaterOptionData(category=2)),
        1: _a(WaterOptionData(modifier="may_upgrade_category")),
    }
    assert classify(dataset, "water", answers).category == 2


def test_modifier_applies_per_matching_answer(dataset):
    # two upgrade answers in a longer script each add one
    answers = {
        0: _a(WaterOptionData(category=1)),
        1: _a(WaterOptionData(modifier="upgrade_category")),
        2: _a(WaterOptionData(modifier="upgrade_category")),
    }
    assert classify(dataset, "water", answers).category == 3


def test_class_is_max_over_answers(classify_selections):
    # materials: hardwood (4), percentage: <5% (1)
    out = classify_selections("water", [0, 0, 3, 0, 0])
    assert out.water_class == 4


def test_mold_flag_is_sticky(dataset):
    answers = {
        0: _a(WaterOptionData(mold="minor")),
        1: _a(WaterOptionData(mold=False)),
    }
    assert classify(dataset, "water", answers).has_mold is True


def test_water_labels_from_severity_definitions(water_cat3_class2):
    out = water_cat3_class2
    assert out.category_name == "Category 3 - Black Water"
    assert out.class_name == "Class 2 - Fast Evaporation"
    assert out.estimate_modifier == "S"
    assert out.label_fallbacks == ()


@pytest.mark.parametrize("damage_type", ["water", "mold"])
def test_appending_an_answer_never_lowers_severity(dataset, make_answers, damage_type):
    script = dataset.script(damage_type)
    option_ranges = [range(len(q.options)) for q in script]

    def severity(out):
        if damage_type == "water":
            return (out.category, out.water_class)
        return (out.level,)

    for combo in itertools.product(*option_ranges):
        prev = None
        for n in range(1, len(combo) + 1):
            out = classify(dataset, damage_type, make_answers(damage_type, list(combo[:n])))
            cur = severity(out)
            if prev is not None:
                assert all(c >= p for c, p in zip(cur, prev)), (combo, n)
            prev = cur


# -----------------------
# Fire
# -----------------------


def test_fire_defaults(dataset):
    out = classify(dataset, "fire", {})
    assert isinstance(out, FireClassification)
    assert (out.soot_type, out.extent, out.soot_level, out.hvac_affected) == (
        "dry",
        "minor",
        "light",
        False,
    )


def test_fire_last_write_wins_and_hvac_sticky(dataset):
    answers = {
        0: _a(FireOptionData(soot_type="wet", hvac="possible")),
        1: _a(FireOptionData(soot_type="protein", extent="major")),
        2: _a(FireOptionData(soot_level="heavy")),
        3: _a(FireOptionData(hvac=False)),
    }
    out = classify(dataset, "fire", answers)
    assert out.soot_type == "protein"
    assert out.extent == "major"
    assert out.soot_level == "heavy"
    assert out.hvac_affected is True


def test_fire_mixed_soot_uses_generic_label(classify_selections):
    out = classify_selections("fire", [4, 0, 1, 0])
    assert out.soot_type == "mixed"
    assert out.soot_type_name == "Mixed Soot"
    assert out.label_fallbacks == ("fire.soot_type.mixed",)


# -----------------------
# Mold
# -----------------------


def test_mold_level_is_running_max(dataset):
    answers = {
        0: _a(MoldOptionData(level=3)),
        1: _a(MoldOptionData(level=2)),
    }
    out = classify(dataset, "mold", answers)
    assert isinstance(out, MoldClassification)
    assert out.level == 3


def test_mold_hvac_depth_forces_level_5(classify_selections):
    out = classify_selections("mold", [0, 3, 0, 0])
    assert out.depth == "hvac"
    assert out.level == 5
    assert out.level_name.startswith("Level 5")


def test_mold_flags_sticky(dataset):
    answers = {
        0: _a(MoldOptionData(moisture="active", health="mild")),
        1: _a(MoldOptionData(moisture="resolved", health="none")),
    }
    out = classify(dataset, "mold", answers)
    assert out.moisture_active is True
    assert out.health_concerns is True


def test_mold_depth_last_write_wins(dataset):
    answers = {
        0: _a(MoldOptionData(depth="hidden")),
        1: _a(MoldOptionData(depth="surface")),
    }
    assert classify(dataset, "mold", answers).depth == "surface"


# -----------------------
# Validation
# -----------------------


def test_unknown_damage_type_rejected(dataset):
    with pytest.raises(ValidationError) as exc:
        classify(dataset, "earthquake", {})
    assert exc.value.code == "UNKNOWN_DAMAGE_TYPE"


def test_answer_index_beyond_script_rejected(dataset):
    with pytest.raises(ValidationError) as exc:
        classify(dataset, "fire", {7: _a(FireOptionData(soot_type="dry"))})
    assert exc.value.code == "ANSWER_INDEX_OUT_OF_RANGE"


@pytest.mark.parametrize(
    "damage_type,data",
    [
        ("water", MoldOptionData(level=2)),
        ("fire", WaterOptionData(category=3)),
        ("mold", FireOptionData(soot_type="dry")),
    ],
)
def test_mismatched_payload_rejected(dataset, damage_type, data):
    with pytest.raises(ValidationError) as exc:
        classify(dataset, damage_type, {0: _a(data)})
    assert exc.value.code == "OPTION_KIND_MISMATCH"
    assert exc.value.meta["index"] == 0


def test_classify_is_deterministic(classify_selections):
    a = classify_selections("water", [4, 2, 2, 2, 2])
    b = classify_selections("water", [4, 2, 2, 2, 2])
    assert a == b
