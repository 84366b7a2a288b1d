from __future__ import annotations

from typing import List, Mapping, Optional, Tuple, cast

from ..core.errors import NotFoundError, ValidationError
from ..core.logging_config import logger
from ..domain.classification import (
    FireClassification,
    MoldClassification,
    WaterClassification,
)
from ..domain.dataset import ReferenceDataset, SeverityDefinition
from ..schemas.options import Answer, FireOptionData, MoldOptionData, WaterOptionData

AnswerSet = Mapping[int, Answer]

MAX_WATER_CATEGORY = 3


# -----------------------
# Severity label lookup (degrades to a generic label)
# -----------------------


class _Labels:
    def __init__(self, dataset: ReferenceDataset, damage_type: str):
        self.dataset = dataset
        self.damage_type = damage_type
        self.fallbacks: List[str] = []

    def lookup(self, scale: str, key, fallback_name: str) -> Tuple[Optional[SeverityDefinition], str]:
        try:
            found = self.dataset.severity(self.damage_type, scale, key)
            return found, found.name
        except NotFoundError as e:
            self.fallbacks.append(f"{self.damage_type}.{scale}.{key}")
            logger.bind(damage_type=self.damage_type, scale=scale, key=key).warning(
                "severity_label_fallback", code=e.code, label=fallback_name
            )
            return None, fallback_name


# -----------------------
# Per damage type
# -----------------------


def _classify_water(dataset: ReferenceDataset, answers: List[Answer]) -> WaterClassification:
    category, water_class, has_mold = 1, 1, False

    for a in answers:
        d = cast(WaterOptionData, a.data)
        if d.category is not None:
            category = max(category, d.category)
        # escalation applies per answer, in answer order
        if d.modifier in ("upgrade_category", "assume_cat3"):
            category = min(category + 1, MAX_WATER_CATEGORY)
        elif d.modifier == "may_upgrade_category" and category < MAX_WATER_CATEGORY:
            category = max(category, 2)
        if d.water_class is not None:
            water_class = max(water_class, d.water_class)
        if d.mold in ("minor", "major"):
            has_mold = True

    labels = _Labels(dataset, "water")
    cat_def, cat_name = labels.lookup("category", category, f"Category {category}")
    cls_def, cls_name = labels.lookup("class", water_class, f"Class {water_class}")

    return WaterClassification(
        category=category,
        water_class=water_class,
        has_mold=has_mold,
        category_name=cat_name,
        category_description=cat_def.description if cat_def else "",
        class_name=cls_name,
        class_description=cls_def.description if cls_def else "",
        ppe_required=cat_def.ppe_required if cat_def else None,
        estimate_modifier=cat_def.estimate_modifier if cat_def else None,
        label_fallbacks=tuple(labels.fallbacks),
    )


def _classify_fire(dataset: ReferenceDataset, answers: List[Answer]) -> FireClassification:
    soot_type, extent, soot_level, hvac = "dry", "minor", "light", False

    for a in answers:
        d = cast(FireOptionData, a.data)
        if d.soot_type is not None:
            soot_type = d.soot_type
        if d.extent is not None:
            extent = d.extent
        if d.soot_level is not None:
            soot_level = d.soot_level
        if d.hvac is True or d.hvac == "possible":
            hvac = True

    labels = _Labels(dataset, "fire")
    soot_def, soot_name = labels.lookup(
        "soot_type", soot_type, f"{soot_type.replace('_', ' ').title()} Soot"
    )

    return FireClassification(
        soot_type=soot_type,
        extent=extent,
        soot_level=soot_level,
        hvac_affected=hvac,
        soot_type_name=soot_name,
        cleaning_method=(soot_def.details.get("cleaning") if soot_def else None),
        label_fallbacks=tuple(labels.fallbacks),
    )


def _classify_mold(dataset: ReferenceDataset, answers: List[Answer]) -> MoldClassification:
    level, depth, moisture_active, health_concerns = 1, "surface", False, False

    for a in answers:
        d = cast(MoldOptionData, a.data)
        if d.level is not None:
            level = max(level, d.level)
        if d.depth is not None:
            depth = d.depth
            if depth == "hvac" and dataset.has_severity("mold", "level", 5):
                level = max(level, 5)
        if d.moisture == "active":
            moisture_active = True
        if d.health in ("mild", "significant"):
            health_concerns = True

    labels = _Labels(dataset, "mold")
    level_def, level_name = labels.lookup("level", level, f"Level {level}")

    return MoldClassification(
        level=level,
        depth=depth,
        moisture_active=moisture_active,
        health_concerns=health_concerns,
        level_name=level_name,
        containment=(level_def.details.get("containment") if level_def else None),
        ppe_required=(level_def.ppe_required if level_def else None),
        label_fallbacks=tuple(labels.fallbacks),
    )


_CLASSIFIERS = {
    "water": _classify_water,
    "fire": _classify_fire,
    "mold": _classify_mold,
}


# -----------------------
# Entry point
# -----------------------


def classify(dataset: ReferenceDataset, damage_type: str, answers: AnswerSet):
    """
    Map an answer set to a classification. Pure and deterministic.

    Severity fields are running maxima ("worst observed wins"), descriptive
    fields are last-write-wins, flags are sticky once set.

    Raises ValidationError for an unknown damage type, an answer index outside
    the script, or an answer payload from another damage type's script.
    """
    script = dataset.question_scripts.get(damage_type)
    classifier = _CLASSIFIERS.get(damage_type)
    if script is None or classifier is None:
        raise ValidationError(
            "UNKNOWN_DAMAGE_TYPE",
            f"No question script for damage type '{damage_type}'.",
            damage_type=damage_type,
        )

    ordered: List[Answer] = []
    for index in sorted(answers):
        if not isinstance(index, int) or not 0 <= index < len(script):
            raise ValidationError(
                "ANSWER_INDEX_OUT_OF_RANGE",
                f"Answer index {index} outside script of length {len(script)}.",
                damage_type=damage_type,
                index=index,
            )
        answer = answers[index]
        if answer.data.damage_type != damage_type:
            raise ValidationError(
                "OPTION_KIND_MISMATCH",
                f"Answer {index} carries a '{answer.data.damage_type}' payload, expected '{damage_type}'.",
                damage_type=damage_type,
                index=index,
            )
        ordered.append(answer)

    return classifier(dataset, ordered)
