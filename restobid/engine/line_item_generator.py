from __future__ import annotations

from typing import List, Optional

from ..calculators.geometry import DEFAULT_ROUGH_GEOMETRY, RoomGeometry
from ..core.errors import ValidationError
from ..core.logging_config import logger
from ..domain.dataset import ReferenceDataset
from ..domain.models import LineItem
from .context import ClassificationT, GenerationContext


def run_rules(
    dataset: ReferenceDataset,
    damage_type: str,
    classification: ClassificationT,
    geometry: Optional[RoomGeometry] = None,
    *,
    room_id: Optional[str] = None,
    room_name: Optional[str] = None,
) -> GenerationContext:
    """Like generate(), but returns the whole context (items, warnings, rule trace)."""
    if classification.damage_type != damage_type:
        raise ValidationError(
            "CLASSIFICATION_MISMATCH",
            f"Classification is for '{classification.damage_type}', not '{damage_type}'.",
        )
    runner = dataset.line_item_rules.get(damage_type)
    if runner is None:
        raise ValidationError(
            "UNKNOWN_DAMAGE_TYPE", f"No line-item rules for damage type '{damage_type}'."
        )

    if geometry is None:
        ctx = GenerationContext(
            dataset=dataset,
            classification=classification,
            geometry=DEFAULT_ROUGH_GEOMETRY,
            mode="rough",
        )
    else:
        if room_id is None:
            raise ValidationError("ROOM_ID_REQUIRED", "Room-scoped generation needs a room id.")
        ctx = GenerationContext(
            dataset=dataset,
            classification=classification,
            geometry=geometry,
            mode="room",
            room_id=room_id,
            room_name=room_name or room_id,
        )

    runner.run(ctx)

    if ctx.warnings:
        logger.bind(damage_type=damage_type, room_id=room_id).warning(
            "line_item_warnings", warnings=[w["code"] for w in ctx.warnings]
        )
    return ctx


def generate(
    dataset: ReferenceDataset,
    damage_type: str,
    classification: ClassificationT,
    geometry: Optional[RoomGeometry] = None,
    *,
    room_id: Optional[str] = None,
    room_name: Optional[str] = None,
) -> List[LineItem]:
    """
    Line items for one classification.

    Without geometry: rough pre-room estimate on DEFAULT_ROUGH_GEOMETRY, items
    carry no room key and are labeled as estimates.
    With geometry: exact items for that room, keyed to room_id.

    Items have no id yet; ids are assigned when merged into a project.
    """
    ctx = run_rules(
        dataset, damage_type, classification, geometry, room_id=room_id, room_name=room_name
    )
    return ctx.sheet.items()
