from __future__ import annotations

from fastapi import APIRouter, Depends

from ..calculators.equipment import EquipmentCounts, negative_air_cfm, size_equipment_for
from ..calculators.geometry import (
    DEFAULT_ROUGH_GEOMETRY,
    ROUGH_ESTIMATE_NOTE,
    derive_geometry,
    validate_room,
)
from ..core.errors import ValidationError
from ..domain.classification import WaterClassification
from ..domain.dataset import ReferenceDataset
from ..engine.answer_collector import replay_selections
from ..engine.line_item_generator import generate
from ..schemas.api_v1 import (
    ClassifyRequestV1,
    ClassifyResponseV1,
    EquipmentOut,
    GeometryOut,
    GeometryRequestV1,
    GeometryResponseV1,
    QuestionOut,
    ScriptOut,
)
from .dependencies import get_dataset

# ----------------------------
# Router
# ----------------------------
router = APIRouter(prefix="/api", tags=["assessment"])


def _equipment_out(c: EquipmentCounts) -> EquipmentOut:
    return EquipmentOut(
        dehumidifier_pints=c.dehumidifier_pints,
        dehumidifier_units=c.dehumidifier_units,
        air_movers=c.air_movers,
        dehumidifier_kind=c.dehumidifier_kind,
        factor_fallback=c.factor_fallback,
    )


@router.get("/reference/questions/{damage_type}", response_model=ScriptOut)
def get_questions(damage_type: str, dataset: ReferenceDataset = Depends(get_dataset)):
    script = dataset.question_scripts.get(damage_type)
    if script is None:
        raise ValidationError(
            "UNKNOWN_DAMAGE_TYPE", f"No question script for damage type '{damage_type}'."
        )
    return ScriptOut(
        damage_type=damage_type,
        questions=[
            QuestionOut(index=i, prompt=q.prompt, options=[o.label for o in q.options])
            for i, q in enumerate(script)
        ],
    )


@router.post("/classify", response_model=ClassifyResponseV1)
def classify_answers(payload: ClassifyRequestV1, dataset: ReferenceDataset = Depends(get_dataset)):
    """Replay the UI's selections through the question flow, then estimate."""
    classification = replay_selections(dataset, payload.damage_type, payload.selections)
    items = generate(dataset, payload.damage_type, classification)

    equipment = None
    if isinstance(classification, WaterClassification):
        equipment = _equipment_out(
            size_equipment_for(
                dataset.sizing_factors, classification.water_class, DEFAULT_ROUGH_GEOMETRY
            )
        )

    return ClassifyResponseV1(
        classification=classification,
        line_items=items,
        equipment=equipment,
        estimate_note=ROUGH_ESTIMATE_NOTE,
    )


@router.post("/geometry", response_model=GeometryResponseV1)
def room_geometry(payload: GeometryRequestV1, dataset: ReferenceDataset = Depends(get_dataset)):
    validate_room(payload.room)
    g = derive_geometry(payload.room)

    equipment = None
    if payload.water_class is not None:
        equipment = _equipment_out(
            size_equipment_for(
                dataset.sizing_factors, payload.water_class, g, kind=payload.dehumidifier_kind
            )
        )

    return GeometryResponseV1(
        geometry=GeometryOut(
            floor_area=g.floor_area,
            perimeter=g.perimeter,
            cubic_volume=g.cubic_volume,
            affected_wall_length=g.affected_wall_length,
            affected_floor_area=g.affected_floor_area,
        ),
        equipment=equipment,
        negative_air_cfm=negative_air_cfm(g.cubic_volume, dataset.sizing_factors.negative_air_ach),
    )
