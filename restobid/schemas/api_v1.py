# restobid/schemas/api_v1.py
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.classification import Classification
from ..domain.models import LineItem, Room
from .options import DamageType


class QuestionOut(BaseModel):
    index: int
    prompt: str
    options: List[str]


class ScriptOut(BaseModel):
    damage_type: str
    questions: List[QuestionOut]


class ClassifyRequestV1(BaseModel):
    """Option index per question, in script order (what the UI collected)."""

    model_config = ConfigDict(extra="forbid")

    damage_type: DamageType
    selections: List[int] = Field(min_length=1)


class EquipmentOut(BaseModel):
    dehumidifier_pints: int
    dehumidifier_units: int
    air_movers: int
    dehumidifier_kind: str
    factor_fallback: bool = False


class ClassifyResponseV1(BaseModel):
    classification: Classification
    line_items: List[LineItem]
    equipment: Optional[EquipmentOut] = None
    estimate_note: str


class GeometryRequestV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    room: Room
    water_class: Optional[int] = Field(default=None, ge=1)
    dehumidifier_kind: str = "lgr"


class GeometryOut(BaseModel):
    floor_area: Decimal
    perimeter: Decimal
    cubic_volume: Decimal
    affected_wall_length: Decimal
    affected_floor_area: Decimal


class GeometryResponseV1(BaseModel):
    geometry: GeometryOut
    equipment: Optional[EquipmentOut] = None
    negative_air_cfm: int


class CreateProjectV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None


class ApplyClassificationV1(ClassifyRequestV1):
    """Same selections as /api/classify; the server derives the classification."""


class RoomSavedV1(BaseModel):
    room_id: str
    line_items: List[LineItem]
