from __future__ import annotations

from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class _ClassificationBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    # Severity lookups that fell back to a synthesized label, e.g. "water.class.5"
    label_fallbacks: Tuple[str, ...] = ()


class WaterClassification(_ClassificationBase):
    damage_type: Literal["water"] = "water"
    category: int = Field(ge=1, le=3)
    water_class: int = Field(ge=1, le=4)
    has_mold: bool = False

    category_name: str
    category_description: str = ""
    class_name: str
    class_description: str = ""
    ppe_required: Optional[str] = None
    estimate_modifier: Optional[str] = None


class FireClassification(_ClassificationBase):
    damage_type: Literal["fire"] = "fire"
    soot_type: str = "dry"
    extent: str = "minor"
    soot_level: str = "light"
    hvac_affected: bool = False

    soot_type_name: str
    cleaning_method: Optional[str] = None


class MoldClassification(_ClassificationBase):
    damage_type: Literal["mold"] = "mold"
    level: int = Field(ge=1, le=5)
    depth: str = "surface"
    moisture_active: bool = False
    health_concerns: bool = False

    level_name: str
    containment: Optional[str] = None
    ppe_required: Optional[str] = None


Classification = Annotated[
    Union[WaterClassification, FireClassification, MoldClassification],
    Field(discriminator="damage_type"),
]

CLASSIFICATION_MODELS = (WaterClassification, FireClassification, MoldClassification)
