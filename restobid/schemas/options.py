# restobid/schemas/options.py
from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

DamageType = Literal["water", "fire", "mold"]
DAMAGE_TYPES: tuple[str, ...] = ("water", "fire", "mold")

TimeModifier = Literal["none", "may_upgrade_category", "upgrade_category", "assume_cat3"]
MoldFlag = Union[Literal["minor", "major"], bool]
SootType = Literal["dry", "wet", "protein", "synthetic", "mixed"]
Extent = Literal["minor", "moderate", "major"]
SootLevel = Literal["odor_only", "light", "heavy", "severe"]
MoldDepth = Literal["surface", "deep", "hidden", "hvac"]
Moisture = Literal["resolved", "active", "unknown"]
Health = Literal["none", "mild", "significant"]


# ----------------------------
# Option payloads (closed union per damage type)
# ----------------------------
class WaterOptionData(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    damage_type: Literal["water"] = "water"
    category: Optional[int] = Field(default=None, ge=1, le=3)
    modifier: Optional[TimeModifier] = None
    water_class: Optional[int] = Field(default=None, ge=1, le=4, alias="class")
    mold: Optional[MoldFlag] = None


class FireOptionData(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    damage_type: Literal["fire"] = "fire"
    soot_type: Optional[SootType] = None
    extent: Optional[Extent] = None
    soot_level: Optional[SootLevel] = None
    hvac: Optional[Union[Literal["possible"], bool]] = None


class MoldOptionData(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    damage_type: Literal["mold"] = "mold"
    level: Optional[int] = Field(default=None, ge=1, le=5)
    depth: Optional[MoldDepth] = None
    moisture: Optional[Moisture] = None
    health: Optional[Health] = None


OptionData = Annotated[
    Union[WaterOptionData, FireOptionData, MoldOptionData],
    Field(discriminator="damage_type"),
]


# ----------------------------
# Question scripts
# ----------------------------
class Option(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    label: str = Field(min_length=1)
    data: OptionData


class Question(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    prompt: str = Field(min_length=1)
    options: List[Option] = Field(min_length=1)


class Answer(BaseModel):
    """One recorded answer: snapshots of the prompt and label plus the option payload."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    prompt: str
    label: str
    data: OptionData

    @classmethod
    def from_option(cls, question: Question, option: Option) -> "Answer":
        return cls(prompt=question.prompt, label=option.label, data=option.data)
