from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..schemas.options import DamageType
from .classification import Classification

Wall = Literal["north", "east", "south", "west"]

DEFAULT_ROOM_HEIGHT_FT = 9.0


def new_id() -> str:
    return uuid4().hex


class Room(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=new_id)
    name: str = ""
    room_type: str = "other"
    length: float = 0.0  # feet
    width: float = 0.0
    height: float = DEFAULT_ROOM_HEIGHT_FT
    floor_type: str = "carpet"
    damage_percent: float = 50.0
    wall_wick_height: float = 12.0  # inches
    affected_walls: List[Wall] = Field(default_factory=list)
    notes: str = ""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("height", mode="before")
    @classmethod
    def _default_height(cls, v):
        # unset / zero height means "standard ceiling"
        if v is None or v == 0 or v == "":
            return DEFAULT_ROOM_HEIGHT_FT
        return v

    @field_validator("affected_walls")
    @classmethod
    def _dedupe_walls(cls, v: List[str]) -> List[str]:
        out: List[str] = []
        for wall in v:
            if wall not in out:
                out.append(wall)
        return out


class LineItem(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str
    description: str
    quantity: Decimal = Field(ge=0)
    unit: str
    category: str
    room_id: Optional[str] = None
    room_name: Optional[str] = None

    # assigned when the item is merged into a project
    id: Optional[str] = None
    added_at: Optional[datetime] = None

    @property
    def key(self) -> tuple[str, Optional[str]]:
        return (self.code, self.room_id)


class PhotoAttachment(BaseModel):
    """Opaque record produced by the photo capture collaborator."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=new_id)
    uri: str
    caption: str = ""
    room_id: Optional[str] = None
    taken_at: Optional[datetime] = None


class Project(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=new_id)
    name: str
    created_at: datetime
    updated_at: datetime

    damage_type: Optional[DamageType] = None
    classification: Optional[Classification] = None

    rooms: List[Room] = Field(default_factory=list)
    line_items: List[LineItem] = Field(default_factory=list)
    photos: List[PhotoAttachment] = Field(default_factory=list)
    notes: str = ""

    @model_validator(mode="after")
    def _unique_item_keys(self) -> "Project":
        seen = set()
        for item in self.line_items:
            if item.key in seen:
                raise ValueError(
                    f"Duplicate line item for code={item.code} room={item.room_id}"
                )
            seen.add(item.key)
        return self

    def room(self, room_id: str) -> Optional[Room]:
        for r in self.rooms:
            if r.id == room_id:
                return r
        return None
