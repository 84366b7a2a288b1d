# restobid/schemas/export_v1.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExportProjectV1(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str
    damage_type: Optional[str] = Field(default=None, alias="damageType")
    classification: Optional[Dict[str, Any]] = None


class ExportRoomV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    type: str
    length: float
    width: float
    height: float


class ExportLineItemV1(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str
    description: str
    quantity: float
    unit: str


class ExportRequestV1(BaseModel):
    """Body POSTed to the ESX conversion service."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    project: ExportProjectV1
    rooms: List[ExportRoomV1] = Field(default_factory=list)
    line_items: List[ExportLineItemV1] = Field(default_factory=list, alias="lineItems")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
