from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Literal, Optional

from ..calculators.geometry import ROUGH_ESTIMATE_NOTE, RoomGeometry
from ..core.errors import ConfigurationError
from ..domain.classification import FireClassification, MoldClassification, WaterClassification
from ..domain.dataset import ReferenceDataset
from ..domain.models import LineItem
from .item_sheet import ItemSheet

D = Decimal

Mode = Literal["rough", "room"]

ClassificationT = WaterClassification | FireClassification | MoldClassification


def round_qty(value: Any) -> D:
    return D(str(value)).quantize(D("0.01"), rounding=ROUND_HALF_UP)


@dataclass
class GenerationContext:
    """
    Everything a line-item rule may read during one generation run.

    - rough mode: geometry is the default estimate room, no room key
    - room mode: geometry derived from a saved room, items keyed to it
    """

    dataset: ReferenceDataset
    classification: ClassificationT
    geometry: RoomGeometry
    mode: Mode
    room_id: Optional[str] = None
    room_name: Optional[str] = None

    sheet: ItemSheet = field(default_factory=ItemSheet)
    warnings: List[Dict[str, Any]] = field(default_factory=list)
    trace: List[Dict[str, Any]] = field(default_factory=list)

    def warn(self, code: str, message: str, **meta: Any) -> None:
        self.warnings.append({"code": code, "message": message, "meta": meta})

    # -----------------
    # facts for rule conditions
    # -----------------

    @property
    def wall_run(self) -> D:
        # no wall selection exists before a room is measured
        if self.mode == "rough":
            return self.geometry.perimeter
        return self.geometry.affected_wall_length

    def fact(self, name: str) -> Any:
        if name in type(self.classification).model_fields:
            return getattr(self.classification, name)
        if name == "wall_run":
            return self.wall_run
        if hasattr(self.geometry, name):
            return getattr(self.geometry, name)
        raise KeyError(name)

    def basis(self, name: str) -> D:
        if name == "wall_run":
            return self.wall_run
        if name == "wall_area":
            return self.wall_run * self.geometry.height
        if name == "flood_cut_area":
            return self.wall_run * self.geometry.flood_cut_height
        return D(getattr(self.geometry, name))

    # -----------------
    # output
    # -----------------

    def describe(self, label: str) -> str:
        if self.mode == "rough":
            return f"{label} ({ROUGH_ESTIMATE_NOTE})"
        return f"{label} - {self.room_name}"

    def emit(self, code: str, quantity: Any, category: str, label: Optional[str] = None) -> LineItem:
        entry = self.dataset.line_item_catalog.get(code)
        if entry is None:
            # consistency check at load time makes this unreachable
            raise ConfigurationError(f"Line item code {code} missing from catalog")

        qty = round_qty(quantity)
        if qty < 0:
            qty = D("0.00")

        item = LineItem(
            code=code,
            description=self.describe(label or entry.description),
            quantity=qty,
            unit=entry.unit,
            category=category,
            room_id=self.room_id if self.mode == "room" else None,
            room_name=self.room_name if self.mode == "room" else None,
        )
        self.sheet.put(item)
        return item
