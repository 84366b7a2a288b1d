from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.errors import ValidationError
from ..core.logging_config import logger
from ..domain.dataset import SizingFactors
from .geometry import RoomGeometry

D = Decimal


@dataclass(frozen=True)
class EquipmentCounts:
    dehumidifier_pints: int
    dehumidifier_units: int
    air_movers: int
    dehumidifier_kind: str = "lgr"
    class_factor: D = D("50")
    factor_fallback: bool = False


def size_equipment(
    sizing: SizingFactors,
    class_number: int,
    cubic_volume: D,
    affected_floor_area: D,
    *,
    kind: str = "lgr",
) -> EquipmentCounts:
    """
    pints = ceil(cubic volume / class factor), units = ceil(pints / unit capacity),
    air movers = ceil(affected floor area / coverage per mover).

    An unknown class falls back to the fallback class factor (class 2) with a
    warning, so equipment is always computable once geometry exists.
    """
    if kind not in sizing.dehumidifier:
        raise ValidationError(
            "UNKNOWN_DEHUMIDIFIER_KIND",
            f"No sizing table for dehumidifier kind '{kind}'.",
            kind=kind,
        )

    fallback = False
    factor: Optional[D] = sizing.factor(kind, class_number)
    if factor is None:
        factor = sizing.factor(kind, sizing.fallback_class)
        fallback = True
        logger.bind(kind=kind, class_number=class_number).warning(
            "equipment_factor_fallback", fallback_class=sizing.fallback_class
        )
    if factor is None:
        # loader guarantees the fallback class exists for every kind
        raise ValidationError(
            "SIZING_FACTOR_MISSING", f"No factor for {kind} class {sizing.fallback_class}."
        )

    pints = math.ceil(D(cubic_volume) / factor)
    units = math.ceil(D(pints) / sizing.unit_capacity_pints)
    air_movers = math.ceil(D(affected_floor_area) / sizing.air_mover_coverage_sf)

    return EquipmentCounts(
        dehumidifier_pints=pints,
        dehumidifier_units=units,
        air_movers=air_movers,
        dehumidifier_kind=kind,
        class_factor=factor,
        factor_fallback=fallback,
    )


def size_equipment_for(
    sizing: SizingFactors, class_number: int, geometry: RoomGeometry, *, kind: str = "lgr"
) -> EquipmentCounts:
    return size_equipment(
        sizing,
        class_number,
        geometry.cubic_volume,
        geometry.affected_floor_area,
        kind=kind,
    )


def negative_air_cfm(cubic_volume: D, ach: D = D("4")) -> int:
    """Required air scrubber CFM: (volume x air changes per hour) / 60."""
    return math.ceil(D(cubic_volume) * D(ach) / D("60"))
