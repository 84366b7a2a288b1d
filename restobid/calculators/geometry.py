from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal

from ..core.errors import ValidationError
from ..domain.models import Room

D = Decimal

# Wick heights up to this many inches get a 2 ft flood cut, above it 4 ft.
FLOOD_CUT_SHORT_MAX_WICK_INCHES = D("24")
FLOOD_CUT_SHORT_FT = D("2")
FLOOD_CUT_TALL_FT = D("4")


@dataclass(frozen=True)
class RoomGeometry:
    """Derived quantities of one room, plus the measurements rules read directly."""

    floor_area: D            # SF
    perimeter: D             # LF
    cubic_volume: D          # CF
    affected_wall_length: D  # LF
    affected_floor_area: D   # SF

    height: D = D("9")
    floor_type: str = "carpet"
    wall_wick_height: D = D("0")  # inches

    @property
    def flood_cut_height(self) -> D:
        if self.wall_wick_height <= FLOOD_CUT_SHORT_MAX_WICK_INCHES:
            return FLOOD_CUT_SHORT_FT
        return FLOOD_CUT_TALL_FT


# Pre-room estimates assume a 20 x 10 ft room, 9 ft ceiling, wet carpet
# over the whole floor. An approximation until real measurements exist.
DEFAULT_ROUGH_GEOMETRY = RoomGeometry(
    floor_area=D("200"),
    perimeter=D("60"),
    cubic_volume=D("1800"),
    affected_wall_length=D("0"),
    affected_floor_area=D("200"),
    height=D("9"),
    floor_type="carpet",
    wall_wick_height=D("0"),
)

ROUGH_ESTIMATE_NOTE = "estimate, pending actual measurements"


def _d(v: float) -> D:
    return D(str(v))


def validate_room(room: Room) -> None:
    """Raise ValidationError if the room cannot be persisted."""
    if not (room.name or "").strip():
        raise ValidationError("ROOM_NAME_REQUIRED", "Room name is required.", room_id=room.id)

    measurements = {
        "length": room.length,
        "width": room.width,
        "height": room.height,
        "damage_percent": room.damage_percent,
        "wall_wick_height": room.wall_wick_height,
    }
    # NaN fails every comparison below, infinity passes them
    bad = sorted(k for k, v in measurements.items() if not math.isfinite(v))
    if bad:
        raise ValidationError(
            "ROOM_DIMENSIONS_INVALID",
            f"Room measurements must be finite numbers (got non-finite {', '.join(bad)}).",
            room_id=room.id,
            fields=bad,
        )
    if room.length <= 0 or room.width <= 0:
        raise ValidationError(
            "ROOM_DIMENSIONS_INVALID",
            f"Room length and width must be > 0 (got {room.length} x {room.width}).",
            room_id=room.id,
        )
    if room.height <= 0:
        raise ValidationError("ROOM_HEIGHT_INVALID", "Room height must be > 0.", room_id=room.id)
    if not 0 <= room.damage_percent <= 100:
        raise ValidationError(
            "DAMAGE_PERCENT_OUT_OF_RANGE",
            f"Damage percent must be within 0-100 (got {room.damage_percent}).",
            room_id=room.id,
        )
    if room.wall_wick_height < 0:
        raise ValidationError(
            "WICK_HEIGHT_INVALID", "Wall wick height cannot be negative.", room_id=room.id
        )


def derive_geometry(room: Room) -> RoomGeometry:
    """
    floor area = length x width, perimeter = 2 x (length + width),
    cubic volume = floor area x height. North/south walls span the width,
    east/west walls the length.
    """
    length = _d(room.length)
    width = _d(room.width)
    height = _d(room.height)

    floor_area = length * width
    perimeter = D("2") * (length + width)
    cubic_volume = floor_area * height

    affected_wall_length = D("0")
    for wall in room.affected_walls:
        affected_wall_length += width if wall in ("north", "south") else length

    affected_floor_area = floor_area * _d(room.damage_percent) / D("100")

    return RoomGeometry(
        floor_area=floor_area,
        perimeter=perimeter,
        cubic_volume=cubic_volume,
        affected_wall_length=affected_wall_length,
        affected_floor_area=affected_floor_area,
        height=height,
        floor_type=room.floor_type,
        wall_wick_height=_d(room.wall_wick_height),
    )
