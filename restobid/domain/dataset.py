from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Mapping, Optional, Tuple, Union

from ..core.errors import NotFoundError
from ..schemas.options import Question

if TYPE_CHECKING:
    from ..engine.rule_runner import RuleRunner

SeverityKey = Union[int, str]


@dataclass(frozen=True)
class SeverityDefinition:
    damage_type: str
    scale: str  # category / class / level / condition / soot_type
    key: SeverityKey
    name: str
    description: str = ""
    ppe_required: Optional[str] = None
    estimate_modifier: Optional[str] = None
    details: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CatalogEntry:
    code: str
    description: str
    unit: str
    group: Optional[str] = None


@dataclass(frozen=True)
class RoomTypeProfile:
    tag: str
    typical_materials: Tuple[str, ...]
    scope_hints: Tuple[str, ...]
    common_codes: Tuple[str, ...]
    notes: Optional[str] = None


@dataclass(frozen=True)
class SizingFactors:
    dehumidifier: Mapping[str, Mapping[int, Decimal]]  # kind -> class -> cubic feet per pint
    unit_capacity_pints: Decimal
    air_mover_coverage_sf: Decimal
    fallback_class: int
    negative_air_ach: Decimal

    def factor(self, kind: str, class_number: int) -> Optional[Decimal]:
        return (self.dehumidifier.get(kind) or {}).get(class_number)


@dataclass(frozen=True)
class ReferenceDataset:
    version: str

    severity_definitions: Mapping[Tuple[str, str, SeverityKey], SeverityDefinition]
    room_type_profiles: Mapping[str, RoomTypeProfile]      # tag -> profile (advisory)
    sizing_factors: SizingFactors
    question_scripts: Mapping[str, Tuple[Question, ...]]   # damage type -> ordered script
    line_item_catalog: Mapping[str, CatalogEntry]          # code -> entry
    line_item_rules: Mapping[str, "RuleRunner"]            # damage type -> runner

    def severity(self, damage_type: str, scale: str, key: SeverityKey) -> SeverityDefinition:
        found = self.severity_definitions.get((damage_type, scale, key))
        if found is None:
            raise NotFoundError(
                "SEVERITY_UNDEFINED",
                f"No severity definition for {damage_type}.{scale}.{key}",
                damage_type=damage_type,
                scale=scale,
                key=key,
            )
        return found

    def has_severity(self, damage_type: str, scale: str, key: SeverityKey) -> bool:
        return (damage_type, scale, key) in self.severity_definitions

    def severity_damage_types(self) -> set[str]:
        return {k[0] for k in self.severity_definitions}

    def script(self, damage_type: str) -> Tuple[Question, ...]:
        return self.question_scripts[damage_type]

    def catalog_entry(self, code: str) -> CatalogEntry:
        return self.line_item_catalog[code]
