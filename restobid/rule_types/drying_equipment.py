from __future__ import annotations

from typing import List

from ..calculators.equipment import size_equipment_for
from .base import Rule, RuleResult, register


@register
class DryingEquipmentRule(Rule):
    """Air movers and dehumidifiers sized from the water class and geometry."""

    type_name = "drying_equipment"

    def __init__(self, rule_id, title, params):
        super().__init__(rule_id, title, params)
        self.air_mover_code = str(self._require("air_mover_code"))
        self.dehumidifier_code = str(self._require("dehumidifier_code"))
        self.air_mover_label = self.params.get("air_mover_label")
        self.dehumidifier_label = self.params.get("dehumidifier_label")
        self.kind = str(self.params.get("dehumidifier_kind", "lgr"))

    def codes(self) -> List[str]:
        return [self.air_mover_code, self.dehumidifier_code]

    def apply(self, ctx) -> RuleResult:
        if not self.conditions_hold(ctx):
            return RuleResult.skipped({"reason": "conditions"})

        class_number = int(ctx.fact("water_class"))
        counts = size_equipment_for(
            ctx.dataset.sizing_factors, class_number, ctx.geometry, kind=self.kind
        )
        if counts.factor_fallback:
            ctx.warn(
                "SIZING_FACTOR_FALLBACK",
                f"No {self.kind} factor for class {class_number}; used class "
                f"{ctx.dataset.sizing_factors.fallback_class}.",
                class_number=class_number,
            )

        ctx.emit(self.air_mover_code, counts.air_movers, self.category, self.air_mover_label)
        ctx.emit(
            self.dehumidifier_code,
            counts.dehumidifier_units,
            self.category,
            self.dehumidifier_label,
        )
        return RuleResult.applied(
            self.air_mover_code,
            self.dehumidifier_code,
            meta={"pints": counts.dehumidifier_pints, "factor": str(counts.class_factor)},
        )
