from __future__ import annotations

from typing import List

from ..calculators.geometry import FLOOD_CUT_SHORT_MAX_WICK_INCHES
from .base import D, Rule, RuleResult, register


@register
class FloodCutRule(Rule):
    """
    Flood cut along the selected walls, only when walls are selected and
    water wicked up them. Picks the 2 ft code up to the wick threshold,
    the 4 ft code above it.
    """

    type_name = "flood_cut"

    def __init__(self, rule_id, title, params):
        super().__init__(rule_id, title, params)
        self.short_code = str(self._require("short_code"))
        self.tall_code = str(self._require("tall_code"))
        self.short_label = self.params.get("short_label")
        self.tall_label = self.params.get("tall_label")
        self.max_short_wick = D(
            str(self.params.get("max_short_wick_inches", FLOOD_CUT_SHORT_MAX_WICK_INCHES))
        )

    def codes(self) -> List[str]:
        return [self.short_code, self.tall_code]

    def apply(self, ctx) -> RuleResult:
        if not self.conditions_hold(ctx):
            return RuleResult.skipped({"reason": "conditions"})

        wall_length = ctx.geometry.affected_wall_length
        wick = ctx.geometry.wall_wick_height
        if wall_length <= 0 or wick <= 0:
            return RuleResult.skipped(
                {"reason": "no_wall_wicking", "wall_length": str(wall_length), "wick": str(wick)}
            )

        if wick <= self.max_short_wick:
            code, label = self.short_code, self.short_label
        else:
            code, label = self.tall_code, self.tall_label

        ctx.emit(code, wall_length, self.category, label)
        return RuleResult.applied(code, meta={"wick_inches": str(wick)})
