from __future__ import annotations

import math
from typing import Any, Dict, List

from .base import D, QUANTITY_BASES, Rule, RuleResult, register


@register
class LineItemRule(Rule):
    """
    One conditional line item.

    params:
      code, category, label (optional, catalog description otherwise)
      quantity: {fixed: n} or {basis: <geometry basis>, multiplier, divisor, ceil}
    """

    type_name = "line_item"

    def __init__(self, rule_id: str, title: str, params: Dict[str, Any]):
        super().__init__(rule_id, title, params)
        self.code = str(self._require("code"))
        self.label = self.params.get("label")

        q = dict(self.params.get("quantity") or {"fixed": 1})
        if "fixed" in q:
            self.fixed = D(str(q["fixed"]))
            self.basis = None
        else:
            self.fixed = None
            self.basis = str(q.get("basis") or "")
            if self.basis not in QUANTITY_BASES:
                raise ValueError(f"Rule {self.rule_id}: unknown quantity basis {self.basis!r}")
        self.multiplier = D(str(q.get("multiplier", 1)))
        self.divisor = D(str(q.get("divisor", 1)))
        if self.divisor <= 0:
            raise ValueError(f"Rule {self.rule_id}: divisor must be > 0")
        self.round_up = bool(q.get("ceil", False))

    def codes(self) -> List[str]:
        return [self.code]

    def quantity(self, ctx) -> D:
        if self.fixed is not None:
            return self.fixed
        qty = ctx.basis(self.basis) * self.multiplier / self.divisor
        if self.round_up:
            return D(math.ceil(qty))
        return qty

    def apply(self, ctx) -> RuleResult:
        if not self.conditions_hold(ctx):
            return RuleResult.skipped({"reason": "conditions"})

        qty = self.quantity(ctx)
        ctx.emit(self.code, qty, self.category, self.label)
        return RuleResult.applied(
            self.code, meta={"basis": self.basis or "fixed", "quantity": str(qty)}
        )
