from __future__ import annotations

from dataclasses import dataclass, fields
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set, Type

from ..calculators.geometry import RoomGeometry
from ..domain.classification import CLASSIFICATION_MODELS

D = Decimal

# Decisions (avoid string typos)
DECISION_APPLIED = "APPLIED"
DECISION_SKIPPED = "SKIPPED"

MODES = ("both", "rough", "room")

QUANTITY_BASES = {
    "floor_area",
    "perimeter",
    "cubic_volume",
    "affected_wall_length",
    "affected_floor_area",
    "wall_run",
    "wall_area",
    "flood_cut_area",
}

if TYPE_CHECKING:
    from ..engine.context import GenerationContext


def _known_facts() -> Set[str]:
    names: Set[str] = {"wall_run"}
    for model in CLASSIFICATION_MODELS:
        names.update(model.model_fields)
    names.update(f.name for f in fields(RoomGeometry))
    return names


KNOWN_FACTS = _known_facts()


@dataclass(frozen=True)
class RuleResult:
    """
    Result of applying a rule.
    - decision: APPLIED / SKIPPED
    - codes: codes emitted by this rule
    - meta: why it was skipped, or what it sized the items on
    """

    decision: str
    codes: tuple
    meta: Dict[str, Any]

    @staticmethod
    def applied(*codes: str, meta: Optional[Dict[str, Any]] = None) -> "RuleResult":
        return RuleResult(decision=DECISION_APPLIED, codes=tuple(codes), meta=meta or {})

    @staticmethod
    def skipped(meta: Optional[Dict[str, Any]] = None) -> "RuleResult":
        return RuleResult(decision=DECISION_SKIPPED, codes=(), meta=meta or {})


# -----------------------
# Conditions
# -----------------------

CONDITION_OPS = ("eq", "ne", "gte", "lte", "gt", "lt", "in", "not_in", "truthy")


@dataclass(frozen=True)
class Condition:
    fact: str
    op: str
    value: Any = None

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Condition":
        fact = str(d.get("fact") or "")
        if fact not in KNOWN_FACTS:
            raise ValueError(f"Unknown condition fact: {fact!r}")
        ops = [k for k in d if k != "fact"]
        if len(ops) != 1 or ops[0] not in CONDITION_OPS:
            raise ValueError(f"Condition on {fact!r} needs exactly one of {CONDITION_OPS}")
        op = ops[0]
        return Condition(fact=fact, op=op, value=d[op])

    def holds(self, ctx: "GenerationContext") -> bool:
        try:
            actual = ctx.fact(self.fact)
        except KeyError:
            # fact not carried by this damage type's classification
            return False

        v = self.value
        if self.op == "truthy":
            return bool(actual) is bool(v)
        if self.op == "eq":
            return actual == v
        if self.op == "ne":
            return actual != v
        if self.op == "in":
            return actual in v
        if self.op == "not_in":
            return actual not in v

        a, b = D(str(actual)), D(str(v))
        if self.op == "gte":
            return a >= b
        if self.op == "lte":
            return a <= b
        if self.op == "gt":
            return a > b
        return a < b


def parse_conditions(raw: Any) -> List[Condition]:
    return [Condition.from_dict(c) for c in (raw or [])]


# -----------------------
# Rule base + registry
# -----------------------


class Rule:
    """
    Base class for all line-item rules. Every rule implements apply(ctx)
    and codes() (every code it can ever emit, for the catalog check).

    Common params:
      mode: both | rough | room
      when: list of conditions, all must hold
      category: category tag of emitted items
    """

    type_name: str = "base"

    def __init__(self, rule_id: str, title: str, params: Dict[str, Any]):
        self.rule_id = str(rule_id)
        self.title = str(title)
        self.params = params or {}

        self.mode = str(self.params.get("mode", "both"))
        if self.mode not in MODES:
            raise ValueError(f"Rule {self.rule_id}: unknown mode {self.mode!r}")
        self.conditions = parse_conditions(self.params.get("when"))
        self.category = str(self.params.get("category") or "General")

    def runs_in(self, mode: str) -> bool:
        return self.mode == "both" or self.mode == mode

    def conditions_hold(self, ctx: "GenerationContext") -> bool:
        return all(c.holds(ctx) for c in self.conditions)

    def codes(self) -> List[str]:
        raise NotImplementedError

    def apply(self, ctx: "GenerationContext") -> RuleResult:
        raise NotImplementedError

    def _require(self, key: str) -> Any:
        if key not in self.params or self.params[key] in (None, ""):
            raise ValueError(f"Rule {self.rule_id} ({self.type_name}): missing param {key!r}")
        return self.params[key]


# Registry: rule_type -> Rule class
rule_registry: Dict[str, Type[Rule]] = {}


def register(rule_cls: Type[Rule]) -> Type[Rule]:
    """
    Decorator to register a rule by its type_name.
    Fails fast on duplicate registrations.
    """
    key = getattr(rule_cls, "type_name", None)
    if not key:
        raise ValueError(f"Rule class {rule_cls.__name__} has no type_name")

    if key in rule_registry and rule_registry[key] is not rule_cls:
        raise ValueError(
            f"Duplicate rule registration for type '{key}': "
            f"{rule_registry[key].__name__} vs {rule_cls.__name__}"
        )

    rule_registry[key] = rule_cls
    return rule_cls
