from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

import yaml
from jsonschema import validate

from ..rule_types.base import Rule, rule_registry
from .context import GenerationContext

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "schemas" / "rule_set.schema.json"


# -----------------------
# Ruleset models
# -----------------------


@dataclass(frozen=True)
class RuleSpec:
    id: str
    type: str
    title: str
    enabled: bool = True
    params: Dict[str, Any] | None = None

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "RuleSpec":
        return RuleSpec(
            id=str(d["id"]),
            type=str(d["type"]),
            title=str(d.get("title") or d["id"]),
            enabled=bool(d.get("enabled", True)),
            params=dict(d.get("params") or {}),
        )


def _duplicates(ids: List[str]) -> List[str]:
    seen, dups = set(), []
    for rid in ids:
        if rid in seen and rid not in dups:
            dups.append(rid)
        seen.add(rid)
    return dups


@dataclass(frozen=True)
class RuleSet:
    """Rules for one damage type plus the order they run in."""

    damage_type: str
    execution_order: List[str]
    rules: List[RuleSpec]

    @staticmethod
    def from_dict(damage_type: str, d: Dict[str, Any]) -> "RuleSet":
        rules = [RuleSpec.from_dict(x) for x in d.get("rules", [])]
        execution_order = list(d.get("executionOrder") or [])
        ids = [r.id for r in rules]

        if not execution_order:
            raise ValueError(f"{damage_type}: executionOrder must contain at least one rule id.")

        dups = _duplicates(ids)
        if dups:
            raise ValueError(f"{damage_type}: duplicate rule ids: {dups}")

        dups = _duplicates(execution_order)
        if dups:
            raise ValueError(f"{damage_type}: duplicate rule ids in executionOrder: {dups}")

        missing = sorted(set(execution_order) - set(ids))
        if missing:
            raise ValueError(f"{damage_type}: executionOrder references unknown rule ids: {missing}")

        unlisted = sorted(set(ids) - set(execution_order))
        if unlisted:
            raise ValueError(f"{damage_type}: rules not listed in executionOrder: {unlisted}")

        return RuleSet(damage_type=damage_type, execution_order=execution_order, rules=rules)


def load_rule_sets(path: Path) -> tuple[str, Dict[str, RuleSet]]:
    """Read + schema-validate a rule-set YAML file. Returns (version, damage type -> RuleSet)."""
    with Path(path).open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        schema = json.load(f)
    validate(instance=raw, schema=schema)

    version = str(raw.get("ruleSetVersion") or "v1")
    sets = {
        str(dt): RuleSet.from_dict(str(dt), body)
        for dt, body in (raw.get("damageTypes") or {}).items()
    }
    return version, sets


# -----------------------
# Runner
# -----------------------


class RuleRunner:
    """
    Deterministic line-item runner for one damage type.

    - rules are instantiated once from the registry (unknown type -> ValueError)
    - for rule in executionOrder: skip disabled rules and rules for the other mode
    - each rule may emit items into ctx.sheet; same code later supersedes earlier
    """

    def __init__(self, ruleset: RuleSet):
        self.ruleset = ruleset
        self._rules: Dict[str, Rule] = {}
        self._enabled: Dict[str, bool] = {}

        for spec in ruleset.rules:
            rule_cls = rule_registry.get(spec.type)
            if rule_cls is None:
                raise ValueError(
                    f"{ruleset.damage_type}: unknown rule type {spec.type!r} (rule {spec.id})"
                )
            self._rules[spec.id] = rule_cls(spec.id, spec.title, spec.params or {})
            self._enabled[spec.id] = spec.enabled

    @property
    def damage_type(self) -> str:
        return self.ruleset.damage_type

    def rules(self) -> List[Rule]:
        return [self._rules[rid] for rid in self.ruleset.execution_order]

    def codes(self) -> List[str]:
        out: List[str] = []
        for rule in self.rules():
            for code in rule.codes():
                if code not in out:
                    out.append(code)
        return out

    def run(self, ctx: GenerationContext) -> GenerationContext:
        for rule_id in self.ruleset.execution_order:
            rule = self._rules[rule_id]

            if not self._enabled[rule_id]:
                ctx.trace.append({"rule": rule_id, "decision": "DISABLED"})
                continue
            if not rule.runs_in(ctx.mode):
                ctx.trace.append({"rule": rule_id, "decision": "OTHER_MODE"})
                continue

            result = rule.apply(ctx)
            ctx.trace.append(
                {"rule": rule_id, "decision": result.decision, "codes": list(result.codes)}
            )
        return ctx
