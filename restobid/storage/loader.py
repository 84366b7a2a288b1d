from __future__ import annotations

import json
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import jsonschema
import pydantic
import yaml

from ..core.errors import ConfigurationError
from ..core.logging_config import logger
from ..data_validators.common import format_issues
from ..data_validators.reference import validate_reference_dataset
from ..domain.dataset import (
    CatalogEntry,
    ReferenceDataset,
    RoomTypeProfile,
    SeverityDefinition,
    SizingFactors,
)
from ..engine.rule_runner import RuleRunner, load_rule_sets
from ..schemas.options import Question

D = Decimal

# =============================================================================
# Paths
# =============================================================================


def package_root() -> Path:
    # .../restobid/storage/loader.py -> parents[1] = .../restobid
    return Path(__file__).resolve().parents[1]


def default_reference_dir() -> Path:
    return package_root() / "reference"


def default_rule_set_path() -> Path:
    return package_root() / "rules" / "rule_sets" / "line_items.v1.yaml"


def _schema_path() -> Path:
    return package_root() / "schemas" / "reference_dataset.schema.json"


REFERENCE_FILES = {
    "severity": "severity.yaml",
    "question_scripts": "question_scripts.yaml",
    "line_item_catalog": "line_item_catalog.yaml",
    "room_types": "room_types.yaml",
    "sizing": "sizing.yaml",
}


# =============================================================================
# Raw read + schema validation
# =============================================================================


def _read_yaml(path: Path) -> Any:
    if not path.exists():
        raise ConfigurationError(f"Reference file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Reference file is not valid YAML: {path}: {e}") from e


def read_raw_reference(reference_dir: Path) -> Dict[str, Any]:
    raw = {key: _read_yaml(reference_dir / name) for key, name in REFERENCE_FILES.items()}

    with _schema_path().open("r", encoding="utf-8") as f:
        schema = json.load(f)
    try:
        jsonschema.validate(instance=raw, schema=schema)
    except jsonschema.ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigurationError(f"Reference data fails schema at {where}: {e.message}") from e
    return raw


# =============================================================================
# Resolution into domain objects
# =============================================================================

_SEVERITY_FIELDS = {"key", "name", "description", "ppe_required", "estimate_modifier"}


def _severity(raw: Dict[str, Any]) -> Dict[Tuple[str, str, Any], SeverityDefinition]:
    out: Dict[Tuple[str, str, Any], SeverityDefinition] = {}
    for damage_type, scales in raw.items():
        for scale, entries in scales.items():
            for e in entries:
                key = e["key"]
                idx = (str(damage_type), str(scale), key)
                if idx in out:
                    raise ConfigurationError(f"Duplicate severity definition {damage_type}.{scale}.{key}")
                out[idx] = SeverityDefinition(
                    damage_type=str(damage_type),
                    scale=str(scale),
                    key=key,
                    name=str(e["name"]),
                    description=str(e.get("description") or ""),
                    ppe_required=e.get("ppe_required"),
                    estimate_modifier=e.get("estimate_modifier"),
                    details={k: v for k, v in e.items() if k not in _SEVERITY_FIELDS},
                )
    return out


def _question_scripts(raw: Dict[str, Any]) -> Dict[str, Tuple[Question, ...]]:
    out: Dict[str, Tuple[Question, ...]] = {}
    for damage_type, questions in raw.items():
        parsed = []
        for qi, q in enumerate(questions):
            options = [
                {"label": o["label"], "data": {"damage_type": damage_type, **(o.get("data") or {})}}
                for o in q["options"]
            ]
            try:
                parsed.append(Question.model_validate({"prompt": q["prompt"], "options": options}))
            except pydantic.ValidationError as e:
                raise ConfigurationError(
                    f"Question script {damage_type}[{qi}] has invalid option data: {e}"
                ) from e
        out[str(damage_type)] = tuple(parsed)
    return out


def _catalog(raw: Dict[str, Any]) -> Dict[str, CatalogEntry]:
    return {
        str(code): CatalogEntry(
            code=str(code),
            description=str(e["description"]),
            unit=str(e["unit"]),
            group=e.get("group"),
        )
        for code, e in raw.items()
    }


def _room_types(raw: Dict[str, Any]) -> Dict[str, RoomTypeProfile]:
    return {
        str(tag): RoomTypeProfile(
            tag=str(tag),
            typical_materials=tuple(p.get("typical_materials") or ()),
            scope_hints=tuple(p.get("scope_hints") or ()),
            common_codes=tuple(p.get("common_codes") or ()),
            notes=p.get("notes"),
        )
        for tag, p in raw.items()
    }


def _sizing(raw: Dict[str, Any]) -> SizingFactors:
    tables = {
        str(kind): {int(row["class"]): D(str(row["factor"])) for row in rows}
        for kind, rows in raw["dehumidifier"].items()
    }
    return SizingFactors(
        dehumidifier=tables,
        unit_capacity_pints=D(str(raw["unit_capacity_pints"])),
        air_mover_coverage_sf=D(str(raw["air_mover_coverage_sf"])),
        fallback_class=int(raw["fallback_class"]),
        negative_air_ach=D(str(raw.get("negative_air_ach", 4))),
    )


def _rule_runners(rule_set_path: Path) -> Tuple[str, Dict[str, RuleRunner]]:
    if not Path(rule_set_path).exists():
        raise ConfigurationError(f"Rule set not found: {rule_set_path}")
    try:
        version, sets = load_rule_sets(rule_set_path)
        return version, {dt: RuleRunner(rs) for dt, rs in sets.items()}
    except jsonschema.ValidationError as e:
        raise ConfigurationError(f"Rule set fails schema: {e.message}") from e
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Rule set invalid: {e}") from e


# =============================================================================
# Entry points
# =============================================================================


def load_reference_dataset(
    reference_dir: Optional[Path] = None,
    rule_set_path: Optional[Path] = None,
) -> ReferenceDataset:
    """
    Load, schema-validate, resolve and consistency-check the reference data.
    Raises ConfigurationError on any defect; never returns a partial dataset.
    """
    reference_dir = Path(reference_dir or default_reference_dir())
    rule_set_path = Path(rule_set_path or default_rule_set_path())

    raw = read_raw_reference(reference_dir)
    version, runners = _rule_runners(rule_set_path)

    dataset = ReferenceDataset(
        version=version,
        severity_definitions=_severity(raw["severity"]),
        room_type_profiles=_room_types(raw["room_types"]),
        sizing_factors=_sizing(raw["sizing"]),
        question_scripts=_question_scripts(raw["question_scripts"]),
        line_item_catalog=_catalog(raw["line_item_catalog"]),
        line_item_rules=runners,
    )

    result = validate_reference_dataset(dataset)
    log = logger.bind(reference_dir=str(reference_dir), rule_set=str(rule_set_path))
    for w in result.warnings:
        log.warning("reference_data_warning", code=w.code, source=w.source, location=w.location, detail=w.message)
    if not result.ok:
        log.error("reference_data_inconsistent", errors=len(result.errors))
        raise ConfigurationError(
            "Reference data is inconsistent:\n" + format_issues(result.errors),
            issues=result.errors,
        )

    log.info(
        "reference_data_loaded",
        version=version,
        damage_types=sorted(dataset.question_scripts),
        catalog_codes=len(dataset.line_item_catalog),
        severity_definitions=len(dataset.severity_definitions),
    )
    return dataset


@lru_cache(maxsize=4)
def get_reference_dataset(
    reference_dir: Optional[str] = None, rule_set_path: Optional[str] = None
) -> ReferenceDataset:
    """Process-wide cached dataset (HTTP layer). Core functions take the dataset explicitly."""
    return load_reference_dataset(
        Path(reference_dir) if reference_dir else None,
        Path(rule_set_path) if rule_set_path else None,
    )
