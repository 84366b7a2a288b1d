from __future__ import annotations

from ..domain.dataset import ReferenceDataset
from ..schemas.options import FireOptionData, MoldOptionData, WaterOptionData
from .common import ValidationIssue, ValidationResult, _err, _warn


def check_catalog_closure(dataset: ReferenceDataset) -> ValidationResult:
    """Every code any rule can emit must exist in the line-item catalog."""
    errors: list[ValidationIssue] = []
    for damage_type, runner in dataset.line_item_rules.items():
        for rule in runner.rules():
            for code in rule.codes():
                if code not in dataset.line_item_catalog:
                    errors.append(
                        _err(
                            "rules",
                            f"{damage_type}.{rule.rule_id}",
                            "UNKNOWN_CODE",
                            f"Rule emits code {code} which is not in the line-item catalog.",
                        )
                    )
    return ValidationResult(ok=not errors, errors=errors)


def check_script_coverage(dataset: ReferenceDataset) -> ValidationResult:
    """
    Every scripted damage type needs severity definitions and a rule set.
    Rule sets without a script can never run; that is only a warning.
    """
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []
    severity_types = dataset.severity_damage_types()

    for damage_type in dataset.question_scripts:
        if damage_type not in severity_types:
            errors.append(
                _err(
                    "question_scripts",
                    damage_type,
                    "NO_SEVERITY_DEFINITIONS",
                    f"Question script for '{damage_type}' but no severity definitions exist for it.",
                )
            )
        if damage_type not in dataset.line_item_rules:
            errors.append(
                _err(
                    "rules",
                    damage_type,
                    "NO_RULE_SET",
                    f"Question script for '{damage_type}' but no line-item rule set.",
                )
            )

    for damage_type in dataset.line_item_rules:
        if damage_type not in dataset.question_scripts:
            warnings.append(
                _warn(
                    "rules",
                    damage_type,
                    "RULE_SET_UNREACHABLE",
                    f"Rule set for '{damage_type}' has no question script.",
                )
            )

    return ValidationResult(ok=not errors, errors=errors, warnings=warnings)


def check_option_hints(dataset: ReferenceDataset) -> ValidationResult:
    """Option payloads must match their script; severity hints should be defined."""
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    for damage_type, script in dataset.question_scripts.items():
        for qi, question in enumerate(script):
            for oi, option in enumerate(question.options):
                loc = f"{damage_type}[{qi}].options[{oi}]"
                data = option.data

                if data.damage_type != damage_type:
                    errors.append(
                        _err(
                            "question_scripts",
                            loc,
                            "OPTION_KIND_MISMATCH",
                            f"Option payload is '{data.damage_type}' inside the '{damage_type}' script.",
                        )
                    )
                    continue

                hints: list[tuple[str, object]] = []
                if isinstance(data, WaterOptionData):
                    if data.category is not None:
                        hints.append(("category", data.category))
                    if data.water_class is not None:
                        hints.append(("class", data.water_class))
                elif isinstance(data, MoldOptionData):
                    if data.level is not None:
                        hints.append(("level", data.level))
                elif isinstance(data, FireOptionData):
                    if data.soot_type is not None:
                        hints.append(("soot_type", data.soot_type))

                for scale, key in hints:
                    if not dataset.has_severity(damage_type, scale, key):
                        warnings.append(
                            _warn(
                                "question_scripts",
                                loc,
                                "SEVERITY_HINT_UNDEFINED",
                                f"{damage_type}.{scale}.{key} has no severity definition; "
                                "a generic label will be used.",
                            )
                        )

    return ValidationResult(ok=not errors, errors=errors, warnings=warnings)


def check_sizing(dataset: ReferenceDataset) -> ValidationResult:
    """The fallback class must exist in every dehumidifier table."""
    sizing = dataset.sizing_factors
    errors = [
        _err(
            "sizing",
            kind,
            "FALLBACK_CLASS_MISSING",
            f"Dehumidifier table '{kind}' has no factor for fallback class {sizing.fallback_class}.",
        )
        for kind, table in sizing.dehumidifier.items()
        if sizing.fallback_class not in table
    ]
    return ValidationResult(ok=not errors, errors=errors)


def validate_reference_dataset(dataset: ReferenceDataset) -> ValidationResult:
    """
    Cross-table consistency checks, run once when the dataset loads:
      1) catalog closure over all rule codes
      2) script damage types covered by severity definitions and rule sets
      3) option payload kinds + severity hints
      4) sizing fallback class present
    """
    result = ValidationResult(ok=True)
    result.merge(check_catalog_closure(dataset))
    result.merge(check_script_coverage(dataset))
    result.merge(check_option_hints(dataset))
    result.merge(check_sizing(dataset))
    return result
