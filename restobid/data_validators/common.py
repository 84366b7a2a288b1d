from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


# =========================
# Validation outputs + helpers
# =========================


@dataclass(frozen=True)
class ValidationIssue:
    source: str              # severity / question_scripts / line_item_catalog / rules / sizing
    location: Optional[str]  # e.g. "water[2].options[1]" or rule id; None = file-level
    code: str
    message: str


@dataclass
class ValidationResult:
    ok: bool
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    def merge(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.ok = len(self.errors) == 0


def _err(source: str, location: Optional[str], code: str, message: str) -> ValidationIssue:
    return ValidationIssue(source, location, code, message)


def _warn(source: str, location: Optional[str], code: str, message: str) -> ValidationIssue:
    return ValidationIssue(source, location, code, message)


def format_issues(issues: list[ValidationIssue]) -> str:
    lines = []
    for i in issues:
        where = f"{i.source}:{i.location}" if i.location else i.source
        lines.append(f"[{i.code}] {where}: {i.message}")
    return "\n".join(lines)
