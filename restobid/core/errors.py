from __future__ import annotations

from typing import Any, Dict, List, Optional


class RestobidError(Exception):
    """Base class for all errors raised by the engine."""


class ConfigurationError(RestobidError):
    """
    Reference data is inconsistent (unknown line-item codes, scripts for
    damage types without severity definitions, broken rule sets).
    Fatal at startup.
    """

    def __init__(self, message: str, issues: Optional[List[Any]] = None):
        self.message = str(message)
        self.issues = list(issues or [])
        super().__init__(self.message)


class ValidationError(RestobidError, ValueError):
    """Caller supplied input the engine refuses to process. Nothing was mutated."""

    def __init__(self, code: str, message: str, **meta: Any):
        self.code = str(code)
        self.message = str(message)
        self.meta: Dict[str, Any] = meta
        super().__init__(f"{self.code}: {self.message}")


class NotFoundError(RestobidError, LookupError):
    """A lookup (severity definition, project, room) found nothing."""

    def __init__(self, code: str, message: str, **meta: Any):
        self.code = str(code)
        self.message = str(message)
        self.meta: Dict[str, Any] = meta
        super().__init__(f"{self.code}: {self.message}")


class ExportError(RestobidError):
    """The remote ESX conversion step failed or is not configured."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = str(message)
        self.status_code = status_code
        super().__init__(self.message)
