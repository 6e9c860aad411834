"""Core validation data structures shared by the component validators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..models import SectionDiagnostic


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a single validation check."""

    valid: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult":
        return cls(valid=False, error=error)

    def __bool__(self) -> bool:
        return self.valid


class ValidationError(RuntimeError):
    """Raised when strict validation turns diagnostics into a build failure."""

    def __init__(self, message: str, issues: Sequence[object]) -> None:
        super().__init__(message)
        self.issues = list(issues)


class RequirementError(ValidationError):
    """Needed components declare requirements that were not discovered."""

    def __init__(self, errors: Sequence[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("Component requirement errors:\n" + "\n".join(self.errors), self.errors)


class SectionValidationError(ValidationError):
    """Front-matter sections violate their component's validation rules."""

    def __init__(self, diagnostics: Sequence[SectionDiagnostic]) -> None:
        self.diagnostics: List[SectionDiagnostic] = list(diagnostics)
        message = "Section validation failed:\n" + "\n".join(
            diagnostic.message for diagnostic in self.diagnostics
        )
        super().__init__(message, self.diagnostics)


__all__ = [
    "RequirementError",
    "SectionValidationError",
    "ValidationError",
    "ValidationResult",
]
