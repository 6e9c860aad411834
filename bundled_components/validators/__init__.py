"""Requirement and front-matter schema validation."""

from .base import RequirementError, SectionValidationError, ValidationError, ValidationResult
from .requirements import validate_requirements
from .schema import (
    UnknownComponentError,
    generate_tip,
    manifest_lookup,
    validate_section,
    validate_sections,
)

__all__ = [
    "RequirementError",
    "SectionValidationError",
    "UnknownComponentError",
    "ValidationError",
    "ValidationResult",
    "generate_tip",
    "manifest_lookup",
    "validate_requirements",
    "validate_section",
    "validate_sections",
]
