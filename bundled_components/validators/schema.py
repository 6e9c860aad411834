"""Validation of page front-matter sections against component schemas.

A component manifest may carry a ``validation`` block::

    {
      "required": ["sectionType", "heading.text"],
      "properties": {
        "isAnimated": {"type": "boolean"},
        "titleTag": {"enum": ["h1", "h2", "h3", "h4", "h5", "h6"]},
        "ctas": {"type": "array", "items": {"properties": {"style": {"enum": ["primary"]}}}}
      }
    }

Property keys are dot-paths into the section object. Every violation is
collected; nothing stops at the first failure.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..logging import get_logger
from ..models import Component, SectionDiagnostic, ValidationRule
from .base import ValidationResult

_NUMERIC_STRING = re.compile(r"^-?\d+(\.\d+)?$")
_HEADING_TAG = re.compile(r"^h[1-6]$")
_HEADING_MISSPELLINGS = {"header", "heading", "title"}

_MISSING = object()

logger = get_logger("validators.schema")

ManifestLookup = Callable[[str], Union[Component, Mapping[str, Any]]]


class UnknownComponentError(LookupError):
    """Raised by a manifest lookup for a section type with no component."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Component "{name}" not found')
        self.name = name


# ----------------------------------------------------------------------
# Dot-path helpers


def get_nested_property(obj: Any, path: str) -> Any:
    """Resolve ``path`` against ``obj``; returns ``None`` when any segment is missing."""
    value = _lookup(obj, path)
    return None if value is _MISSING else value


def has_nested_property(obj: Any, path: str) -> bool:
    """True when the final segment exists as a key, even if its value is null."""
    if not isinstance(obj, dict):
        return False
    current: Any = obj
    segments = path.split(".")
    for segment in segments[:-1]:
        if not isinstance(current, dict) or segment not in current:
            return False
        current = current[segment]
    return isinstance(current, dict) and segments[-1] in current


def set_nested_property(obj: Dict[str, Any], path: str, value: Any) -> None:
    """Assign ``value`` at ``path``, replacing non-mapping intermediates."""
    current = obj
    segments = path.split(".")
    for segment in segments[:-1]:
        if not isinstance(current.get(segment), dict):
            current[segment] = {}
        current = current[segment]
    current[segments[-1]] = value


def _lookup(obj: Any, path: str) -> Any:
    current = obj
    for segment in path.split("."):
        if not isinstance(current, dict) or segment not in current:
            return _MISSING
        current = current[segment]
    return current


# ----------------------------------------------------------------------
# Value helpers


def type_name(value: Any) -> str:
    """Name ``value``'s kind using the manifest vocabulary."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    return "object"


def _strict_equals(left: Any, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if type_name(left) != type_name(right):
        return False
    return left == right


def _display(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value, default=str)
    return str(value)


def generate_tip(value: Any, rule: Mapping[str, Any]) -> Optional[str]:
    """Return an advisory hint for common front-matter mistakes, if one applies."""
    if not isinstance(value, str):
        return None
    expected = rule.get("type")
    if expected == "boolean" and value in {"true", "false"}:
        return f'String "{value}" evaluates to true in templates. Use boolean {value} instead.'
    if expected == "number" and _NUMERIC_STRING.match(value):
        return f'String "{value}" should be a number. Remove quotes: {value}'
    allowed = rule.get("enum")
    if (
        isinstance(allowed, list)
        and allowed
        and all(isinstance(item, str) and _HEADING_TAG.match(item) for item in allowed)
        and value.lower() in _HEADING_MISSPELLINGS
    ):
        return "Use h1, h2, h3, h4, h5, or h6 for heading tags."
    return None


# ----------------------------------------------------------------------
# Single constraint checks


def validate_type_constraint(value: Any, rule: Mapping[str, Any], path: str) -> ValidationResult:
    expected = rule.get("type")
    if not expected:
        return ValidationResult.ok()
    actual = type_name(value)
    if actual != expected:
        return ValidationResult.fail(f"{path}: expected {expected}, got {actual}")
    return ValidationResult.ok()


def validate_const_constraint(value: Any, rule: Mapping[str, Any], path: str) -> ValidationResult:
    if "const" not in rule:
        return ValidationResult.ok()
    expected = rule["const"]
    if not _strict_equals(value, expected):
        return ValidationResult.fail(
            f'{path}: expected "{_display(expected)}", got "{_display(value)}"'
        )
    return ValidationResult.ok()


def validate_enum_constraint(value: Any, rule: Mapping[str, Any], path: str) -> ValidationResult:
    allowed = rule.get("enum")
    if not isinstance(allowed, list):
        return ValidationResult.ok()
    if any(_strict_equals(value, item) for item in allowed):
        return ValidationResult.ok()
    options = ", ".join(_display(item) for item in allowed)
    return ValidationResult.fail(f'{path}: "{_display(value)}" is invalid. Must be one of: {options}')


def validate_array_items(value: Any, rule: Mapping[str, Any], path: str) -> ValidationResult:
    """Apply an ``items`` rule to each element of an array value."""
    items = rule.get("items")
    if not isinstance(value, list) or not isinstance(items, dict):
        return ValidationResult.ok()

    errors: List[str] = []
    nested_properties = items.get("properties")
    nested_required = items.get("required")
    direct = any(key in items for key in ("type", "enum", "const"))
    for index, element in enumerate(value):
        item_path = f"{path}[{index}]"
        if isinstance(nested_properties, dict) or isinstance(nested_required, list):
            if isinstance(element, dict):
                if isinstance(nested_required, list):
                    _collect(errors, validate_required_properties(element, nested_required, item_path))
                if isinstance(nested_properties, dict):
                    _collect(errors, validate_object_properties(element, nested_properties, item_path))
        elif direct:
            _collect(errors, validate_property(element, items, item_path))

    if errors:
        return ValidationResult.fail("\n".join(errors))
    return ValidationResult.ok()


def validate_property(value: Any, rule: Mapping[str, Any], path: str) -> ValidationResult:
    """Run every constraint on ``rule`` against ``value``; null values pass."""
    if value is None or not isinstance(rule, Mapping):
        return ValidationResult.ok()

    errors: List[str] = []
    for check in (validate_type_constraint, validate_const_constraint, validate_enum_constraint):
        result = check(value, rule, path)
        if not result.valid and result.error:
            errors.append(result.error)

    tip = generate_tip(value, rule) if errors else None
    if tip:
        errors[0] = f"{errors[0]}\n    Tip: {tip}"

    _collect(errors, validate_array_items(value, rule, path))

    if errors:
        return ValidationResult.fail("\n".join(errors))
    return ValidationResult.ok()


# ----------------------------------------------------------------------
# Object and section checks


def validate_required_properties(obj: Any, required: Iterable[str], base_path: str = "") -> ValidationResult:
    errors = [
        f"{_join(base_path, path)}: required property is missing"
        for path in required
        if not has_nested_property(obj, path)
    ]
    if errors:
        return ValidationResult.fail("\n".join(errors))
    return ValidationResult.ok()


def validate_object_properties(
    obj: Any, properties: Mapping[str, Any], base_path: str = ""
) -> ValidationResult:
    errors: List[str] = []
    for path, rule in properties.items():
        value = get_nested_property(obj, path)
        _collect(errors, validate_property(value, rule, _join(base_path, path)))
    if errors:
        return ValidationResult.fail("\n".join(errors))
    return ValidationResult.ok()


def validate_section(
    section: Any,
    validation: ValidationRule | Mapping[str, Any] | None,
    context: str = "",
) -> ValidationResult:
    """Validate one section object, combining every violation into one message."""
    rule = _coerce_rule(validation)
    if rule is None or rule.is_empty():
        return ValidationResult.ok()

    errors: List[str] = []
    _collect(errors, validate_required_properties(section, rule.required))
    _collect(errors, validate_object_properties(section, rule.properties))
    if not errors:
        return ValidationResult.ok()

    body = "\n".join(f"  {line}" for error in errors for line in error.split("\n"))
    if context:
        return ValidationResult.fail(f"{context}\n{body}")
    return ValidationResult.fail(body)


def validate_sections(
    sections: Any,
    get_manifest: ManifestLookup,
    file_name: str | None = None,
) -> List[SectionDiagnostic]:
    """Validate a front-matter ``sections`` array; returns one record per failing section."""
    if not isinstance(sections, list):
        return []

    diagnostics: List[SectionDiagnostic] = []
    for index, section in enumerate(sections):
        if not isinstance(section, dict):
            continue
        section_type = section.get("sectionType")
        if not isinstance(section_type, str) or not section_type:
            continue
        try:
            manifest = get_manifest(section_type)
        except Exception as exc:  # lookups signal unknown section types by raising
            logger.debug("Skipping validation for section %d (%s): %s", index, section_type, exc)
            continue

        validation = manifest.validation if isinstance(manifest, Component) else manifest.get("validation")
        if validation is None:
            continue

        if file_name:
            context = f"Section {index} ({section_type}) in {file_name}:"
        else:
            context = f"Section {index} ({section_type}):"
        result = validate_section(section, validation, context)
        if not result.valid:
            diagnostics.append(
                SectionDiagnostic(
                    message=result.error or context,
                    section_type=section_type,
                    section_index=index,
                    file_name=file_name,
                )
            )
    return diagnostics


def manifest_lookup(component_map: Mapping[str, Component]) -> ManifestLookup:
    """Build a section-type lookup over discovered components."""

    def _lookup_component(section_type: str) -> Component:
        component = component_map.get(section_type)
        if component is None:
            raise UnknownComponentError(section_type)
        return component

    return _lookup_component


def _coerce_rule(validation: Any) -> Optional[ValidationRule]:
    if isinstance(validation, ValidationRule):
        return validation
    return ValidationRule.from_manifest(validation)


def _collect(errors: List[str], result: ValidationResult) -> None:
    if not result.valid and result.error:
        errors.append(result.error)


def _join(base_path: str, path: str) -> str:
    return f"{base_path}.{path}" if base_path else path


__all__ = [
    "UnknownComponentError",
    "generate_tip",
    "get_nested_property",
    "has_nested_property",
    "manifest_lookup",
    "set_nested_property",
    "type_name",
    "validate_array_items",
    "validate_const_constraint",
    "validate_enum_constraint",
    "validate_object_properties",
    "validate_property",
    "validate_required_properties",
    "validate_section",
    "validate_sections",
    "validate_type_constraint",
]
