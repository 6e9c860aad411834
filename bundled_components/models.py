"""Core data models shared across the component pipeline."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class ValidationRule:
    """Constraints a section component places on page front-matter data."""

    required: List[str] = field(default_factory=list)
    properties: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_manifest(cls, payload: Any) -> Optional["ValidationRule"]:
        if not isinstance(payload, dict):
            return None
        required = payload.get("required")
        properties = payload.get("properties")
        return cls(
            required=[str(item) for item in required] if isinstance(required, list) else [],
            properties=(
                {str(key): value for key, value in properties.items() if isinstance(value, dict)}
                if isinstance(properties, dict)
                else {}
            ),
        )

    def is_empty(self) -> bool:
        return not self.required and not self.properties

    def as_dict(self) -> Dict[str, Any]:
        return {"required": list(self.required), "properties": dict(self.properties)}


@dataclass
class Component:
    """A component directory together with its normalized manifest."""

    name: str
    path: Path
    styles: List[str] = field(default_factory=list)
    scripts: List[str] = field(default_factory=list)
    requires: Optional[List[str]] = None
    dependencies: List[str] = field(default_factory=list)
    type: Optional[str] = None
    description: Optional[str] = None
    validation: Optional[ValidationRule] = None
    source: str = "manifest"
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def requirements(self) -> List[str]:
        """Declared requirements; ``requires`` wins over legacy ``dependencies``."""
        if self.requires is not None:
            return list(self.requires)
        return list(self.dependencies)

    @property
    def is_auto(self) -> bool:
        return self.source == "auto"


@dataclass
class SectionDiagnostic:
    """A schema violation report for one front-matter section."""

    message: str
    section_type: str
    section_index: int
    file_name: Optional[str] = None


@dataclass
class BundledAssets:
    """Compiled output for a build; ``None`` when an asset kind had no entries."""

    css: Optional[str] = None
    js: Optional[str] = None
