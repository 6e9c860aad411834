"""Component discovery and manifest normalization."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .logging import get_logger
from .models import Component, ValidationRule

MANIFEST_FILENAME = "manifest.json"

_KNOWN_FIELDS = {
    "name",
    "path",
    "type",
    "description",
    "styles",
    "scripts",
    "requires",
    "dependencies",
    "validation",
}

logger = get_logger("discovery")


class DuplicateComponentError(ValueError):
    """Raised when two discovered components share a name."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Duplicate component name "{name}"')
        self.name = name


class ComponentMap(Mapping[str, Component]):
    """Read-only name -> component lookup built once per discovery pass."""

    def __init__(self, components: Iterable[Component]) -> None:
        entries: Dict[str, Component] = {}
        for component in components:
            if component.name in entries:
                raise DuplicateComponentError(component.name)
            entries[component.name] = component
        self._entries = entries

    def __getitem__(self, name: str) -> Component:
        return self._entries[name]

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ComponentMap({sorted(self._entries)!r})"


def is_path_safe(asset_path: object, component_dir: Path) -> bool:
    """Return True when ``asset_path`` stays inside ``component_dir`` once resolved."""
    if not isinstance(asset_path, str) or not asset_path.strip():
        return False
    base = Path(component_dir).resolve()
    candidate = (base / asset_path).resolve()
    return candidate == base or base in candidate.parents


def filter_safe_asset_paths(paths: object, component_dir: Path) -> List[str]:
    """Drop declared asset paths that would escape the component directory."""
    if not isinstance(paths, list):
        return []
    safe: List[str] = []
    for asset in paths:
        if is_path_safe(asset, component_dir):
            safe.append(asset)
        else:
            logger.warning(
                "Ignoring unsafe asset path %r declared by component at %s", asset, component_dir
            )
    return safe


def auto_generate_manifest(component_path: Path, name: str) -> Component:
    """Synthesize a manifest from ``<name>.css``/``<name>.js`` beside the directory."""
    component_path = Path(component_path).resolve()
    styles = [f"{name}.css"] if (component_path / f"{name}.css").is_file() else []
    scripts = [f"{name}.js"] if (component_path / f"{name}.js").is_file() else []
    return Component(
        name=name,
        path=component_path,
        styles=filter_safe_asset_paths(styles, component_path),
        scripts=filter_safe_asset_paths(scripts, component_path),
        requires=[],
        dependencies=[],
        type="auto",
        source="auto",
    )


def load_component(component_path: Path, name: str) -> Optional[Component]:
    """Load a component from its manifest, or synthesize one when none exists.

    Returns ``None`` when the manifest is unreadable, malformed or lacks a name.
    """
    component_path = Path(component_path).resolve()
    manifest_path = component_path / MANIFEST_FILENAME
    if not manifest_path.is_file():
        return auto_generate_manifest(component_path, name)

    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Skipping component %s: could not load %s (%s)", name, manifest_path, exc)
        return None

    if not isinstance(manifest, dict):
        logger.warning("Skipping component %s: %s must contain an object", name, manifest_path)
        return None

    manifest_name = manifest.get("name")
    if not isinstance(manifest_name, str) or not manifest_name:
        logger.warning("Skipping component %s: %s is missing a name", name, manifest_path)
        return None

    return _component_from_manifest(manifest, component_path)


def collect_components(directory: Path | str) -> List[Component]:
    """Return one component per immediate subdirectory of ``directory``."""
    root = Path(directory).expanduser()
    if not root.is_dir():
        logger.debug("Component directory not found: %s", root)
        return []

    components: List[Component] = []
    with os.scandir(root) as entries:
        for entry in entries:
            if not entry.is_dir():
                continue
            component = load_component(Path(entry.path), entry.name)
            if component is not None:
                components.append(component)
    return components


def create_component_map(components: Sequence[Component]) -> ComponentMap:
    """Index components by name; a duplicate name is fatal."""
    return ComponentMap(components)


def _component_from_manifest(manifest: Dict[str, Any], component_path: Path) -> Component:
    requires = manifest.get("requires")
    dependencies = manifest.get("dependencies")
    component_type = manifest.get("type")
    description = manifest.get("description")
    return Component(
        name=manifest["name"],
        path=component_path,
        styles=filter_safe_asset_paths(manifest.get("styles", []), component_path),
        scripts=filter_safe_asset_paths(manifest.get("scripts", []), component_path),
        requires=_str_list(requires) if isinstance(requires, list) else None,
        dependencies=_str_list(dependencies) if isinstance(dependencies, list) else [],
        type=component_type if isinstance(component_type, str) else None,
        description=description if isinstance(description, str) else None,
        validation=ValidationRule.from_manifest(manifest.get("validation")),
        source="manifest",
        extra={key: value for key, value in manifest.items() if key not in _KNOWN_FIELDS},
    )


def _str_list(values: List[Any]) -> List[str]:
    return [value for value in values if isinstance(value, str)]


__all__ = [
    "ComponentMap",
    "DuplicateComponentError",
    "MANIFEST_FILENAME",
    "auto_generate_manifest",
    "collect_components",
    "create_component_map",
    "filter_safe_asset_paths",
    "is_path_safe",
    "load_component",
]
