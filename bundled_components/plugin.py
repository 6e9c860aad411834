"""Build hooks that tie discovery, scanning, resolution, validation and bundling together."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Set, Tuple

from .bundling import AssetCompiler, bundle_components
from .config import PluginOptions, normalize_options
from .discovery import ComponentMap, collect_components, create_component_map
from .logging import get_logger
from .models import BundledAssets, Component, SectionDiagnostic
from .resolver import filter_needed_components, resolve_all_dependencies
from .scanner import ReferenceExtractor, get_extractor, scan_templates
from .validators import (
    RequirementError,
    SectionValidationError,
    manifest_lookup,
    validate_requirements,
    validate_sections,
)


@dataclass
class BuildContext:
    """State computed before the build and consumed, read-only, after rendering."""

    project_root: Path
    partials: List[Component]
    sections: List[Component]
    component_map: ComponentMap
    used: Set[str]
    needed: Set[str]
    requirement_errors: List[str] = field(default_factory=list)
    section_diagnostics: List[SectionDiagnostic] = field(default_factory=list)

    @property
    def components(self) -> List[Component]:
        return [*self.partials, *self.sections]


@dataclass
class BuildOutcome:
    """Files written by the after-build hook."""

    assets: BundledAssets
    css_path: Optional[Path] = None
    js_path: Optional[Path] = None


class BundledComponentsPlugin:
    """Host-agnostic plugin: call ``before_build`` then ``after_build`` per build."""

    def __init__(
        self,
        options: PluginOptions | Mapping[str, Any] | None = None,
        *,
        project_root: Path | str | None = None,
        compiler: AssetCompiler | None = None,
        extractor: ReferenceExtractor | None = None,
    ) -> None:
        self.options = options if isinstance(options, PluginOptions) else normalize_options(options)
        self.project_root = Path(project_root or Path.cwd()).expanduser().resolve()
        self.compiler = compiler
        self.extractor = extractor or get_extractor(self.options.extractor)
        self.logger = get_logger("plugin")
        self.logger.debug("Running with options: %s", self.options)

    @property
    def watch_targets(self) -> List[str]:
        """Directories the host should watch for component changes."""
        return [self.options.base_path, self.options.sections_path]

    def discover(self) -> Tuple[List[Component], List[Component]]:
        """Return ``(partials, sections)`` found under the configured paths."""
        base_path = self.project_root / self.options.base_path
        sections_path = self.project_root / self.options.sections_path
        self.logger.debug("Partials path: %s", base_path)
        self.logger.debug("Sections path: %s", sections_path)
        partials = collect_components(base_path)
        sections = collect_components(sections_path)
        self.logger.debug("Found all partials: %s", [component.name for component in partials])
        self.logger.debug("Found all sections: %s", [component.name for component in sections])
        return partials, sections

    def before_build(self, input_dir: Path | str) -> Optional[BuildContext]:
        """Discover components, detect usage, resolve and validate requirements.

        Returns ``None`` when there is nothing to bundle. Raises a
        ``ValidationError`` subclass only when ``validation.strict`` is set.
        """
        input_path = self._resolve(input_dir)
        layouts_path = self.project_root / self.options.layouts_path
        self.logger.debug("Input directory: %s", input_path)
        self.logger.debug("Layouts path: %s", layouts_path)

        partials, sections = self.discover()
        all_components = [*partials, *sections]
        if not all_components:
            self.logger.debug("No components found in configured paths")
            return None

        component_map = create_component_map(all_components)
        self.logger.debug("Component map created with %d available components", len(component_map))

        scan = scan_templates(
            input_path,
            layouts_path,
            self.options.component_markers,
            extractor=self.extractor,
            extensions=self.options.template_extensions,
        )
        self.logger.debug("Components used in templates: %s", sorted(scan.used))
        if not scan.used:
            self.logger.debug("No components used in templates")
            return None

        needed = resolve_all_dependencies(scan.used, component_map)
        self.logger.debug("Components needed (including requirements): %s", sorted(needed))

        requirement_errors: List[str] = []
        diagnostics: List[SectionDiagnostic] = []
        if self.options.validation.enabled:
            requirement_errors = validate_requirements(needed, component_map)
            self._report_requirement_errors(requirement_errors)

            lookup = manifest_lookup(component_map)
            for file_name in sorted(scan.sections):
                diagnostics.extend(validate_sections(scan.sections[file_name], lookup, file_name))
            self._report_section_diagnostics(diagnostics)

        context = BuildContext(
            project_root=self.project_root,
            partials=filter_needed_components(partials, needed),
            sections=filter_needed_components(sections, needed),
            component_map=component_map,
            used=set(scan.used),
            needed=needed,
            requirement_errors=requirement_errors,
            section_diagnostics=diagnostics,
        )
        self.logger.debug("Filtered partials to bundle: %s", [c.name for c in context.partials])
        self.logger.debug("Filtered sections to bundle: %s", [c.name for c in context.sections])
        return context

    def after_build(self, context: Optional[BuildContext], output_dir: Path | str) -> Optional[BuildOutcome]:
        """Bundle the context's components and write them under ``output_dir``."""
        if context is None:
            return None

        output_path = self._resolve(output_dir)
        self.logger.debug("Starting bundling into %s", output_path)
        assets = bundle_components(
            context.partials,
            context.sections,
            context.project_root,
            self.options,
            compiler=self.compiler,
        )
        self.logger.debug(
            "Bundled assets: css=%d bytes, js=%d bytes",
            len(assets.css or ""),
            len(assets.js or ""),
        )

        outcome = BuildOutcome(assets=assets)
        if assets.css:
            outcome.css_path = self._write(output_path / self.options.css_dest, assets.css)
        if assets.js:
            outcome.js_path = self._write(output_path / self.options.js_dest, assets.js)
        return outcome

    def build(self, input_dir: Path | str, output_dir: Path | str) -> Optional[BuildOutcome]:
        """Run both hooks back to back."""
        return self.after_build(self.before_build(input_dir), output_dir)

    # ------------------------------------------------------------------
    # Internal helpers

    def _report_requirement_errors(self, errors: List[str]) -> None:
        if not errors:
            return
        reported = errors if self.options.validation.report_all_errors else errors[:1]
        for message in reported:
            self.logger.error(message)
        if self.options.validation.strict:
            raise RequirementError(reported)

    def _report_section_diagnostics(self, diagnostics: List[SectionDiagnostic]) -> None:
        if not diagnostics:
            return
        reported = diagnostics if self.options.validation.report_all_errors else diagnostics[:1]
        for diagnostic in reported:
            self.logger.warning(diagnostic.message)
        if self.options.validation.strict:
            raise SectionValidationError(reported)

    def _write(self, path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        self.logger.debug("Wrote %s (%d bytes)", path, len(content))
        return path

    def _resolve(self, directory: Path | str) -> Path:
        path = Path(directory).expanduser()
        if not path.is_absolute():
            path = self.project_root / path
        return path.resolve()


__all__ = ["BuildContext", "BuildOutcome", "BundledComponentsPlugin"]
