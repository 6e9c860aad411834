"""Detects which components the site's templates actually use."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set

from ..logging import get_logger
from .frontmatter import FrontMatterError, front_matter_sections, section_types, split_front_matter
from .references import ReferenceExtractor, RegexReferenceExtractor

DEFAULT_EXTENSIONS = (".njk", ".md", ".html")
LAYOUT_EXTENSIONS = (".njk",)

_EXCLUDED_DIRS = {
    "node_modules",
    "_site",
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "__pycache__",
    ".pytest_cache",
}

logger = get_logger("scanner")


@dataclass
class FileScan:
    """Result of scanning a single template file."""

    path: str
    components: Set[str] = field(default_factory=set)
    sections: List[Any] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class TemplateScan:
    """Union of every file scan in a template tree."""

    used: Set[str] = field(default_factory=set)
    sections: Dict[str, List[Any]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)


def extract_component_name(template_path: str, markers: Sequence[str]) -> Optional[str]:
    """Return the segment following the first component marker in ``template_path``.

    ``components/_partials/button/button.njk`` -> ``button`` for marker ``_partials``.
    """
    segments = template_path.split("/")
    for index, segment in enumerate(segments):
        if segment in markers:
            if index + 1 < len(segments):
                return segments[index + 1]
            return None
    return None


def parse_template_file(
    content: str,
    markers: Sequence[str],
    extractor: ReferenceExtractor | None = None,
) -> Set[str]:
    """Return component names referenced by import/include tags in ``content``."""
    extractor = extractor or RegexReferenceExtractor()
    components: Set[str] = set()
    for template_path in extractor.extract(content):
        name = extract_component_name(template_path, markers)
        if name:
            components.add(name)
    return components


def scan_templates(
    input_dir: Path | str,
    layouts_dir: Path | str | None,
    markers: Sequence[str],
    *,
    extractor: ReferenceExtractor | None = None,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    max_workers: int | None = None,
) -> TemplateScan:
    """Scan templates (front-matter and markup) plus layouts for component usage."""
    extractor = extractor or RegexReferenceExtractor()
    root = Path(input_dir).expanduser()
    result = TemplateScan()

    files = list(_iter_template_files(root, extensions)) if root.is_dir() else []
    logger.debug("Scanning %d template files under %s", len(files), root)

    if files:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            scans = list(
                executor.map(lambda path: _scan_file(path, root, markers, extractor), files)
            )
        for scan in scans:
            if scan.error is not None:
                result.errors.append(scan.path)
                continue
            result.used.update(scan.components)
            if scan.sections:
                result.sections[scan.path] = scan.sections

    if layouts_dir is not None:
        result.used.update(scan_layout_files(layouts_dir, markers, extractor=extractor))

    return result


def detect_used_components(
    input_dir: Path | str,
    layouts_dir: Path | str | None,
    markers: Sequence[str],
    *,
    extractor: ReferenceExtractor | None = None,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> Set[str]:
    """Return every component name referenced anywhere in the template tree."""
    return scan_templates(
        input_dir, layouts_dir, markers, extractor=extractor, extensions=extensions
    ).used


def scan_layout_files(
    layouts_dir: Path | str,
    markers: Sequence[str],
    *,
    extractor: ReferenceExtractor | None = None,
    extensions: Sequence[str] = LAYOUT_EXTENSIONS,
) -> Set[str]:
    """Collect component references from layout templates; unreadable files are skipped."""
    extractor = extractor or RegexReferenceExtractor()
    root = Path(layouts_dir).expanduser()
    components: Set[str] = set()
    if not root.is_dir():
        return components

    for dirpath, _dirnames, filenames in os.walk(root):
        for filename in filenames:
            if not filename.endswith(tuple(extensions)):
                continue
            path = Path(dirpath) / filename
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("Skipping unreadable layout %s: %s", path, exc)
                continue
            components.update(parse_template_file(content, markers, extractor))
    return components


def _iter_template_files(root: Path, extensions: Sequence[str]) -> Iterator[Path]:
    suffixes = tuple(ext.lower() for ext in extensions)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [name for name in dirnames if name not in _EXCLUDED_DIRS]
        for filename in filenames:
            if filename.lower().endswith(suffixes):
                yield Path(dirpath) / filename


def _scan_file(
    path: Path,
    root: Path,
    markers: Sequence[str],
    extractor: ReferenceExtractor,
) -> FileScan:
    rel_path = path.relative_to(root).as_posix()
    scan = FileScan(path=rel_path)
    try:
        content = path.read_text(encoding="utf-8")
        front_matter, body = split_front_matter(content)
    except (OSError, UnicodeDecodeError, FrontMatterError) as exc:
        logger.warning("Could not read template file %s: %s", path, exc)
        scan.error = str(exc)
        return scan

    scan.sections = front_matter_sections(front_matter)
    scan.components.update(section_types(front_matter))
    scan.components.update(parse_template_file(body, markers, extractor))
    return scan


__all__ = [
    "DEFAULT_EXTENSIONS",
    "FileScan",
    "LAYOUT_EXTENSIONS",
    "TemplateScan",
    "detect_used_components",
    "extract_component_name",
    "parse_template_file",
    "scan_layout_files",
    "scan_templates",
]
