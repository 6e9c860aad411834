"""Front-matter parsing for template and markdown files."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Set, Tuple

import yaml

FM_PATTERN = re.compile(
    r"\A---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


class FrontMatterError(ValueError):
    """Raised when a front-matter block exists but is not valid YAML."""


def split_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """Return ``(front_matter, body)``; files without front-matter yield ``{}``."""
    source = text.lstrip("\ufeff")
    match = FM_PATTERN.match(source)
    if not match:
        return {}, source
    try:
        data = yaml.safe_load(match.group(1))
    except (yaml.YAMLError, ValueError, TypeError) as exc:
        # safe_load raises ValueError for impossible implicit dates such as 2024-13-45.
        raise FrontMatterError(f"Invalid front-matter: {exc}") from exc
    body = source[match.end() :]
    if not isinstance(data, dict):
        return {}, body
    return data, body


def front_matter_sections(front_matter: Dict[str, Any]) -> List[Any]:
    """Return the raw ``sections`` array, or an empty list when absent."""
    sections = front_matter.get("sections")
    return list(sections) if isinstance(sections, list) else []


def section_types(front_matter: Dict[str, Any]) -> Set[str]:
    """Collect ``sectionType`` names from the ``sections`` array."""
    names: Set[str] = set()
    for section in front_matter_sections(front_matter):
        if isinstance(section, dict):
            section_type = section.get("sectionType")
            if isinstance(section_type, str) and section_type:
                names.add(section_type)
    return names


__all__ = ["FM_PATTERN", "FrontMatterError", "front_matter_sections", "section_types", "split_front_matter"]
