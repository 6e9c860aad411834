"""Template usage scanning: front-matter sections and markup references."""

from .frontmatter import FrontMatterError, section_types, split_front_matter
from .references import (
    JinjaReferenceExtractor,
    ReferenceExtractor,
    RegexReferenceExtractor,
    get_extractor,
)
from .templates import (
    DEFAULT_EXTENSIONS,
    TemplateScan,
    detect_used_components,
    extract_component_name,
    parse_template_file,
    scan_layout_files,
    scan_templates,
)

__all__ = [
    "DEFAULT_EXTENSIONS",
    "FrontMatterError",
    "JinjaReferenceExtractor",
    "ReferenceExtractor",
    "RegexReferenceExtractor",
    "TemplateScan",
    "detect_used_components",
    "extract_component_name",
    "get_extractor",
    "parse_template_file",
    "scan_layout_files",
    "scan_templates",
    "section_types",
    "split_front_matter",
]
