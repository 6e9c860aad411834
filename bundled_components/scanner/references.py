"""Extraction of referenced template paths from template markup."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Callable, Dict, List

from jinja2 import Environment, nodes
from jinja2.exceptions import TemplateSyntaxError

from ..logging import get_logger

# {% from "components/_partials/button/button.njk" import button %}, compact form included.
IMPORT_PATTERN = re.compile(r"\{%-?\s*from\s*[\"']([^\"']+)[\"']\s*import\s+[^%]+\s*%\}")

# {% include "components/sections/header/header.njk" %}
INCLUDE_PATTERN = re.compile(r"\{%-?\s*include\s*[\"']([^\"']+)[\"']\s*-?%\}")

logger = get_logger("scanner.references")


class ReferenceExtractor(ABC):
    """Contract for strategies that list the template paths a template references."""

    name: str

    @abstractmethod
    def extract(self, text: str) -> List[str]:
        """Return referenced template paths in source order (duplicates allowed)."""


class RegexReferenceExtractor(ReferenceExtractor):
    """Matches ``from ... import`` and ``include`` tags with regular expressions."""

    name = "regex"

    def extract(self, text: str) -> List[str]:
        paths = [match.group(1) for match in IMPORT_PATTERN.finditer(text)]
        paths.extend(match.group(1) for match in INCLUDE_PATTERN.finditer(text))
        return paths


class JinjaReferenceExtractor(ReferenceExtractor):
    """Uses the Jinja2 parser to find ``from ... import`` and ``include`` targets.

    ``extends`` and ``import ... as`` tags are not counted, matching the regex
    strategy. Dynamic targets (variables, lists of names) are not resolvable
    statically and are ignored.

    Templates that use syntax Jinja2 does not understand (custom Nunjucks tags,
    shortcodes) are handed to the regex extractor instead.
    """

    name = "jinja"

    def __init__(self, environment: Environment | None = None) -> None:
        self._env = environment or Environment()
        self._fallback = RegexReferenceExtractor()

    def extract(self, text: str) -> List[str]:
        try:
            ast = self._env.parse(text)
        except TemplateSyntaxError as exc:
            logger.debug("Jinja2 could not parse template (%s); using regex extraction", exc)
            return self._fallback.extract(text)
        paths: List[str] = []
        for node in ast.find_all((nodes.FromImport, nodes.Include)):
            target = node.template
            if isinstance(target, nodes.Const) and isinstance(target.value, str):
                paths.append(target.value)
        return paths


_EXTRACTORS: Dict[str, Callable[[], ReferenceExtractor]] = {
    "regex": RegexReferenceExtractor,
    "jinja": JinjaReferenceExtractor,
}


def get_extractor(name: str | None = None) -> ReferenceExtractor:
    """Return an extractor instance by name (``regex`` when unspecified)."""
    key = (name or "regex").strip().lower()
    factory = _EXTRACTORS.get(key)
    if factory is None:
        known = ", ".join(sorted(_EXTRACTORS))
        raise ValueError(f"Unknown reference extractor '{name}'. Expected one of: {known}")
    return factory()


__all__ = [
    "INCLUDE_PATTERN",
    "IMPORT_PATTERN",
    "JinjaReferenceExtractor",
    "ReferenceExtractor",
    "RegexReferenceExtractor",
    "get_extractor",
]
