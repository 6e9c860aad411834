"""Checks that every needed component's requirements were discovered."""

from __future__ import annotations

from typing import Iterable, List, Mapping

from ..models import Component


def validate_requirements(needed: Iterable[str], component_map: Mapping[str, Component]) -> List[str]:
    """Return one message per missing requirement edge of a needed component.

    Only needed components are checked. Needed names without a component are
    skipped here; there is nothing further to inspect for them.
    """
    errors: List[str] = []
    for name in sorted(needed):
        component = component_map.get(name)
        if component is None:
            continue
        for required in component.requirements:
            if required not in component_map:
                errors.append(f'Component "{component.name}" requires "{required}" which was not found')
    return errors


__all__ = ["validate_requirements"]
