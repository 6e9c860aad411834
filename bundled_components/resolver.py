"""Transitive requirement resolution over the component graph."""

from __future__ import annotations

from collections import deque
from typing import Iterable, List, Mapping, Set

from .models import Component


def resolve_all_dependencies(used: Iterable[str], component_map: Mapping[str, Component]) -> Set[str]:
    """Expand ``used`` into every component reachable through requirement edges.

    Unknown names stay in the result; they are a validation concern. Visited
    names are never re-queued, so cyclic graphs terminate.
    """
    needed: Set[str] = set()
    queue = deque(used)
    while queue:
        name = queue.popleft()
        if name in needed:
            continue
        needed.add(name)
        component = component_map.get(name)
        if component is None:
            continue
        for requirement in component.requirements:
            if requirement not in needed:
                queue.append(requirement)
    return needed


def filter_needed_components(components: Iterable[Component], needed: Set[str]) -> List[Component]:
    """Keep components whose name is needed, in discovery order."""
    return [component for component in components if component.name in needed]


__all__ = ["filter_needed_components", "resolve_all_dependencies"]
