# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit dependency graph and cycle detection."""

import logging
from collections.abc import Iterator

from cca.analyzer import Unit

logger = logging.getLogger(__name__)

DependencyGraph = dict[str, list[str]]


def references_unit(source: Unit, target: Unit) -> bool:
    """Decide whether ``source`` refers to ``target``.

    The reference test is textual: the target's name appearing anywhere in
    the source text counts, so short names match unrelated text.

    Args:
        source: Unit whose text is searched.
        target: Unit whose name is looked for.

    Returns:
        ``True`` when the target is named, differs from the source name and
        occurs in the source text.
    """
    if not target.name:
        return False
    if target.name == source.display_name:
        return False
    return target.name in source.source_text


def build_dependency_graph(units: list[Unit]) -> DependencyGraph:
    """Map each unit name to the names of units it references.

    Anonymous units are keyed as ``anonymous``; units sharing a key
    overwrite each other's edges.

    Args:
        units: Units in document order.

    Returns:
        Directed name graph in unit order.
    """
    graph: DependencyGraph = {}
    for unit in units:
        graph[unit.display_name] = [
            other.name
            for other in units
            if other.name and references_unit(unit, other)
        ]
    return graph


def detect_cycles(graph: DependencyGraph) -> list[list[str]]:
    """Find cycles with a depth-first traversal from every unvisited node.

    A revisit of a node on the current recursion stack records the path
    slice from that node's first occurrence to the current node. Cycles
    reachable from several roots are reported as discovered, without
    canonicalization.

    Args:
        graph: Directed name graph.

    Returns:
        Cycles as node-name lists in traversal order.
    """
    cycles: list[list[str]] = []
    visited: set[str] = set()

    for root in graph:
        if root in visited:
            continue
        path: list[str] = [root]
        on_stack: set[str] = {root}
        visited.add(root)
        frames: list[Iterator[str]] = [iter(graph.get(root, []))]
        while frames:
            neighbor = next(frames[-1], None)
            if neighbor is None:
                frames.pop()
                on_stack.discard(path.pop())
                continue
            if neighbor in on_stack:
                cycles.append(path[path.index(neighbor) :])
                continue
            if neighbor in visited:
                continue
            visited.add(neighbor)
            on_stack.add(neighbor)
            path.append(neighbor)
            frames.append(iter(graph.get(neighbor, [])))

    if cycles:
        logger.debug(f"Dependency cycles detected (count={len(cycles)})")
    return cycles
