"""
Query engine.

Narrows a forest by free-text search plus structured filters while keeping
tree shape: an ancestor of a search hit stays visible even when its own name
does not match. Structured filters are never relaxed that way, only search.
"""
from dataclasses import dataclass, replace
from typing import List

from ramo.core.model import DependencyKind, DependencyNode, FilterOptions, VersionConstraintMode

RANGE_MARKERS = ("^", "~", ">=")
UNPINNED_MARKERS = ("^", "~")


def search_matches(node: DependencyNode, search_text: str) -> bool:
    if not search_text.strip():
        return True
    return search_text.lower() in node.name.lower()


def type_matches(node: DependencyNode, options: FilterOptions) -> bool:
    return not options.dependency_kinds or node.kind in options.dependency_kinds


def license_matches(node: DependencyNode, options: FilterOptions) -> bool:
    if not options.license_types:
        return True
    return node.license is not None and node.license in options.license_types


def version_constraint_matches(node: DependencyNode, options: FilterOptions) -> bool:
    mode = options.version_constraint_mode
    version = node.version

    if mode == VersionConstraintMode.EXACT:
        return not any(marker in version for marker in RANGE_MARKERS)
    if mode == VersionConstraintMode.RANGE:
        return any(marker in version for marker in RANGE_MARKERS)
    if mode == VersionConstraintMode.LATEST:
        return version == "latest" or "*" in version
    return True


def outdated_matches(node: DependencyNode, options: FilterOptions) -> bool:
    # Heuristic: an unpinned spec is treated as "may be outdated"
    if not options.show_outdated_only:
        return True
    return any(marker in node.version for marker in UNPINNED_MARKERS)


def vulnerability_matches(node: DependencyNode, options: FilterOptions) -> bool:
    return not options.show_with_vulnerabilities_only or bool(node.vulnerabilities)


def structured_matches(node: DependencyNode, options: FilterOptions) -> bool:
    return (
        type_matches(node, options)
        and license_matches(node, options)
        and version_constraint_matches(node, options)
        and outdated_matches(node, options)
        and vulnerability_matches(node, options)
    )


def filter_forest(
    forest: List[DependencyNode],
    search_text: str = "",
    options: FilterOptions = FilterOptions(),
) -> List[DependencyNode]:
    """
    Returns the visible sub-forest. Never mutates the input: kept nodes are
    shallow copies whose children list holds only the surviving children.
    No search and default options returns `forest` itself.
    """
    has_search = bool(search_text.strip())
    if not has_search and options.is_default():
        return forest

    def filter_nodes(nodes: List[DependencyNode]) -> List[DependencyNode]:
        kept = []
        for node in nodes:
            children_result = filter_nodes(node.children)
            has_matching_descendant = has_search and bool(children_result)

            if (search_matches(node, search_text) or has_matching_descendant) and structured_matches(node, options):
                kept.append(replace(node, children=children_result))
        return kept

    return filter_nodes(forest)


@dataclass
class ForestStats:
    total: int = 0
    production: int = 0
    development: int = 0
    peer: int = 0
    optional: int = 0
    vulnerable: int = 0


def summarize(forest: List[DependencyNode]) -> ForestStats:
    """Counts over top-level records only."""
    stats = ForestStats(total=len(forest))
    for node in forest:
        if node.kind == DependencyKind.PRODUCTION:
            stats.production += 1
        elif node.kind == DependencyKind.DEVELOPMENT:
            stats.development += 1
        elif node.kind == DependencyKind.PEER:
            stats.peer += 1
        elif node.kind == DependencyKind.OPTIONAL:
            stats.optional += 1

        if node.vulnerabilities:
            stats.vulnerable += 1
    return stats
