import logging
from typing import Dict, List, Tuple

from ramo.core.model import DependencyNode, walk_forest


class NodeStateStore:
    """
    Expand/collapse state keyed by (name, version).

    Keys are not unique: two nodes with the same name and version, anywhere
    in the forest, share one flag and always expand or collapse together.
    """

    def __init__(self) -> None:
        self._expanded: Dict[Tuple[str, str], bool] = {}

    def is_expanded(self, node: DependencyNode) -> bool:
        return self._expanded.get(node.key, node.is_expanded)

    def set_expanded(self, forest: List[DependencyNode], node: DependencyNode, value: bool) -> bool:
        key = node.key
        self._expanded[key] = value

        for candidate in walk_forest(forest):
            if candidate.key == key:
                candidate.is_expanded = value
        return value

    def toggle(self, forest: List[DependencyNode], node: DependencyNode) -> bool:
        return self.set_expanded(forest, node, not self.is_expanded(node))

    def expand_all(self, forest: List[DependencyNode]) -> None:
        self._set_all(forest, True)

    def collapse_all(self, forest: List[DependencyNode]) -> None:
        self._set_all(forest, False)

    def _set_all(self, forest: List[DependencyNode], value: bool) -> None:
        for node in walk_forest(forest):
            node.is_expanded = value
            self._expanded[node.key] = value
        logging.debug(f"Set {len(self._expanded)} keys to expanded={value}")

    def clear(self) -> None:
        self._expanded.clear()
