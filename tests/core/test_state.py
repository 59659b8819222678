import unittest
from ramo.core.model import DependencyNode, walk_forest
from ramo.core.query import filter_forest
from ramo.core.state import NodeStateStore


def build_forest():
    return [
        DependencyNode("a", "1.0.0", children=[DependencyNode("x", "1.0.0", children=[DependencyNode("y", "2.0.0")])]),
        DependencyNode("b", "1.0.0", children=[DependencyNode("x", "1.0.0")]),
        DependencyNode("x", "2.0.0"),
    ]


class TestNodeStateStore(unittest.TestCase):

    def setUp(self):
        self.forest = build_forest()
        self.store = NodeStateStore()

    def test_duplicate_keys_toggle_together(self):
        first_x = self.forest[0].children[0]
        second_x = self.forest[1].children[0]

        self.assertTrue(self.store.toggle(self.forest, first_x))

        self.assertTrue(first_x.is_expanded)
        self.assertTrue(second_x.is_expanded)
        self.assertTrue(self.store.is_expanded(second_x))
        # same name, other version: separate key
        self.assertFalse(self.forest[2].is_expanded)

        self.assertFalse(self.store.toggle(self.forest, second_x))
        self.assertFalse(first_x.is_expanded)

    def test_toggle_through_filtered_copy_updates_canonical_forest(self):
        visible = filter_forest(self.forest, "y")
        copy_of_a = visible[0]

        self.store.toggle(self.forest, copy_of_a)

        self.assertTrue(self.forest[0].is_expanded)
        self.assertFalse(copy_of_a.is_expanded)
        self.assertTrue(self.store.is_expanded(copy_of_a))

    def test_expand_and_collapse_all(self):
        self.store.expand_all(self.forest)

        self.assertTrue(all(n.is_expanded for n in walk_forest(self.forest)))
        self.assertTrue(self.store.is_expanded(DependencyNode("y", "2.0.0")))

        self.store.collapse_all(self.forest)

        self.assertFalse(any(n.is_expanded for n in walk_forest(self.forest)))

    def test_unknown_key_falls_back_to_node_flag(self):
        node = DependencyNode("fresh", "0.1.0", is_expanded=True)

        self.assertTrue(self.store.is_expanded(node))

        self.store.clear()
        self.assertFalse(self.store.is_expanded(DependencyNode("fresh", "0.1.0")))
