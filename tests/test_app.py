import json
import os
import tempfile
import unittest
from textual.widgets import Input, Tree
from ramo.app import PackageScreen, RamoApp, highlight_match
from ramo.core.config import RamoConfig
from ramo.core.model import FilterOptions, walk_forest

PACKAGE_JSON = {
    "dependencies": {"react": "^18.2.0", "lodash": "4.17.21"},
    "devDependencies": {"jest": "^29.0.0"},
}


class TestRamoApp(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.cwd = os.getcwd()
        os.chdir(self._tmp.name)
        with open("package.json", "w", encoding="utf-8") as f:
            json.dump(PACKAGE_JSON, f)

    def tearDown(self):
        os.chdir(self.cwd)
        self._tmp.cleanup()

    async def start(self, app, pilot):
        await app.workers.wait_for_complete()
        await pilot.pause()
        return app.query_one("#dep-tree", Tree)

    async def test_renders_forest(self):
        app = RamoApp("package.json", config=RamoConfig())
        async with app.run_test() as pilot:
            tree = await self.start(app, pilot)

            top = [node.data.name for node in tree.root.children]
            self.assertEqual(top, ["react", "lodash", "jest"])
            self.assertEqual(len(tree.root.children[0].children), 2)
            self.assertEqual(app.parser_name, "NPM")

    async def test_search_narrows_tree(self):
        app = RamoApp("package.json")
        async with app.run_test() as pilot:
            tree = await self.start(app, pilot)

            app.query_one("#search", Input).value = "types"
            await pilot.pause()

            self.assertEqual([node.data.name for node in tree.root.children], ["react"])
            self.assertEqual([node.data.name for node in tree.root.children[0].children], ["@types/react"])

    async def test_vulnerable_filter_and_export(self):
        app = RamoApp("package.json")
        async with app.run_test() as pilot:
            tree = await self.start(app, pilot)

            app.action_toggle_vulnerable()
            await pilot.pause()
            self.assertEqual([node.data.name for node in tree.root.children], ["lodash"])

            app.action_export()

        with open("package.json_export.json", encoding="utf-8") as f:
            exported = json.load(f)
        self.assertEqual(len(exported), 3)

    async def test_details_screen(self):
        app = RamoApp("package.json")
        async with app.run_test() as pilot:
            tree = await self.start(app, pilot)

            app.on_tree_node_selected(Tree.NodeSelected(tree.root.children[1]))
            await pilot.pause()

            self.assertIsInstance(app.screen, PackageScreen)
            self.assertEqual(app.screen.node.name, "lodash")

    async def test_parse_error_is_reported(self):
        with open("pom.xml", "w", encoding="utf-8") as f:
            f.write("<project>")

        app = RamoApp("pom.xml")
        async with app.run_test() as pilot:
            await self.start(app, pilot)

            self.assertEqual(app.forest, [])
            self.assertFalse(app.query_one("#tree-container").display)

    async def test_license_cycle_reaches_child_licenses(self):
        app = RamoApp("package.json", config=RamoConfig())
        async with app.run_test() as pilot:
            await self.start(app, pilot)

            expected = {node.license for node in walk_forest(app.forest) if node.license}
            seen = set()
            for _ in range(len(expected) + 1):
                app.action_cycle_license()
                seen.update(app.options.license_types)

            self.assertEqual(seen, expected)
            self.assertEqual(app.options.license_types, frozenset())

    async def test_clear_filters(self):
        app = RamoApp("package.json")
        async with app.run_test() as pilot:
            tree = await self.start(app, pilot)

            app.action_toggle_vulnerable()
            app.action_cycle_kind()
            await pilot.pause()
            self.assertNotEqual(app.options, FilterOptions())

            app.action_clear_filters()
            await pilot.pause()

            self.assertEqual(app.options, FilterOptions())
            self.assertEqual([node.data.name for node in tree.root.children], ["react", "lodash", "jest"])


class TestHighlightMatch(unittest.TestCase):

    def test_marks_first_hit_case_insensitively(self):
        self.assertEqual(highlight_match("lodash", "DAS"), "lo[reverse]das[/reverse]h")

    def test_blank_search_returns_plain_name(self):
        self.assertEqual(highlight_match("lodash", "  "), "lodash")

    def test_no_hit_returns_plain_name(self):
        self.assertEqual(highlight_match("lodash", "react"), "lodash")

    def test_name_markup_is_escaped(self):
        self.assertEqual(highlight_match("[x]pkg", "pkg"), "\\[x][reverse]pkg[/reverse]")
