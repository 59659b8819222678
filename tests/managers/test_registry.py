import codecs
import os
import tempfile
import unittest
from unittest.mock import patch, mock_open
from ramo.managers import detect_parser, load_manifest, parse_manifest
from ramo.managers.java import PomParser
from ramo.managers.javascript import NpmManifestParser
from ramo.managers.python import RequirementsParser
from ramo.core.config import RamoConfig
from ramo.core.errors import UnsupportedFileKind
from ramo.core.model import DependencyKind
from ramo.core.resolver import FixedLicensePolicy, MetadataResolver


class TestParserSelection(unittest.TestCase):

    def test_selection_by_file_name(self):
        self.assertIsInstance(detect_parser("package.json"), NpmManifestParser)
        self.assertIsInstance(detect_parser("/tmp/project/requirements.txt"), RequirementsParser)
        self.assertIsInstance(detect_parser("pom.xml"), PomParser)

    def test_unsupported_file(self):
        with self.assertRaises(UnsupportedFileKind) as ctx:
            detect_parser("Cargo.lock")

        self.assertEqual(ctx.exception.file_name, "Cargo.lock")

    def test_scope_map_comes_from_config(self):
        config = RamoConfig(scope_map={"runtime": DependencyKind.OPTIONAL})

        parser = detect_parser("pom.xml", config)

        self.assertEqual(parser.scope_map, {"runtime": DependencyKind.OPTIONAL})


class TestParseManifest(unittest.TestCase):

    def test_parse_and_normalize(self):
        resolver = MetadataResolver(license_policy=FixedLicensePolicy("MIT"))

        parser, forest = parse_manifest("requirements.txt", "Django==4.2\nleftpad\n", resolver)

        self.assertEqual(parser.name, "PyPI (Pip)")
        self.assertEqual([n.name for n in forest], ["django", "leftpad"])
        self.assertEqual(forest[0].license, "BSD-3-Clause")
        self.assertEqual(forest[1].license, "MIT")
        self.assertTrue(forest[0].vulnerabilities)

    def test_seed_children_can_be_disabled(self):
        config = RamoConfig(seed_children=False)

        _, forest = parse_manifest("package.json", '{"dependencies": {"react": "^18.2.0"}}', config=config)

        self.assertEqual(forest[0].children, [])

    def test_load_manifest_reads_file(self):
        mock_content = '{"dependencies": {"react": "^18.2.0"}, "devDependencies": {"vite": "^5.0.0"}}'

        with patch("builtins.open", mock_open(read_data=mock_content)) as mocked:
            parser, forest = load_manifest("web/package.json")

        mocked.assert_called_once_with("web/package.json", "r", encoding="utf-8-sig")
        self.assertEqual(parser.name, "NPM")
        self.assertEqual([n.name for n in forest], ["react", "vite"])
        self.assertEqual(len(forest[0].children), 2)

    def test_load_manifest_rejects_before_reading(self):
        with patch("builtins.open", mock_open(read_data="")) as mocked:
            with self.assertRaises(UnsupportedFileKind):
                load_manifest("build.gradle")

        mocked.assert_not_called()


class TestByteOrderMark(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self._tmp.cleanup()

    def write_with_bom(self, name, content):
        path = os.path.join(self._tmp.name, name)
        with open(path, "wb") as f:
            f.write(codecs.BOM_UTF8 + content.encode("utf-8"))
        return path

    def test_package_json_with_bom(self):
        path = self.write_with_bom("package.json", '{"dependencies": {"axios": "^1.6.0"}}')

        _, forest = load_manifest(path)

        self.assertEqual([n.name for n in forest], ["axios"])

    def test_requirements_with_bom_keeps_first_line(self):
        path = self.write_with_bom("requirements.txt", "flask==2.0.1\nrequests>=2.25.0\n")

        _, forest = load_manifest(path)

        self.assertEqual([(n.name, n.version) for n in forest], [("flask", "==2.0.1"), ("requests", ">=2.25.0")])

    def test_pom_with_bom(self):
        path = self.write_with_bom(
            "pom.xml",
            '<?xml version="1.0" encoding="UTF-8"?>\n<project><dependencies><dependency>'
            "<groupId>junit</groupId><artifactId>junit</artifactId><version>4.13.2</version>"
            "</dependency></dependencies></project>",
        )

        _, forest = load_manifest(path)

        self.assertEqual([n.name for n in forest], ["junit:junit"])
