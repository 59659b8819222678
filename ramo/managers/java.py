import logging
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional
from ramo.managers.base import ManifestParser
from ramo.core.config import DEFAULT_SCOPE_MAP
from ramo.core.errors import MalformedManifest
from ramo.core.model import DependencyKind, DependencyNode, Ecosystem


def _local(tag: str) -> str:
    """Drops the '{namespace}' prefix ElementTree puts on qualified tags."""
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _children(element: ET.Element, name: str) -> List[ET.Element]:
    return [child for child in element if _local(child.tag) == name]


def _text(element: ET.Element, name: str, default: str) -> str:
    child = _child(element, name)
    if child is None or child.text is None or not child.text.strip():
        return default
    return child.text.strip()


class PomParser(ManifestParser):
    def __init__(self, scope_map: Optional[Dict[str, DependencyKind]] = None) -> None:
        self.scope_map = dict(DEFAULT_SCOPE_MAP if scope_map is None else scope_map)

    @property
    def name(self) -> str:
        return "Maven"

    @property
    def ecosystem(self) -> Ecosystem:
        return Ecosystem.MAVEN

    @property
    def file_names(self) -> list[str]:
        return ["pom.xml"]

    def parse(self, content: str) -> List[DependencyNode]:
        logging.debug("Parsing pom.xml...")
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise MalformedManifest(f"Failed to parse pom.xml: {e}", "pom.xml") from e

        if _local(root.tag) != "project":
            logging.warning(f"pom.xml root is <{_local(root.tag)}>, expected <project>")
            return []

        dependencies = _child(root, "dependencies")
        if dependencies is None:
            return []

        records = []
        # Only project/dependencies; dependencyManagement and plugin deps are ignored
        for dep in _children(dependencies, "dependency"):
            group_id = _text(dep, "groupId", "unknown")
            artifact_id = _text(dep, "artifactId", "unknown")
            version = _text(dep, "version", "unknown")
            scope = _text(dep, "scope", "compile")

            # <optional>true</optional> is looked up under the "optional" key,
            # absent from the default map
            if _text(dep, "optional", "false").lower() == "true" and "optional" in self.scope_map:
                scope = "optional"

            kind = self.scope_map.get(scope, DependencyKind.PRODUCTION)
            records.append(DependencyNode(f"{group_id}:{artifact_id}", version, kind=kind))

        logging.debug(f"pom.xml parsed. {len(records)} records.")
        return records
