import json
import logging
from typing import List
from ramo.managers.base import ManifestParser
from ramo.core.errors import MalformedManifest
from ramo.core.model import DependencyKind, DependencyNode, Ecosystem

# Emission order is fixed: field order here, then key order inside each field
DEPENDENCY_FIELDS = [
    ("dependencies", DependencyKind.PRODUCTION),
    ("devDependencies", DependencyKind.DEVELOPMENT),
    ("peerDependencies", DependencyKind.PEER),
    ("optionalDependencies", DependencyKind.OPTIONAL),
]


class NpmManifestParser(ManifestParser):
    @property
    def name(self) -> str:
        return "NPM"

    @property
    def ecosystem(self) -> Ecosystem:
        return Ecosystem.NPM

    @property
    def file_names(self) -> list[str]:
        return ["package.json"]

    def parse(self, content: str) -> List[DependencyNode]:
        logging.debug("Parsing package.json...")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise MalformedManifest(f"Failed to parse package.json: {e}", "package.json") from e

        if not isinstance(data, dict):
            raise MalformedManifest(
                f"Failed to parse package.json: expected a JSON object, got {type(data).__name__}",
                "package.json",
            )

        records = []
        for field_name, kind in DEPENDENCY_FIELDS:
            deps = data.get(field_name)
            if not isinstance(deps, dict):
                continue

            for dep_name, version in deps.items():
                if not dep_name:
                    continue
                records.append(DependencyNode(dep_name, str(version), kind=kind))

        logging.debug(f"package.json parsed. {len(records)} records.")
        return records
