import json
from dataclasses import asdict
from typing import Any, Dict, IO, List

from ramo.core.model import DependencyKind, DependencyNode, Severity, Vulnerability


def _plain(value: Any) -> Any:
    if isinstance(value, (DependencyKind, Severity)):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def forest_to_dicts(forest: List[DependencyNode]) -> List[Dict[str, Any]]:
    return [_plain(asdict(node)) for node in forest]


def node_from_dict(data: Dict[str, Any]) -> DependencyNode:
    return DependencyNode(
        name=data["name"],
        version=data["version"],
        kind=DependencyKind(data.get("kind", DependencyKind.PRODUCTION.value)),
        children=[node_from_dict(child) for child in data.get("children", [])],
        latest_version=data.get("latest_version"),
        license=data.get("license"),
        repository_url=data.get("repository_url"),
        homepage=data.get("homepage"),
        vulnerabilities=[
            Vulnerability(Severity(v["severity"]), v["title"], v.get("url"))
            for v in data.get("vulnerabilities", [])
        ],
        has_version_conflict=data.get("has_version_conflict", False),
        is_expanded=data.get("is_expanded", False),
    )


def forest_from_dicts(data: List[Dict[str, Any]]) -> List[DependencyNode]:
    return [node_from_dict(item) for item in data]


def dumps_forest(forest: List[DependencyNode]) -> str:
    return json.dumps(forest_to_dicts(forest), indent=2)


def dump_forest(forest: List[DependencyNode], fp: IO[str]) -> None:
    json.dump(forest_to_dicts(forest), fp, indent=2)
