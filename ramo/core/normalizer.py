import logging
from typing import Dict, List, Optional, Tuple

from ramo.core.model import DependencyKind, DependencyNode, Ecosystem
from ramo.core.resolver import MetadataResolver

# Demo sub-dependencies shown under a few well-known top-level packages.
# (name, version, kind); "{name}" is replaced by the parent's name.
_REACT_LIKE = [
    ("{name}-dom", "1.0.0", DependencyKind.PRODUCTION),
    ("@types/{name}", "^18.0.0", DependencyKind.DEVELOPMENT),
]

ILLUSTRATIVE_CHILDREN: Dict[Ecosystem, Dict[str, List[Tuple[str, str, DependencyKind]]]] = {
    Ecosystem.NPM: {
        "react": _REACT_LIKE,
        "lucide-react": _REACT_LIKE,
        "d3": _REACT_LIKE,
        "tailwindcss": [
            ("postcss", "^8.4.0", DependencyKind.PRODUCTION),
            ("autoprefixer", "^10.4.0", DependencyKind.PRODUCTION),
        ],
    },
}


def enrich_node(node: DependencyNode, resolver: MetadataResolver, ecosystem: Ecosystem) -> DependencyNode:
    meta = resolver.resolve(node.name, ecosystem)
    node.license = meta.license
    node.vulnerabilities = list(meta.vulnerabilities)
    node.latest_version = meta.latest_version
    node.repository_url = meta.repository_url
    node.homepage = meta.homepage
    return node


def illustrative_children(name: str, ecosystem: Ecosystem) -> List[DependencyNode]:
    table = ILLUSTRATIVE_CHILDREN.get(ecosystem, {})
    return [
        DependencyNode(child_name.format(name=name), version, kind=kind)
        for child_name, version, kind in table.get(name, [])
    ]


def normalize(
    records: List[DependencyNode],
    resolver: Optional[MetadataResolver] = None,
    ecosystem: Ecosystem = Ecosystem.NPM,
    seed_children: bool = True,
) -> List[DependencyNode]:
    """
    Builds the canonical forest from parser output.

    Every record is resolved exactly once and keeps its input position.
    With seed_children, packages listed in ILLUSTRATIVE_CHILDREN get their
    demo children attached (resolved the same way).
    """
    resolver = resolver or MetadataResolver()
    forest = []

    for record in records:
        node = enrich_node(record, resolver, ecosystem)

        if seed_children:
            for child in illustrative_children(node.name, ecosystem):
                node.children.append(enrich_node(child, resolver, ecosystem))

        forest.append(node)

    logging.debug(f"Forest normalized. {len(forest)} top-level nodes ({ecosystem.value}).")
    return forest
