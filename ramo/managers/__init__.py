import os
import logging
from typing import List, Optional, Tuple
from .base import ManifestParser
from .javascript import NpmManifestParser
from .python import RequirementsParser
from .java import PomParser
from ramo.core.config import RamoConfig
from ramo.core.errors import UnsupportedFileKind
from ramo.core.model import DependencyNode
from ramo.core.normalizer import normalize
from ramo.core.resolver import MetadataResolver


def build_parsers(config: Optional[RamoConfig] = None) -> List[ManifestParser]:
    config = config or RamoConfig()
    return [
        NpmManifestParser(),
        RequirementsParser(),
        PomParser(scope_map=config.scope_map),
    ]


def detect_parser(file_name: str, config: Optional[RamoConfig] = None) -> ManifestParser:
    """Picks the parser by base file name. Content is never inspected."""
    base_name = os.path.basename(file_name)

    for parser in build_parsers(config):
        if parser.detect(base_name):
            return parser

    raise UnsupportedFileKind(
        "Unsupported file type. Please use package.json, requirements.txt, or pom.xml",
        base_name,
    )


def parse_manifest(
    file_name: str,
    content: str,
    resolver: Optional[MetadataResolver] = None,
    config: Optional[RamoConfig] = None,
) -> Tuple[ManifestParser, List[DependencyNode]]:
    """parse + normalize: returns the parser used and the canonical forest."""
    config = config or RamoConfig()
    parser = detect_parser(file_name, config)
    logging.info(f"Parser: {parser.name} ({os.path.basename(file_name)})")

    records = parser.parse(content)
    forest = normalize(
        records,
        resolver or config.build_resolver(),
        ecosystem=parser.ecosystem,
        seed_children=config.seed_children,
    )
    return parser, forest


def load_manifest(
    path: str,
    resolver: Optional[MetadataResolver] = None,
    config: Optional[RamoConfig] = None,
) -> Tuple[ManifestParser, List[DependencyNode]]:
    # Fail on the file name before touching the disk
    detect_parser(path, config)

    # utf-8-sig strips a leading BOM
    with open(path, "r", encoding="utf-8-sig") as f:
        content = f.read()

    return parse_manifest(path, content, resolver, config)
