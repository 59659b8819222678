import re
import logging
from typing import List
from ramo.managers.base import ManifestParser
from ramo.core.model import DependencyKind, DependencyNode, Ecosystem

# Matches: package==1.0, package>=1.0, package
# Two-char comparators come first so ">=" never splits into ">" + "=..."
RE_REQUIREMENT = re.compile(r'^([a-zA-Z0-9_-]+)(==|>=|<=|!=|~=|>|<)?([0-9.*]+)?')


class RequirementsParser(ManifestParser):
    @property
    def name(self) -> str:
        return "PyPI (Pip)"

    @property
    def ecosystem(self) -> Ecosystem:
        return Ecosystem.PIP

    @property
    def file_names(self) -> list[str]:
        return ["requirements.txt"]

    def parse(self, content: str) -> List[DependencyNode]:
        logging.debug("Parsing requirements.txt...")
        records = []

        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            match = RE_REQUIREMENT.match(line)
            if not match:
                logging.debug(f"Skipping unparseable requirement line: {line!r}")
                continue

            name, operator, version = match.groups()
            display_ver = f"{operator or ''}{version}" if version else "latest"
            records.append(DependencyNode(name.lower(), display_ver, kind=DependencyKind.PRODUCTION))

        logging.debug(f"requirements.txt parsed. {len(records)} records.")
        return records
