from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterator, List, Optional, Tuple


class Ecosystem(str, Enum):
    NPM = "npm"
    PIP = "pip"
    MAVEN = "maven"


class DependencyKind(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"
    PEER = "peer"
    OPTIONAL = "optional"


class Severity(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class VersionConstraintMode(str, Enum):
    ALL = "all"
    EXACT = "exact"
    RANGE = "range"
    LATEST = "latest"


@dataclass
class Vulnerability:
    severity: Severity
    title: str
    url: Optional[str] = None


@dataclass
class DependencyNode:
    name: str
    version: str
    kind: DependencyKind = DependencyKind.PRODUCTION
    children: List['DependencyNode'] = field(default_factory=list)

    # Metadata
    latest_version: Optional[str] = None
    license: Optional[str] = None
    repository_url: Optional[str] = None
    homepage: Optional[str] = None

    # Security model
    vulnerabilities: List[Vulnerability] = field(default_factory=list)
    has_version_conflict: bool = False

    # UI
    is_expanded: bool = False

    @property
    def key(self) -> Tuple[str, str]:
        """Identity used for expand state. Not unique inside a forest."""
        return self.name, self.version

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def has_upgrade(self) -> bool:
        return self.latest_version is not None and self.latest_version != self.version

    def walk(self) -> Iterator['DependencyNode']:
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class FilterOptions:
    dependency_kinds: FrozenSet[DependencyKind] = frozenset()
    license_types: FrozenSet[str] = frozenset()
    show_outdated_only: bool = False
    show_with_vulnerabilities_only: bool = False
    version_constraint_mode: VersionConstraintMode = VersionConstraintMode.ALL

    def is_default(self) -> bool:
        return self == FilterOptions()


def walk_forest(forest: List[DependencyNode]) -> Iterator[DependencyNode]:
    for node in forest:
        yield from node.walk()
