import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ramo.core.model import DependencyKind
from ramo.core.resolver import FixedLicensePolicy, LicensePolicy, MetadataResolver, SeededChoicePolicy

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

CONFIG_FILE = "ramo.toml"

DEFAULT_SCOPE_MAP: Dict[str, DependencyKind] = {
    "test": DependencyKind.DEVELOPMENT,
    "provided": DependencyKind.PEER,
}


@dataclass
class RamoConfig:
    log_file: str = "debug.log"
    log_level: str = "DEBUG"
    seed_children: bool = True

    license_policy: str = "seeded"
    default_license: Optional[str] = None
    seed: int = 0

    scope_map: Dict[str, DependencyKind] = field(default_factory=lambda: dict(DEFAULT_SCOPE_MAP))

    def build_license_policy(self) -> LicensePolicy:
        if self.license_policy == "fixed":
            return FixedLicensePolicy(self.default_license)
        return SeededChoicePolicy(seed=self.seed)

    def build_resolver(self) -> MetadataResolver:
        return MetadataResolver(license_policy=self.build_license_policy(), seed=self.seed)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RamoConfig":
        config = cls()

        if "log_file" in data:
            config.log_file = str(data["log_file"])
        if "log_level" in data:
            config.log_level = str(data["log_level"]).upper()
        if "seed_children" in data:
            config.seed_children = bool(data["seed_children"])

        license_section = data.get("license", {})
        policy = license_section.get("policy", config.license_policy)
        if policy not in ("seeded", "fixed"):
            raise ValueError(f"license.policy must be 'seeded' or 'fixed', got {policy!r}")
        config.license_policy = policy
        config.default_license = license_section.get("default", config.default_license)
        config.seed = int(license_section.get("seed", config.seed))

        maven_section = data.get("maven", {})
        if "scope_map" in maven_section:
            scope_map = {}
            for scope, kind in maven_section["scope_map"].items():
                try:
                    scope_map[scope] = DependencyKind(kind)
                except ValueError:
                    raise ValueError(f"maven.scope_map.{scope}: unknown dependency kind {kind!r}") from None
            config.scope_map = scope_map

        return config


def load_config(path: Optional[str] = None, cwd: str = ".") -> RamoConfig:
    """
    Loads settings from an explicit file, ./ramo.toml or [tool.ramo] in
    ./pyproject.toml, first hit wins. Missing files mean defaults.
    """
    if path:
        with open(path, "rb") as f:
            return RamoConfig.from_dict(tomllib.load(f))

    local = os.path.join(cwd, CONFIG_FILE)
    if os.path.exists(local):
        logging.debug(f"Loading config from {local}")
        with open(local, "rb") as f:
            return RamoConfig.from_dict(tomllib.load(f))

    pyproject = os.path.join(cwd, "pyproject.toml")
    if os.path.exists(pyproject):
        with open(pyproject, "rb") as f:
            data = tomllib.load(f)
        section = data.get("tool", {}).get("ramo")
        if section is not None:
            logging.debug("Loading config from [tool.ramo] in pyproject.toml")
            return RamoConfig.from_dict(section)

    return RamoConfig()
