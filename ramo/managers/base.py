from abc import ABC, abstractmethod
from typing import List
from ramo.core.model import DependencyNode, Ecosystem


class ManifestParser(ABC):
    """Base class inherited by all manifest parsers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Friendly ecosystem name (e.g., NPM, PyPI, Maven)."""
        pass

    @property
    @abstractmethod
    def ecosystem(self) -> Ecosystem:
        pass

    @property
    @abstractmethod
    def file_names(self) -> List[str]:
        """List of exact filenames this parser accepts."""
        pass

    def detect(self, file_name: str) -> bool:
        """
        Returns True if this parser handles the given file.
        Matching is on the base name only, never on content.
        """
        return file_name in self.file_names

    @abstractmethod
    def parse(self, content: str) -> List[DependencyNode]:
        """
        Turns raw manifest text into a flat list of records.
        Raises MalformedManifest when the whole document is unreadable.
        """
        pass
