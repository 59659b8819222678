from typing import Optional


class ParseError(Exception):
    """Raised once per call when a manifest cannot be turned into records."""

    def __init__(self, message: str, file_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.file_name = file_name


class MalformedManifest(ParseError):
    """The whole input is not valid JSON/XML for its format."""


class UnsupportedFileKind(ParseError):
    """No parser accepts the given file name."""
