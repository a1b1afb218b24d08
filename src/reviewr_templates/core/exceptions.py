"""Exception types raised by the template catalog toolkit."""


class ReviewrTemplatesError(Exception):
    """Base class for catalog toolkit errors."""


class TemplateNotFoundError(ReviewrTemplatesError, LookupError):
    """Raised when a template is not present in any catalog root."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"Template '{name}' not found in {kind}")


class MetadataError(ReviewrTemplatesError, ValueError):
    """Raised when a meta.json file cannot be read or is not a JSON object."""


class ManifestError(ReviewrTemplatesError):
    """Raised for unreadable or malformed manifest.json files."""


class ChecksumMismatchError(ReviewrTemplatesError):
    """Raised when a downloaded file does not match its manifest checksum."""

    def __init__(self, path: str, expected: str, actual: str):
        self.path = path
        self.expected = expected
        self.actual = actual
        super().__init__(f"Checksum mismatch for {path}: expected {expected}, got {actual}")


__all__ = [
    "ReviewrTemplatesError",
    "TemplateNotFoundError",
    "MetadataError",
    "ManifestError",
    "ChecksumMismatchError",
]
