"""Error taxonomy: fatal configuration errors and per-document errors"""

from pathlib import PurePosixPath


class MdjsonError(Exception):
    """Base class for all mdjson errors."""


class ConfigurationError(MdjsonError):
    """Malformed invocation (e.g. missing renderer); aborts before any document is processed."""


class DocumentError(MdjsonError):
    """A failure confined to one document; siblings keep processing."""

    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path


class MetadataDecodeError(DocumentError):
    """Malformed front matter.

    line and column are 1-based and count from the top of the original
    document, fence line included. snippet holds the offending source line
    followed by a caret line pointing at the column.
    """

    def __init__(
        self,
        path: str,
        name: str,
        reason: str,
        line: int,
        column: int,
        snippet: str = "",
        ):
        self.name = name
        self.reason = reason
        self.line = line
        self.column = column
        self.snippet = snippet
        message = f"{path}: {name}: {reason} (line {line}, column {column})"
        if snippet:
            message = f"{message}\n{snippet}"
        super().__init__(path, message)


class InvalidFormatError(DocumentError):
    """A document already in the output format that fails to decode as such."""

    def __init__(self, path: str):
        name = PurePosixPath(path.replace("\\", "/")).name
        super().__init__(path, f"{name} is not valid JSON")


class StructuralError(DocumentError):
    """A document path that cannot be mapped to a position in the consolidated tree."""


class RenderError(DocumentError):
    """The configured renderer raised while rendering one document."""


class TransformError(DocumentError):
    """The user transform raised for one document."""


class SerializationError(DocumentError):
    """A record holding a value that has no JSON form (e.g. non-UTF-8 binary)."""
