"""Intermediate data models for the transform and consolidate pipeline"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from mdjson.core.errors import DocumentError


@dataclass(frozen=True)
class RawDocument:
    """A source document as handed over by the source provider."""
    path:     str                           # relative, '/' or '\' delimited
    contents: bytes
    modified: Optional[datetime] = None


@dataclass(frozen=True)
class ParsedMetadata:
    """Front matter attributes plus the remaining (unrendered) body text."""
    attributes: dict[str, Any]
    body:       str


@dataclass(frozen=True)
class OutputFile:
    """An emitted artifact: relative output path and serialized JSON payload."""
    path:     str
    contents: bytes

    def data(self) -> Any:
        return json.loads(self.contents.decode('utf-8'))


@dataclass
class Rendered:
    """Internal per-document result; record is whatever the user transform returned."""
    path:        str
    record:      Any
    source:      RawDocument
    passthrough: bool = False


@dataclass(frozen=True)
class InvalidItem:
    """A document excluded from output, with the error that excluded it."""
    path:  str
    error: DocumentError

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass
class BatchResult:
    """Outcome of a consolidated run: one output file plus reported errors."""
    output:  Optional[OutputFile] = None
    errors:  list[InvalidItem] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)    # binary payloads

    @property
    def ok(self) -> bool:
        return not self.errors
