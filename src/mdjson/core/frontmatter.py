"""Front matter extraction: YAML header decode with line-addressable errors"""

import re

import yaml

from mdjson.core.errors import MetadataDecodeError
from mdjson.core.models import ParsedMetadata


FRONTMATTER_RE = re.compile(
    r'\A\ufeff?---[ \t]*\r?\n(.*?)^(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)',
    re.DOTALL | re.MULTILINE,
)
# The line breaks PyYAML counts when it reports a mark
LINE_BREAK_RE = re.compile(r'\r\n|[\r\n\x85\u2028\u2029]')
HEADER_OFFSET = 1   # YAML starts on the line after the opening fence


def _snippet(text: str, line: int, column: int) -> str:
    """Return the 1-based source line with a caret under the 1-based column."""
    lines = LINE_BREAK_RE.split(text)
    if not 1 <= line <= len(lines):
        return ""
    source = lines[line - 1]
    return f"{source}\n{' ' * (column - 1)}^"


def _location(header: str, err: yaml.YAMLError) -> tuple[int, int]:
    """0-based (line, column) of the error within the header."""
    mark = getattr(err, 'problem_mark', None) or getattr(err, 'context_mark', None)
    if mark is not None:
        return mark.line, mark.column
    # ReaderError only knows the character offset
    position = getattr(err, 'position', None)
    if position is not None:
        lines = LINE_BREAK_RE.split(header[:position])
        return len(lines) - 1, len(lines[-1])
    return 0, 0


def _decode_error(text: str, header: str, path: str, err: yaml.YAMLError) -> MetadataDecodeError:
    reason = getattr(err, 'problem', None) or getattr(err, 'reason', None) or str(err)
    line, column = _location(header, err)
    line, column = line + HEADER_OFFSET + 1, column + 1
    return MetadataDecodeError(
        path=path,
        name=type(err).__name__,
        reason=reason,
        line=line,
        column=column,
        snippet=_snippet(text, line, column),
    )


def parse_frontmatter(text: str, path: str = "") -> ParsedMetadata:
    """Split text into (attributes, body); raise MetadataDecodeError on a bad header."""
    m = FRONTMATTER_RE.match(text)
    if not m:
        return ParsedMetadata(attributes={}, body=text)

    header = m.group(1)
    try:
        attributes = yaml.safe_load(header) or {}
    except yaml.YAMLError as e:
        raise _decode_error(text, header, path, e) from e
    if not isinstance(attributes, dict):
        line = HEADER_OFFSET + 1
        raise MetadataDecodeError(
            path=path,
            name="InvalidMetadata",
            reason=f"expected a mapping, got {type(attributes).__name__}",
            line=line,
            column=1,
            snippet=_snippet(text, line, 1),
        )
    return ParsedMetadata(attributes=attributes, body=text[m.end():])
