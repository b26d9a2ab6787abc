"""Document transform: front matter, render, title, timestamp, user transform"""

import json
import math
from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import Any, Optional

from pydantic_core import PydanticSerializationError, to_jsonable_python

from mdjson.core.binary import decode_text
from mdjson.core.errors import (
    DocumentError,
    InvalidFormatError,
    RenderError,
    SerializationError,
    TransformError,
)
from mdjson.core.frontmatter import parse_frontmatter
from mdjson.core.models import RawDocument, Rendered
from mdjson.core.render import PipelineConfig
from mdjson.core.title import extract_title


OUTPUT_EXTENSION = '.json'


def is_passthrough(path: str) -> bool:
    """True for documents already in the output format."""
    return PurePosixPath(path.replace('\\', '/')).suffix.lower() == OUTPUT_EXTENSION


def output_path(path: str) -> str:
    """Replace the final extension of path with the output extension."""
    p = PurePosixPath(path.replace('\\', '/'))
    return str(p.with_suffix(OUTPUT_EXTENSION)) if p.suffix else f"{p}{OUTPUT_EXTENSION}"


def isoformat(moment: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision and a Z suffix; naive means UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def _json_key(key: Any) -> str:
    """Mapping keys as JSON object keys: dates in ISO form, scalars as their JSON text."""
    if isinstance(key, str):
        return key
    key = to_jsonable_python(key)
    return key if isinstance(key, str) else json.dumps(key)


def jsonable(value: Any) -> Any:
    """Coerce decoded YAML/JSON into plain JSON values.

    Mapping keys become strings, non-finite floats become None, and other
    values (dates, sets, bytes) go through pydantic. Raises ValueError,
    TypeError or PydanticSerializationError for values with no JSON form.
    """
    if isinstance(value, dict):
        return {_json_key(k): jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(v) for v in value]
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if value is None or isinstance(value, (str, int)):
        return value
    return jsonable(to_jsonable_python(value))


def to_json(data: Any, indent: Optional[int] = None) -> bytes:
    """Serialize to strict UTF-8 JSON; NaN and Infinity are rejected."""
    return json.dumps(
        data, ensure_ascii=False, indent=indent, allow_nan=False, default=to_jsonable_python
    ).encode('utf-8')


def _normalized(rendered: Rendered) -> Rendered:
    """Replace the record with its JSON form, or fail this document alone."""
    path = rendered.path
    try:
        rendered.record = jsonable(rendered.record)
    except (ValueError, TypeError, RecursionError, PydanticSerializationError) as e:
        raise SerializationError(path, f"{path}: cannot serialize record: {e}") from e
    return rendered


def _passthrough(document: RawDocument) -> Rendered:
    try:
        record = json.loads(decode_text(document.contents))
    except ValueError as e:
        raise InvalidFormatError(document.path) from e
    return Rendered(path=document.path, record=record, source=document, passthrough=True)


def _build_record(document: RawDocument, config: PipelineConfig) -> dict[str, Any]:
    """Decode front matter once, render once, and merge derived fields under metadata."""
    try:
        text = decode_text(document.contents)
    except ValueError as e:
        raise DocumentError(document.path, f"{document.path}: {e}") from e

    parsed = parse_frontmatter(text, document.path)
    try:
        body = config.render(parsed.body)
    except Exception as e:
        raise RenderError(document.path, f"{document.path}: renderer failed: {e}") from e

    record = dict(parsed.attributes)
    record.setdefault("body", body)

    # A metadata title wins and is never stripped
    if not record.get("title"):
        extracted = extract_title(body, config.strip_title)
        if "title" in extracted:
            record["title"] = extracted["title"]
        if "body" in extracted and "body" not in parsed.attributes:
            record["body"] = extracted["body"]

    if document.modified is not None:
        record.setdefault("updatedAt", isoformat(document.modified))
    return record


def to_record(document: RawDocument, config: PipelineConfig) -> Rendered:
    """Turn one raw document into a structured record, or raise a DocumentError."""
    if is_passthrough(document.path):
        return _normalized(_passthrough(document))

    record = _build_record(document, config)
    if config.transform is not None:
        try:
            record = config.transform(record, document)
        except Exception as e:
            raise TransformError(document.path, f"{document.path}: transform failed: {e}") from e
    return _normalized(Rendered(path=document.path, record=record, source=document))
