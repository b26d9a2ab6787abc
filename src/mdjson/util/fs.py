from __future__ import annotations
from datetime import datetime, timezone
from pathlib import Path

from mdjson.core.models import RawDocument


def _is_hidden(path: Path, root: Path) -> bool:
    return any(part.startswith(".") for part in path.relative_to(root).parts)


def discover_files(path: Path) -> list[Path]:
    """Return sorted files under path (hidden entries skipped), or [path] if a single file."""
    if path.is_file():
        return [path]
    return sorted(p for p in path.rglob("*") if p.is_file() and not _is_hidden(p, path))


def read_document(path: Path, root: Path) -> RawDocument:
    rel = path.relative_to(root).as_posix()
    modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    return RawDocument(path=rel, contents=path.read_bytes(), modified=modified)


def iter_documents(path: Path) -> list[RawDocument]:
    """Read every file under path as a RawDocument, in sorted path order."""
    root = path if path.is_dir() else path.parent
    return [read_document(p, root) for p in discover_files(path)]
