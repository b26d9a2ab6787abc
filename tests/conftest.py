"""Root test configuration: renderer config and an on-disk content tree"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from mdjson.core.models import RawDocument
from mdjson.core.render import PipelineConfig, markdown_renderer


MTIME = datetime(2016, 3, 1, 12, 30, 15, 250000, tzinfo=timezone.utc)

CONTENT_TREE = {
    "blog/blog.md": "---\ntitle: Blog\n---\nEverything we write.\n",
    "blog/posts/index.md": "---\ntitle: Archive\n---\nAll posts, newest first.\n",
    "blog/posts/bushwick-artisan.md": "# Bushwick Artisan\n\nTypewriter *put a bird* on it.\n",
    "blog/posts/oakland-activist.md": (
        "---\nauthor: Jane\ntags: [food, local]\n---\nOakland Activist\n================\n\nSingle-origin coffee.\n"
    ),
    "blog/site.json": '{"title": "ipsum blog", "description": "Typewriter put a bird on it"}',
}
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01"


def _make_doc(path: str, text: str, modified: datetime = MTIME) -> RawDocument:
    return RawDocument(path=path, contents=text.encode("utf-8"), modified=modified)


@pytest.fixture(name="config")
def config_fixture() -> PipelineConfig:
    return PipelineConfig(**markdown_renderer())


@pytest.fixture(name="content_docs")
def content_docs_fixture() -> list[RawDocument]:
    """The content tree as in-memory documents, in sorted path order."""
    docs = [_make_doc(p, CONTENT_TREE[p]) for p in sorted(CONTENT_TREE)]
    docs.append(RawDocument(path="blog/logo.png", contents=PNG_BYTES, modified=MTIME))
    return docs


@pytest.fixture(name="content_dir")
def content_dir_fixture(tmp_path) -> Path:
    """The content tree written under tmp_path/content, plus a binary image."""
    root = tmp_path / "content"
    for rel, text in CONTENT_TREE.items():
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
    (root / "blog" / "logo.png").write_bytes(PNG_BYTES)
    return root


@pytest.fixture(name="make_doc")
def make_doc_fixture():
    """Factory for in-memory documents with a fixed modified time."""
    return _make_doc
