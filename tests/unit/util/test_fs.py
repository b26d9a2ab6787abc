"""Unit tests for util/fs.py"""

from datetime import timezone

from mdjson.util.fs import discover_files, iter_documents


def test_discover_files_single(tmp_path):
    f = tmp_path / "doc.md"
    f.write_text("# Hello")
    assert discover_files(f) == [f]


def test_discover_files_sorted_and_skips_hidden(tmp_path):
    (tmp_path / "b.md").write_text("b")
    sub = tmp_path / "a"
    sub.mkdir()
    (sub / "c.md").write_text("c")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("ref")
    (tmp_path / ".draft.md").write_text("d")
    assert discover_files(tmp_path) == [sub / "c.md", tmp_path / "b.md"]


def test_iter_documents_relative_posix_paths(content_dir):
    docs = iter_documents(content_dir)
    paths = [d.path for d in docs]
    assert "blog/posts/index.md" in paths
    assert "blog/logo.png" in paths
    assert paths == sorted(paths)


def test_iter_documents_reads_bytes_and_mtime(content_dir):
    doc = next(d for d in iter_documents(content_dir) if d.path == "blog/blog.md")
    assert doc.contents.startswith(b"---\ntitle: Blog")
    assert doc.modified.tzinfo is timezone.utc


def test_iter_documents_single_file(content_dir):
    docs = iter_documents(content_dir / "blog" / "blog.md")
    assert [d.path for d in docs] == ["blog.md"]
