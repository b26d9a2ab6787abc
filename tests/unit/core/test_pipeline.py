"""Unit tests for core/pipeline.py"""

import asyncio
import json

import pytest

from mdjson.core.errors import (
    ConfigurationError,
    InvalidFormatError,
    MetadataDecodeError,
    SerializationError,
    StructuralError,
)
from mdjson.core.models import InvalidItem, OutputFile, RawDocument
from mdjson.core.pipeline import Pipeline, run_batch, run_each
from mdjson.core.render import PipelineConfig, markdown_renderer


BAD_YAML = '---\ntitle: "lipsum "fragor" ipsum"\n---\n*"dipsum"*'
DATED = "---\n2020-01-01: launch\n---\nbody"
BLOB = "---\nblob: !!binary /w==\n---\nbody"


def test_missing_renderer_fails_before_processing():
    with pytest.raises(ConfigurationError):
        Pipeline({"renderer": None})


def test_convert_single_document(make_doc, config):
    """Single-item mode emits the record itself under a .json path."""
    out = asyncio.run(Pipeline(config).convert(make_doc("posts/hello.md", "# Hello\n\nWorld\n")))
    assert isinstance(out, OutputFile)
    assert out.path == "posts/hello.json"
    data = out.data()
    assert data["title"] == "Hello"
    assert "<p>World</p>" in data["body"]


def test_convert_nested_under_path_key(make_doc):
    config = PipelineConfig(**markdown_renderer(nest=True))
    out = asyncio.run(Pipeline(config).convert(make_doc("posts/hello.md", "# Hello")))
    assert list(out.data()) == ["posts.hello"]


def test_convert_skips_binary(config):
    doc = RawDocument(path="logo.png", contents=b"\x89PNG\x00\x00")
    assert asyncio.run(Pipeline(config).convert(doc)) is None


def test_convert_passthrough_json_unchanged(make_doc, config):
    doc = make_doc("site.json", '{"b": 1, "a": 2}')
    out = asyncio.run(Pipeline(config).convert(doc))
    assert out.path == "site.json"
    assert out.contents == doc.contents


def test_convert_invalid_yaml_is_invalid_item(make_doc, config):
    out = asyncio.run(Pipeline(config).convert(make_doc("bad.md", BAD_YAML)))
    assert isinstance(out, InvalidItem)
    assert isinstance(out.error, MetadataDecodeError)
    assert out.path == "bad.md"


def test_batch_isolates_malformed_document(content_docs, make_doc, config):
    """5 valid documents and 1 malformed one: 5 leaves, exactly one error."""
    docs = content_docs + [make_doc("blog/posts/broken.md", BAD_YAML)]
    result = run_batch(docs, config)

    tree = result.output.data()
    leaves = [*tree["blog"]["posts"].values(), tree["blog"]["blog"], tree["blog"]["site"]]
    assert len(leaves) == 5
    assert "broken" not in tree["blog"]["posts"]

    assert len(result.errors) == 1
    err = result.errors[0]
    assert err.path == "blog/posts/broken.md"
    assert err.error.line == 2
    assert "blog/posts/broken.md" in err.message
    assert result.skipped == ["blog/logo.png"]
    assert not result.ok


def test_batch_invalid_json_excluded(make_doc, config):
    docs = [
        make_doc("site.json", '{"title": "ipsum blog"}'),
        make_doc("invalid.json", '"{ \\"title\\"'),
    ]
    result = run_batch(docs, config)
    assert result.output.path == "content.json"
    assert result.output.data() == {"site": {"title": "ipsum blog"}}
    assert len(result.errors) == 1
    assert isinstance(result.errors[0].error, InvalidFormatError)
    assert result.errors[0].message == "invalid.json is not valid JSON"


def test_batch_structural_error_excluded(make_doc, config):
    docs = [make_doc(".hidden.md", "x"), make_doc("ok.md", "y")]
    result = run_batch(docs, config)
    assert list(result.output.data()) == ["ok"]
    assert isinstance(result.errors[0].error, StructuralError)


def test_batch_collision_follows_input_order_not_completion(make_doc):
    """The later input wins even when it finishes first."""

    class SlowFirst(Pipeline):
        async def process(self, document):
            if document.path == "a/b.md":
                await asyncio.sleep(0.01)
            return await super().process(document)

    config = PipelineConfig(renderer=str.strip, transform=lambda data, doc: {"from": doc.path})
    docs = [make_doc("a/b.md", "first"), make_doc("a/b.markdown", "second")]
    result = asyncio.run(SlowFirst(config).consolidate(docs))
    assert result.output.data() == {"a": {"b": {"from": "a/b.markdown"}}}


def test_batch_transform_and_name(content_docs, config):
    def transform(data, document):
        data["test"] = True
        return data

    result = run_batch(content_docs, config, "blog.json", transform)
    assert result.output.path == "blog.json"
    assert result.output.data()["blog"]["blog"]["test"] is True


def test_batch_requires_context_for_unbound_renderer(content_docs):
    """Without its context an unbound renderer fails per document, not fatally."""
    result = run_batch(content_docs[:1], markdown_renderer()["renderer"])
    assert result.output.data() == {}
    assert len(result.errors) == 1


def test_convert_each_launches_all_and_yields_completion_order(make_doc, config):
    started = []

    class Recording(Pipeline):
        async def process(self, document):
            started.append(document.path)
            if document.path == "slow.md":
                await asyncio.sleep(0.01)
            return await super().process(document)

    async def collect():
        return [item async for item in Recording(config).convert_each(
            [make_doc("slow.md", "# Slow"), make_doc("fast.md", "# Fast")]
        )]

    results = asyncio.run(collect())
    assert started == ["slow.md", "fast.md"]
    assert [r.path for r in results] == ["fast.json", "slow.json"]


def test_run_each_splits_files_and_errors(content_docs, make_doc, config):
    files, errors = run_each(content_docs + [make_doc("bad.md", BAD_YAML)], config)
    assert sorted(f.path for f in files) == [
        "blog/blog.json",
        "blog/posts/bushwick-artisan.json",
        "blog/posts/index.json",
        "blog/posts/oakland-activist.json",
        "blog/site.json",
    ]
    assert [e.path for e in errors] == ["bad.md"]


def test_pipeline_is_reusable_across_batches(make_doc, config):
    pipeline = Pipeline(config)
    first = asyncio.run(pipeline.consolidate([make_doc("a.md", "# A")]))
    second = asyncio.run(pipeline.consolidate([make_doc("b.md", "# B")]))
    assert list(first.output.data()) == ["a"]
    assert list(second.output.data()) == ["b"]
    assert json.loads(second.output.contents)["b"]["title"] == "B"


def test_batch_survives_records_without_plain_json_form(make_doc, config):
    """Date keys are stringified; an unencodable value fails only its own document."""
    docs = [make_doc("good.md", "# Good"), make_doc("dated.md", DATED), make_doc("blob.md", BLOB)]
    result = run_batch(docs, config)

    tree = result.output.data()
    assert tree["good"]["title"] == "Good"
    assert tree["dated"]["2020-01-01"] == "launch"
    assert "blob" not in tree
    assert [e.path for e in result.errors] == ["blob.md"]
    assert isinstance(result.errors[0].error, SerializationError)


def test_run_each_survives_records_without_plain_json_form(make_doc, config):
    docs = [make_doc("good.md", "# Good"), make_doc("dated.md", DATED), make_doc("blob.md", BLOB)]
    files, errors = run_each(docs, config)
    by_path = {f.path: f.data() for f in files}
    assert sorted(by_path) == ["dated.json", "good.json"]
    assert by_path["dated.json"]["2020-01-01"] == "launch"
    assert [e.path for e in errors] == ["blob.md"]


def test_convert_emits_null_for_nan(make_doc, config):
    out = asyncio.run(Pipeline(config).convert(make_doc("n.md", "---\nscore: .nan\n---\nx")))
    assert b"NaN" not in out.contents
    assert out.data()["score"] is None
