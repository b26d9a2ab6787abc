"""Pipeline orchestration: per-document tasks, failure isolation, and output modes"""

import asyncio
import logging
from typing import AsyncIterator, Iterable, Union

from mdjson.core.binary import sniff
from mdjson.core.consolidate import consolidate, key_segments, path_key
from mdjson.core.errors import DocumentError
from mdjson.core.models import BatchResult, InvalidItem, OutputFile, RawDocument, Rendered
from mdjson.core.render import PipelineConfig
from mdjson.core.transform import is_passthrough, output_path, to_json, to_record


LOGGER = logging.getLogger(__name__)

Outcome = Union[Rendered, InvalidItem, None]


class Pipeline:
    """Markdown (+ front matter) to JSON over one document or an ordered batch.

    The configuration is validated on construction, so a missing renderer
    fails before any document is read. Instances hold no per-run state and
    can be reused across batches.
    """

    def __init__(self, config, name=None, transform=None):
        self.config = PipelineConfig.coerce(config, name, transform)

    async def process(self, document: RawDocument) -> Outcome:
        """Run one document to completion: Rendered, InvalidItem, or None if skipped as binary."""
        try:
            if not is_passthrough(document.path) and not await sniff(document):
                LOGGER.debug("Skipping binary file %s", document.path)
                return None
            return to_record(document, self.config)
        except DocumentError as e:
            LOGGER.warning("%s", e)
            return InvalidItem(path=document.path, error=e)

    def _emit(self, rendered: Rendered) -> OutputFile:
        """Single-item artifact for one rendered document."""
        if rendered.passthrough:
            return OutputFile(path=rendered.path, contents=rendered.source.contents)
        data = rendered.record
        if self.config.nest:
            data = {path_key(rendered.path): data}
        return OutputFile(path=output_path(rendered.path), contents=to_json(data, self.config.indent))

    async def convert(self, document: RawDocument) -> Union[OutputFile, InvalidItem, None]:
        """Single-item mode; returns only after the document has settled."""
        outcome = await self.process(document)
        if isinstance(outcome, Rendered):
            return self._emit(outcome)
        return outcome

    async def convert_each(
        self,
        documents: Iterable[RawDocument],
        ) -> AsyncIterator[Union[OutputFile, InvalidItem]]:
        """Single-item mode over many documents, yielded in completion order.

        All tasks are launched before any is awaited; skipped binaries
        yield nothing.
        """
        tasks = [asyncio.ensure_future(self.convert(doc)) for doc in documents]
        for next_done in asyncio.as_completed(tasks):
            result = await next_done
            if result is not None:
                yield result

    async def consolidate(self, documents: Iterable[RawDocument]) -> BatchResult:
        """Batch mode: process all documents concurrently and merge them into one tree.

        Results are gathered in input order, so when two documents map to
        the same key the later input wins regardless of completion order.
        """
        documents = list(documents)
        outcomes = await asyncio.gather(*(self.process(doc) for doc in documents))

        result = BatchResult()
        valid: list[Rendered] = []
        for doc, outcome in zip(documents, outcomes):
            if outcome is None:
                result.skipped.append(doc.path)
            elif isinstance(outcome, InvalidItem):
                result.errors.append(outcome)
            else:
                try:
                    key_segments(outcome.path, self.config.flatten_index)
                except DocumentError as e:
                    LOGGER.warning("%s", e)
                    result.errors.append(InvalidItem(path=outcome.path, error=e))
                    continue
                valid.append(outcome)

        result.output = consolidate(valid, self.config)
        LOGGER.info(
            "Consolidated %d document(s) into %s (%d invalid, %d skipped)",
            len(valid), result.output.path, len(result.errors), len(result.skipped),
        )
        return result


def run_batch(documents: Iterable[RawDocument], config, name=None, transform=None) -> BatchResult:
    """Synchronous entry point for consolidated output."""
    pipeline = Pipeline(config, name, transform)
    return asyncio.run(pipeline.consolidate(documents))


def run_each(
    documents: Iterable[RawDocument],
    config,
    name=None,
    transform=None,
    ) -> tuple[list[OutputFile], list[InvalidItem]]:
    """Synchronous entry point for single-item output; returns (files, errors) in completion order."""
    pipeline = Pipeline(config, name, transform)

    async def _collect() -> tuple[list[OutputFile], list[InvalidItem]]:
        files: list[OutputFile] = []
        errors: list[InvalidItem] = []
        async for item in pipeline.convert_each(documents):
            (errors if isinstance(item, InvalidItem) else files).append(item)
        return files, errors

    return asyncio.run(_collect())
