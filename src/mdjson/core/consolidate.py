"""Tree consolidation: path keys, index flattening, expansion and deep sort"""

import copy
import re
from typing import Any, Iterable

from mdjson.core.errors import StructuralError
from mdjson.core.models import OutputFile, Rendered
from mdjson.core.render import PipelineConfig
from mdjson.core.transform import to_json


SEPARATOR_RE = re.compile(r'[/\\]')


def path_key(path: str) -> str:
    """Dotted key for a relative path: final extension dropped, separators mapped to '.'.

    'blog/posts/oakland-activist.md' -> 'blog.posts.oakland-activist'
    """
    head, _, name = path.replace('\\', '/').rpartition('/')
    stem, dot, _ = name.rpartition('.')
    if dot and stem:
        name = stem
    return SEPARATOR_RE.sub('.', f"{head}/{name}" if head else name)


def key_segments(path: str, flatten_index: bool = False) -> list[str]:
    """Split a path into tree segments, optionally folding index/same-name leaves into the parent."""
    segments = path_key(path).split('.')
    if any(not s for s in segments):
        raise StructuralError(path, f"{path}: cannot derive a key (empty path segment)")

    if flatten_index and len(segments) >= 2:
        parent, leaf = segments[-2:]
        if leaf == parent or leaf == 'index':
            segments = segments[:-1]
    return segments


def expand(flat: Iterable[tuple[list[str], Any]]) -> dict:
    """Nest (segments, value) pairs into a tree.

    A value landing on an existing intermediate node is layered into it,
    and a later path descending through a mapping value extends that value.
    Conflicting keys resolve last-write-wins in iteration order.
    """
    tree: dict = {}
    for segments, value in flat:
        node = tree
        for seg in segments[:-1]:
            child = node.get(seg)
            if not isinstance(child, dict):
                child = node[seg] = {}
            node = child
        leaf = segments[-1]
        existing = node.get(leaf)
        if isinstance(existing, dict) and isinstance(value, dict):
            existing.update(copy.deepcopy(value))
        else:
            node[leaf] = copy.deepcopy(value)
    return tree


def deep_sort(value: Any) -> Any:
    """Sort mapping keys at every level (ordinal); lists keep their order."""
    if isinstance(value, dict):
        return {k: deep_sort(v) for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))}
    if isinstance(value, list):
        return [deep_sort(v) for v in value]
    return value


def build_tree(items: Iterable[Rendered], flatten_index: bool = False) -> dict:
    """Build the sorted tree; a later item with the same key replaces an earlier one."""
    flat: dict[str, tuple[list[str], Any]] = {}
    for item in items:
        segments = key_segments(item.path, flatten_index)
        key = '.'.join(segments)
        flat.pop(key, None)
        flat[key] = (segments, item.record)
    return deep_sort(expand(flat.values()))


def consolidate(items: list[Rendered], config: PipelineConfig) -> OutputFile:
    """Merge records into one nested, sorted JSON document named by config."""
    tree = build_tree(items, config.flatten_index)
    return OutputFile(path=config.output_name, contents=to_json(tree, config.indent))
