"""Pipeline configuration and renderer invocation"""

from dataclasses import dataclass, fields
from typing import Any, Callable, Mapping, Optional

from markdown_it import MarkdownIt

from mdjson.core.errors import ConfigurationError


DEFAULT_NAME = "content.json"

# Accepted spellings for mapping-style configuration
_ALIASES = {
    "stripTitle":   "strip_title",
    "flattenIndex": "flatten_index",
}


@dataclass(frozen=True)
class PipelineConfig:
    """Normalized pipeline options, built once and never re-inspected per document.

    renderer takes markdown and returns markup. When context is set the
    renderer is called as renderer(context, body), which lets an unbound
    method such as MarkdownIt.render be paired with its instance.
    """
    renderer:      Callable[..., str]
    context:       Any = None
    strip_title:   bool = False
    transform:     Optional[Callable[[Any, Any], Any]] = None
    flatten_index: bool = False
    name:          Optional[str] = None
    nest:          bool = False       # single-item mode: wrap record under its PathKey
    indent:        Optional[int] = None

    def __post_init__(self):
        if self.renderer is None or not callable(self.renderer):
            raise ConfigurationError("Markdown renderer function required")
        if self.transform is not None and not callable(self.transform):
            raise ConfigurationError("transform must be callable")
        if self.name is not None and not self.name.strip():
            raise ConfigurationError("name must be a non-empty string")

    @property
    def output_name(self) -> str:
        return self.name or DEFAULT_NAME

    def render(self, body: str) -> str:
        if self.context is None:
            return self.renderer(body)
        return self.renderer(self.context, body)

    @classmethod
    def coerce(cls, config, name=None, transform=None) -> "PipelineConfig":
        """Build a PipelineConfig from a callable, a mapping, or an existing config.

        name and transform are the positional shorthand: a string name
        renames the consolidated output, a callable in the name slot is
        taken as the transform.
        """
        if isinstance(config, cls):
            options = {f.name: getattr(config, f.name) for f in fields(cls)}
        elif isinstance(config, Mapping):
            options = {_ALIASES.get(k, k): v for k, v in config.items()}
            unknown = set(options) - {f.name for f in fields(cls)}
            if unknown:
                raise ConfigurationError(f"Unknown option(s): {', '.join(sorted(unknown))}")
        elif callable(config):
            options = {"renderer": config}
        else:
            raise ConfigurationError("Markdown renderer function required")

        if isinstance(name, str):
            options["name"] = name
        elif callable(name):
            options["transform"] = name
        if callable(transform):
            options["transform"] = transform
        return cls(**options)


def markdown_renderer(preset: str = "commonmark", **options) -> dict[str, Any]:
    """Return renderer/context options for a markdown-it parser with the given preset."""
    try:
        parser = MarkdownIt(preset, options_update={"linkify": False})
    except KeyError as e:
        raise ConfigurationError(f"Unknown markdown-it preset: {preset}") from e
    return {"renderer": MarkdownIt.render, "context": parser, **options}
