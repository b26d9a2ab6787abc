"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from mdjson.core.render import DEFAULT_NAME, PipelineConfig, markdown_renderer


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:      str  = "mdjson"
    output_dir:    str  = Field(default="dist",         description="Directory for emitted JSON files")
    output_name:   str  = Field(default=DEFAULT_NAME,   min_length=1, description="Consolidated output file name")
    parser_config: str  = Field(default="commonmark",   description="MarkdownIt parser preset name")
    strip_title:   bool = Field(default=False, description="Remove the first <h1> from body when used as title")
    flatten_index: bool = Field(default=False, description="Merge index/same-name files into their parent node")
    nest:          bool = Field(default=False, description="Wrap single-file records under their path key")
    indent:        int  = Field(default=0, ge=0, description="JSON indentation; 0 = compact")

    def pipeline_config(self) -> PipelineConfig:
        """Build the pipeline configuration with a markdown-it renderer."""
        return PipelineConfig(**markdown_renderer(
            self.parser_config,
            strip_title=self.strip_title,
            flatten_index=self.flatten_index,
            name=self.output_name,
            nest=self.nest,
            indent=self.indent or None,
        ))


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDJSON_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"MDJSON_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
