"""Write pipeline output files to disk"""

from pathlib import Path

from mdjson.core.models import OutputFile


def write_output(file: OutputFile, output_dir: Path) -> Path:
    """Write one OutputFile under output_dir, mirroring its relative path.

    Parent directories are created as needed. Returns the written path.
    """
    dest = output_dir / file.path
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(file.contents)
    return dest


def write_outputs(files: list[OutputFile], output_dir: Path) -> list[Path]:
    return [write_output(f, output_dir) for f in files]
