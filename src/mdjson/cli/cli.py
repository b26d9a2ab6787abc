"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdjson.cli.commands import build_cmd, convert_cmd


app = typer.Typer(name="mdjson", no_args_is_help=True, help="Markdown + front matter to JSON")

app.command(name="build")(build_cmd)
app.command(name="convert")(convert_cmd)
