"""CLI entrypoint: Typer app definition and command registration"""

import typer

from catposts.cli.commands import init_cmd, load_cmd, main_callback, render_cmd


app = typer.Typer(name="catposts", no_args_is_help=True, help="Render configurable category post lists")

app.callback()(main_callback)
app.command(name="init")(init_cmd)
app.command(name="load")(load_cmd)
app.command(name="render")(render_cmd)
