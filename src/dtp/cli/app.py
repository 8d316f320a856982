"""DocTransplant CLI entry point."""

from typing import Annotated, Optional

import typer
from dotenv import load_dotenv

from dtp import __version__
from dtp.cli.batch import batch
from dtp.cli.inspect import inspect
from dtp.cli.match import match
from dtp.cli.translate import translate

app = typer.Typer(
    name="dtp",
    help="DocTransplant: put a plain-text translation into a .docx/.pptx, keeping its formatting.",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"dtp {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """DocTransplant: put a plain-text translation into a .docx/.pptx, keeping its formatting."""
    # Load .env for DTP_* settings; shell exports take precedence
    load_dotenv(override=False)


app.command("translate")(translate)
app.command("match")(match)
app.command("inspect")(inspect)
app.command("batch")(batch)
