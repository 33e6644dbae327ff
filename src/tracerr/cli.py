from __future__ import annotations

import sys
from typing import Optional

import typer
from loguru import logger
from pydantic import ValidationError

from tracerr.config import Settings
from tracerr.status import status_text
from tracerr.traced import TracedError

app = typer.Typer(
    name="tracerr",
    help="Inspect traced errors received as JSON",
)


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    logger.enable("tracerr")


def load_error(text: str) -> TracedError:
    """Parse *text* or exit with code 1."""
    try:
        return TracedError.from_json(text)
    except ValidationError as exc:
        logger.debug("Rejected payload: {}", exc)
        typer.echo(f"Invalid error payload ({exc.error_count()} problem(s))", err=True)
        raise typer.Exit(1)


@app.command("inspect", help="Print the verbose form of a serialised error")
def inspect_cmd(
    source: typer.FileText = typer.Argument(
        "-", help="File holding the error, '-' for stdin"
    ),
    as_json: bool = typer.Option(
        False, "--json", help="Print normalised JSON instead of the report"
    ),
    stack: Optional[bool] = typer.Option(
        None, "--stack/--no-stack", help="Include stack frames (TRACERR_SHOW_STACK)"
    ),
) -> None:
    settings = Settings()
    err = load_error(source.read())
    if not (settings.show_stack if stack is None else stack):
        err.stack.clear()
    if as_json:
        typer.echo(err.to_json(indent=settings.json_indent))
    else:
        typer.echo(err.verbose())


@app.command("status", help="Print the reason phrase of a status code")
def status_cmd(code: int) -> None:
    text = status_text(code)
    if not text:
        typer.echo(f"Unknown status code {code}", err=True)
        raise typer.Exit(1)
    typer.echo(text)


@app.callback()
def root() -> None:
    """Root command for tracerr."""
    configure_logging(Settings())


def main() -> None:  # pragma: no cover - CLI entry point
    """Entrypoint for the CLI."""
    app()


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
