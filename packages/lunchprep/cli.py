"""CLI for the ``lunchprep`` package.

Typer-based console interface over :mod:`lunchprep.api`. Environment variables
(notably ``OPENAI_API_KEY``) are loaded from a local ``.env`` using
``python-dotenv`` before any command runs. Commands print errors to stderr and
return exit code 1 instead of raising.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .exporter import default_export_filename
from .logging_setup import configure_logging

# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--csv-path",
    help="Path to a bank statement CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
    readable=True,
)

OUTPUT_OPTION: OptionInfo = typer.Option(
    ...,  # default comes from the signature
    "--output",
    "-o",
    help=(
        "Write the Lunch Money CSV here (defaults to stdout). A directory gets "
        "lunchprep-export-<date>.csv"
    ),
)


def _read_statement(csv_path: Path) -> str | None:
    try:
        return csv_path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
    except UnicodeDecodeError:
        print(f"Error: File is not UTF-8 text: {csv_path}", file=sys.stderr)
    return None


def _emit(csv_text: str, output: Path | None) -> int:
    if output is None:
        sys.stdout.write(csv_text)
        return 0
    if output.is_dir():
        output = output / default_export_filename()
    try:
        output.write_text(csv_text, encoding="utf-8")
    except OSError as e:
        print(f"Error: could not write {output}: {e}", file=sys.stderr)
        return 1
    print(f"Wrote {output}", file=sys.stderr)
    return 0


def cmd_parse(csv_path: Path, output: Path | None = None) -> int:
    """Parse a statement and export it without categories."""

    from .api import prepare_statement
    from .exporter import generate_lunch_money_csv
    from .parsers import StatementParseError

    text = _read_statement(csv_path)
    if text is None:
        return 1
    try:
        items = prepare_statement(text, classify=False)
    except StatementParseError as e:
        print(f"Error: Failed to parse CSV: {e}", file=sys.stderr)
        return 1
    return _emit(generate_lunch_money_csv(items), output)


def cmd_categorize(csv_path: Path, output: Path | None = None) -> int:
    """Parse, anonymise, categorise and export a statement."""

    import os

    from .api import prepare_statement
    from .categorize import CategorisationError
    from .exporter import generate_lunch_money_csv
    from .parsers import StatementParseError

    if not os.getenv("OPENAI_API_KEY"):
        print("Error: OPENAI_API_KEY is not set in the environment.", file=sys.stderr)
        return 1

    text = _read_statement(csv_path)
    if text is None:
        return 1
    try:
        items = prepare_statement(text)
    except StatementParseError as e:
        print(f"Error: Failed to parse CSV: {e}", file=sys.stderr)
        return 1
    except (CategorisationError, ValueError) as e:
        print(f"Error: categorisation failed: {e}", file=sys.stderr)
        return 1
    return _emit(generate_lunch_money_csv(items), output)


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Clean bank statement CSVs for Lunch Money and categorise them with OpenAI "
        "(personal names are masked first). Loads OPENAI_API_KEY from a local .env."
    ),
)
whitelist_app = typer.Typer(help="Names that are never anonymised.", no_args_is_help=True)
categories_app = typer.Typer(help="Categories offered to the classifier.", no_args_is_help=True)
app.add_typer(whitelist_app, name="whitelist")
app.add_typer(categories_app, name="categories")


@app.command("parse")
def parse_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    output: Annotated[Path | None, OUTPUT_OPTION] = None,
) -> None:
    """Parse a statement into a Lunch Money CSV (no categories)."""

    raise typer.Exit(cmd_parse(csv_path, output))


@app.command("categorize")
def categorize_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    output: Annotated[Path | None, OUTPUT_OPTION] = None,
) -> None:
    """Parse and categorise a statement into a Lunch Money CSV."""

    raise typer.Exit(cmd_categorize(csv_path, output))


@whitelist_app.command("list")
def whitelist_list_cmd() -> None:
    from .storage import load_whitelist

    for name in sorted(load_whitelist()):
        typer.echo(name)


@whitelist_app.command("add")
def whitelist_add_cmd(name: Annotated[str, typer.Argument(help="Payee name to keep")]) -> None:
    from .storage import add_to_whitelist

    try:
        add_to_whitelist(name)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(1) from e
    typer.echo(f"Whitelisted {name.strip().upper()}")


@whitelist_app.command("remove")
def whitelist_remove_cmd(name: Annotated[str, typer.Argument()]) -> None:
    from .storage import remove_from_whitelist

    try:
        remove_from_whitelist(name)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(1) from e
    typer.echo(f"Removed {name.strip().upper()}")


@categories_app.command("list")
def categories_list_cmd() -> None:
    from .categories import load_categories

    for name in load_categories():
        typer.echo(name)


@categories_app.command("set")
def categories_set_cmd(
    names: Annotated[list[str], typer.Argument(help="Categories, in display order")],
) -> None:
    from .categories import save_categories

    try:
        saved = save_categories(names)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(1) from e
    typer.echo(f"Saved {len(saved)} categories")


@categories_app.command("reset")
def categories_reset_cmd() -> None:
    from .categories import reset_categories

    reset_categories()
    typer.echo("Restored default categories")


@app.callback()
def _root() -> None:
    """Load ``.env`` (without overriding existing variables) and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    app()
