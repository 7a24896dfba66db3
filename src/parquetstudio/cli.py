#!/usr/bin/env python3
"""
parquetstudio CLI - view, query and edit Parquet files from the terminal.

Every editing command loads the file into memory, applies one change and
writes the result, back to the same file unless --output is given.
"""

import sys
from functools import wraps
from pathlib import Path
from typing import Optional

import click
import polars as pl

from parquetstudio.core.config import CONFIG_FILE_NAME, StudioConfig
from parquetstudio.core.data import ParquetData
from parquetstudio.core.engine import ParquetEngine, to_frame
from parquetstudio.core.schema import SchemaStructure
from parquetstudio.core.session import ParquetSession
from parquetstudio.messages import ErrorFormatter, get_logger, set_log_level
from parquetstudio.utility.exceptions import StudioError

CONFIG_TEMPLATE = """# parquetstudio configuration
engine:
  database: ":memory:"
  # threads: 4
  # memory_limit: 2GB

load:
  # Read at most this many rows (all rows when unset)
  row_limit: null

save:
  compression: snappy
  overwrite: false

log_level: INFO
"""


def _handle_errors(func):
    """Print friendly errors and exit with status 1."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        verbose = bool(ctx.obj and ctx.obj.get("verbose"))
        try:
            return func(*args, **kwargs)
        except (StudioError, OSError) as e:
            message, suggestion = ErrorFormatter.format_error(e, verbose=verbose)
            click.echo(f"Error: {message}")
            if suggestion:
                click.echo(f"Hint: {suggestion}")
            if verbose:
                click.echo(ErrorFormatter.format_with_stack_trace(e))
            get_logger("parquetstudio.cli").debug(f"{ctx.command.name} failed: {e}")
            sys.exit(1)

    return wrapper


def _config(ctx: click.Context) -> StudioConfig:
    return ctx.obj["config"]


def _open_session(ctx: click.Context, file: str, whole: bool = False) -> ParquetSession:
    """Open FILE; `whole` ignores load.row_limit so edits can be written back."""
    config = _config(ctx)
    if whole and config.load.row_limit is not None:
        config = config.model_copy(
            update={"load": config.load.model_copy(update={"row_limit": None})}
        )
    session = ParquetSession(ParquetEngine(config.engine.connection_factory()), config)
    session.open(file)
    return session


def _save(session: ParquetSession, output: Optional[str], force: bool):
    if output is None:
        written = session.save_in_place()
    else:
        written = session.save(output, overwrite=force or None)
    click.echo(f"Saved {written}")


def _echo_data(
    data: ParquetData, limit: Optional[int] = None, total: Optional[int] = None
) -> None:
    frame = to_frame(data)
    rows = len(frame) if limit is None else min(limit, len(frame))
    with pl.Config(tbl_rows=max(rows, 1), tbl_cols=-1, fmt_str_lengths=60):
        click.echo(frame.head(rows))
    total = data.row_count if total is None else total
    click.echo(f"{total:,} rows x {data.column_count:,} columns")


def _output_option(func):
    func = click.option(
        "--force",
        "-f",
        is_flag=True,
        help="Overwrite the output file if it exists",
    )(func)
    func = click.option(
        "--output",
        "-o",
        type=click.Path(dir_okay=False),
        help="Write the result here instead of back to FILE",
    )(func)
    return func


@click.group()
@click.version_option(package_name="parquetstudio")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help=f"Configuration file (default: nearest {CONFIG_FILE_NAME})",
)
@click.pass_context
def studio(ctx: click.Context, verbose: bool, config_path: Optional[str]):
    """
    parquetstudio - view, query and edit Parquet files with DuckDB.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    try:
        if config_path:
            config = StudioConfig.from_path(Path(config_path))
        else:
            config = StudioConfig.find()
    except StudioError as e:
        click.echo(f"Configuration error: {e}")
        sys.exit(1)

    ctx.obj["config"] = config
    set_log_level("DEBUG" if verbose else config.log_level)


@studio.command()
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing config file")
def init(force: bool):
    """Write a parquetstudio.yml with default settings."""
    config_file = Path.cwd() / CONFIG_FILE_NAME
    if config_file.exists() and not force:
        click.echo(f"{CONFIG_FILE_NAME} already exists in {Path.cwd()}")
        click.echo("Use --force to overwrite it")
        sys.exit(1)

    config_file.write_text(CONFIG_TEMPLATE, encoding="utf-8")
    click.echo(f"Created {config_file}")


@studio.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--limit", "-n", type=int, default=20, show_default=True, help="Rows to print")
@click.pass_context
@_handle_errors
def show(ctx: click.Context, file: str, limit: int):
    """Print the contents of a Parquet file."""
    engine = ParquetEngine(_config(ctx).engine.connection_factory())
    _echo_data(engine.load(file, limit=limit), limit, total=engine.count_rows(file))


@studio.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.pass_context
@_handle_errors
def schema(ctx: click.Context, file: str):
    """Print the schema of a Parquet file as JSON."""
    engine = ParquetEngine(_config(ctx).engine.connection_factory())
    names, types = engine.schema_of(file)
    click.echo(SchemaStructure.from_lists(names, types).to_json())


@studio.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.pass_context
@_handle_errors
def count(ctx: click.Context, file: str):
    """Print the number of rows in a Parquet file."""
    engine = ParquetEngine(_config(ctx).engine.connection_factory())
    click.echo(f"{engine.count_rows(file):,}")


@studio.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("sql")
@click.option("--limit", "-n", type=int, default=50, show_default=True, help="Rows to print")
@click.pass_context
@_handle_errors
def query(ctx: click.Context, file: str, sql: str, limit: int):
    """Run SQL against FILE, available as the view 'data'.

    Example: parquetstudio query users.parquet "SELECT count(*) FROM data"
    """
    engine = ParquetEngine(_config(ctx).engine.connection_factory())
    _echo_data(engine.query(file, sql), limit)


@studio.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("text")
@click.pass_context
@_handle_errors
def search(ctx: click.Context, file: str, text: str):
    """Print rows where any cell contains TEXT (case-insensitive)."""
    session = _open_session(ctx, file)
    matches = session.search(text)
    data = session.table.to_data()
    data.rows = [data.rows[i] for i in matches]
    if matches:
        _echo_data(data, len(matches))
    click.echo(f"{len(matches):,} matching rows: {', '.join(map(str, matches[:50]))}")


@studio.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("schema_file", type=click.Path(dir_okay=False))
@click.pass_context
@_handle_errors
def transform(ctx: click.Context, file: str, schema_file: str):
    """Show how SCHEMA_FILE would change the column types of FILE."""
    session = _open_session(ctx, file)
    transform_schema = session.load_schema_file(schema_file)
    click.echo(transform_schema.to_json())
    if session.complies_strict_mode():
        click.echo("Strict mode: OK (same number of fields)")
    else:
        click.echo(
            f"Strict mode: FAILED ({session.original_schema.field_count} fields in "
            f"file, {session.destination_schema.field_count} in schema)"
        )


@studio.command()
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("schema_file", type=click.Path(dir_okay=False))
@_output_option
@click.option("--strict", is_flag=True, help="Require matching field counts")
@click.option("--compression", "-c", help="Parquet compression codec")
@click.pass_context
@_handle_errors
def convert(
    ctx: click.Context,
    file: str,
    schema_file: str,
    output: Optional[str],
    force: bool,
    strict: bool,
    compression: Optional[str],
):
    """Rewrite FILE with the column types declared in SCHEMA_FILE."""
    session = _open_session(ctx, file, whole=True)
    session.load_schema_file(schema_file)
    options = dict(use_schema=True, strict=strict, compression=compression)
    if output is None:
        written = session.save_in_place(**options)
    else:
        written = session.save(output, overwrite=force or None, **options)
    click.echo(f"Saved {written}")


@studio.command("add-column")
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("name")
@click.argument("column_type", metavar="TYPE")
@_output_option
@click.pass_context
@_handle_errors
def add_column(ctx, file, name, column_type, output, force):
    """Add column NAME of TYPE (VARCHAR, INTEGER, BIGINT, DOUBLE, BOOLEAN, DATE, TIMESTAMP)."""
    session = _open_session(ctx, file, whole=True)
    index = session.add_column(name, column_type)
    click.echo(f"Added column {session.column_name(index)}")
    _save(session, output, force)


@studio.command("drop-column")
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("name")
@_output_option
@click.pass_context
@_handle_errors
def drop_column(ctx, file, name, output, force):
    """Remove column NAME."""
    session = _open_session(ctx, file, whole=True)
    removed = session.delete_column(session.table.column_index(name))
    click.echo(f"Deleted column {removed}")
    _save(session, output, force)


@studio.command("add-row")
@click.argument("file", type=click.Path(dir_okay=False))
@click.option(
    "--set",
    "values",
    multiple=True,
    help="Cell value for the new row as column=value (repeatable)",
)
@_output_option
@click.pass_context
@_handle_errors
def add_row(ctx, file, values, output, force):
    """Append a row of default values, optionally setting some cells."""
    session = _open_session(ctx, file, whole=True)
    row = session.add_row()
    for assignment in values:
        if "=" not in assignment:
            raise click.BadParameter(
                f"Invalid --set format: {assignment}. Use column=value",
                param_hint="--set",
            )
        column, value = assignment.split("=", 1)
        session.set_value(row, session.table.column_index(column.strip()), value)
    click.echo(f"Added row {row}")
    _save(session, output, force)


@studio.command("delete-rows")
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("rows", nargs=-1, type=int, required=True)
@_output_option
@click.pass_context
@_handle_errors
def delete_rows(ctx, file, rows, output, force):
    """Delete the rows at the given 0-based indices."""
    session = _open_session(ctx, file, whole=True)
    deleted = session.delete_rows(list(rows))
    click.echo(f"Deleted {deleted} row(s)")
    _save(session, output, force)


@studio.command("set")
@click.argument("file", type=click.Path(dir_okay=False))
@click.argument("row", type=int)
@click.argument("column")
@click.argument("value")
@_output_option
@click.pass_context
@_handle_errors
def set_value(ctx, file, row, column, value, output, force):
    """Set the cell at ROW (0-based) and COLUMN (name) to VALUE."""
    session = _open_session(ctx, file, whole=True)
    if not 0 <= row < session.row_count:
        raise click.BadParameter(
            f"Row {row} is out of range (0-{session.row_count - 1})", param_hint="ROW"
        )
    stored = session.set_value(row, session.table.column_index(column), value)
    click.echo(f"Set row {row}, {column} = {stored!r}")
    _save(session, output, force)


def main():
    studio(obj={})


if __name__ == "__main__":
    main()
