"""
CLI entry point for toolpath.

This module provides a Typer-based command-line interface for inspecting
how command paths resolve. It does not run tools.

Commands:
    which       Show the entry a command path resolves to
    list        List the tools and collections below a path
    roots       Show the registered roots in priority order

Roots are registered in this order, each group ahead of the previous one:
settings file roots, then --config roots, then --root directories. Within
one option the first value given has the highest priority.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from toolpath import __version__
from toolpath.errors import ToolpathError
from toolpath.resolver import Resolver
from toolpath.schema import Alias, Entry, NamePath, Tool, make_name_path
from toolpath.settings import LookupSettings, load_settings

# Initialize Typer app with metadata
app = typer.Typer(
    name="toolpath",
    help="Resolve command paths against prioritized definition roots.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]toolpath[/bold] version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _name_path(words: Optional[list[str]]) -> NamePath:
    """Accept both `db migrate` and `db.migrate` on the command line."""
    segments: list[str] = []
    for word in words or []:
        segments.extend(make_name_path(word))
    return tuple(segments)


def _output_json_error(error: Exception) -> None:
    """Output error in JSON format."""
    if isinstance(error, ToolpathError):
        output = {"success": False, "error": error.to_dict()}
    else:
        output = {"success": False, "error": {"error_type": type(error).__name__, "message": str(error)}}
    print(json.dumps(output, indent=2))


def _fail(error: Exception, json_output: bool) -> NoReturn:
    if json_output:
        _output_json_error(error)
    else:
        console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    root: Annotated[
        Optional[list[Path]],
        typer.Option(
            "--root",
            "-r",
            help="Directory hierarchy of definitions (repeatable).",
        ),
    ] = None,
    config: Annotated[
        Optional[list[Path]],
        typer.Option(
            "--config",
            "-c",
            help="Single definition file, or a directory holding one (repeatable).",
        ),
    ] = None,
    settings: Annotated[
        Optional[Path],
        typer.Option(
            "--settings",
            "-s",
            help="Settings YAML file with naming conventions and roots.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Log every definition file as it is loaded.",
        ),
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    toolpath - Inspect lazy, priority-ordered command lookup.

    Paths may be given as separate words or in dotted form.
    """
    _configure_logging(verbose)
    try:
        lookup_settings = load_settings(settings) if settings else LookupSettings()
    except ToolpathError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    resolver = Resolver.from_settings(lookup_settings)
    if config:
        resolver.prepend_config_paths(*config)
    if root:
        resolver.prepend_paths(*root)
    ctx.obj = resolver


@app.command()
def which(
    ctx: typer.Context,
    path: Annotated[
        Optional[list[str]],
        typer.Argument(help="Command path, e.g. `db migrate` or `db.migrate`."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output in JSON format."),
    ] = False,
) -> None:
    """Show the entry a command path resolves to."""
    resolver: Resolver = ctx.obj
    try:
        resolution = resolver.resolve(_name_path(path))
    except ToolpathError as e:
        _fail(e, json_output)

    if json_output:
        output = {
            "success": True,
            "entry": resolution.entry.to_dict(),
            "remaining": list(resolution.remaining),
        }
        print(json.dumps(output, indent=2))
        return

    _display_entry(resolution.entry)
    if resolution.remaining:
        console.print(f"[bold]Remaining:[/bold] {escape(' '.join(resolution.remaining))}")


def _display_entry(entry: Entry) -> None:
    name = entry.display_name or "(root)"
    console.print(f"[bold cyan]{escape(name)}[/bold cyan] [dim]{entry.kind}[/dim]")

    if entry.short_desc:
        console.print(escape(entry.short_desc))
    if entry.long_desc_text:
        console.print()
        console.print(escape(entry.long_desc_text))

    if isinstance(entry, Alias):
        console.print(f"[bold]Target:[/bold] {escape(' '.join(entry.target))}")

    if isinstance(entry, Tool):
        if entry.flags:
            table = Table(title="Flags", show_header=True, header_style="bold")
            table.add_column("Switches", style="cyan")
            table.add_column("Value")
            table.add_column("Description")
            for flag in entry.flags:
                table.add_row(
                    escape(", ".join(flag.switches)),
                    escape(flag.accept or ""),
                    escape(" ".join(flag.desc)),
                )
            console.print(table)
        if entry.args:
            table = Table(title="Arguments", show_header=True, header_style="bold")
            table.add_column("Name", style="cyan")
            table.add_column("Kind")
            table.add_column("Description")
            for arg in entry.args:
                table.add_row(escape(arg.key), arg.kind.value, escape(" ".join(arg.desc)))
            console.print(table)
        if entry.run:
            console.print(f"[bold]Run:[/bold] {escape(entry.run)}")

    if entry.source_path:
        console.print(f"[dim]Source: {escape(str(entry.source_path))}[/dim]")


@app.command("list")
def list_command(
    ctx: typer.Context,
    path: Annotated[
        Optional[list[str]],
        typer.Argument(help="Collection to list (defaults to the root)."),
    ] = None,
    recursive: Annotated[
        bool,
        typer.Option("--recursive", "-R", help="Include all descendants."),
    ] = False,
    search: Annotated[
        Optional[str],
        typer.Option("--search", help="Only show entries mentioning this word."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output in JSON format."),
    ] = False,
) -> None:
    """List the tools and collections below a path."""
    resolver: Resolver = ctx.obj
    try:
        entries = resolver.list_subtools(_name_path(path), recursive=recursive, search=search)
    except ToolpathError as e:
        _fail(e, json_output)

    if json_output:
        output = {
            "tools": [entry.to_dict() for entry in entries],
            "count": len(entries),
        }
        print(json.dumps(output, indent=2))
        return

    if not entries:
        console.print("[dim]No tools found.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Kind")
    table.add_column("Description")
    for entry in entries:
        table.add_row(escape(entry.display_name), entry.kind, escape(entry.short_desc or ""))
    console.print(table)


@app.command()
def roots(
    ctx: typer.Context,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output in JSON format."),
    ] = False,
) -> None:
    """Show the registered roots, highest priority first."""
    resolver: Resolver = ctx.obj
    registered = resolver.registry.roots

    if json_output:
        output = {
            "roots": [{"path": str(r.path), "kind": r.kind.value} for r in registered],
            "count": len(registered),
        }
        print(json.dumps(output, indent=2))
        return

    if not registered:
        console.print("[dim]No roots registered.[/dim]")
        return

    for position, root in enumerate(registered, start=1):
        missing = "" if root.path.exists() else " [yellow](missing)[/yellow]"
        console.print(f"  {position}. [cyan]{escape(str(root.path))}[/cyan] [dim]{root.kind.value}[/dim]{missing}")


if __name__ == "__main__":
    app()
