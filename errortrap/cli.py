"""
errortrap CLI - Command-line interface for error-trapping test runs.

Runs TrappingTestCase classes from a Python file and inspects the severity
table and configuration profiles.
"""

from __future__ import annotations

import importlib.util
import inspect
import sys
from pathlib import Path
from types import ModuleType

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from errortrap.config import TrapConfig, TrapConfigLoader
from errortrap.logging_setup import configure_logging
from errortrap.testing.models import MethodResult, OutcomeKind
from errortrap.testing.test_case import TrappingTestCase
from errortrap.trapping.reporting import error_reporting

app = typer.Typer(
    name="errortrap",
    help="Error trapping and error expectations for unit tests",
    add_completion=False,
)

console = Console()

_KIND_STYLES = {
    OutcomeKind.PASS: "green",
    OutcomeKind.FAIL: "red",
    OutcomeKind.ERROR: "red bold",
    OutcomeKind.EXCEPTION: "magenta",
}


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        from errortrap import __version__

        console.print(f"[bold blue]errortrap[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """errortrap - Error trapping for unit tests."""
    pass


@app.command()
def run(
    path: str = typer.Argument(..., help="Python file defining TrappingTestCase classes"),
    config_file: str = typer.Option(None, "--config", "-c", help="YAML configuration file"),
    profile: str = typer.Option(
        None, "--profile", "-p", help="Configuration profile (base of --config if both given)"
    ),
    format_: str = typer.Option("console", "--format", "-f", help="Output format: console, yaml"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Show passing outcomes too"),
) -> None:
    """
    Run every TrappingTestCase subclass defined in a file.

    Each test method is reported on its own; the exit code is 1 if any
    method did not pass.
    """
    target_path = Path(path)

    if not target_path.exists():
        console.print(f"[red]Error:[/red] Path not found: {path}")
        raise typer.Exit(1)

    try:
        config = _load_config(config_file, profile)
    except (ValueError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    module = _import_file(target_path)
    case_classes = _find_test_cases(module)
    if not case_classes:
        console.print(f"[yellow]No TrappingTestCase classes found in {path}[/yellow]")
        raise typer.Exit(1)

    if config.log_errors:
        configure_logging()

    if format_ != "yaml":
        console.print(
            Panel(
                f"[bold]Running:[/bold] {path}\n[dim]Reporting mask: {config.reporting_mask}[/dim]",
                title="errortrap",
                border_style="blue",
            )
        )

    # Settings of the shared registry are restored after the run
    saved = (error_reporting.mask, error_reporting.log_errors, error_reporting.table)
    config.apply(error_reporting)
    failed = False
    try:
        for case_class in case_classes:
            case = case_class.from_config(config)
            for result in case.run():
                failed = failed or not result.passed
                if format_ == "yaml":
                    console.print(result.to_yaml(), markup=False)
                else:
                    _display_method_result(result, verbose)
    finally:
        error_reporting.mask, error_reporting.log_errors, error_reporting.table = saved

    if failed:
        raise typer.Exit(1)


@app.command()
def severities(
    profile: str = typer.Option("default", "--profile", "-p", help="Configuration profile"),
) -> None:
    """Show the severity table and which entries are available."""
    try:
        config = TrapConfigLoader.from_profile(profile)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    table = config.build_severity_table()
    output = Table(show_header=True, header_style="bold", title=f"Severities ({profile})")
    output.add_column("Code", justify="right")
    output.add_column("Name", style="cyan")
    output.add_column("Requires")
    output.add_column("Available")
    output.add_column("Reported")

    for entry, available in table.entries():
        output.add_row(
            str(int(entry.code)),
            entry.name,
            entry.capability or "-",
            "[green]yes[/green]" if available else "[dim]no[/dim]",
            "yes" if int(entry.code) & config.reporting_mask else "no",
        )
    console.print(output)


@app.command()
def profiles() -> None:
    """List the predefined configuration profiles."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Profile", style="cyan")
    table.add_column("Description")
    for name, description in TrapConfigLoader.list_profiles().items():
        table.add_row(name, description)
    console.print(table)


@app.command("sample-config")
def sample_config() -> None:
    """Print a sample YAML configuration."""
    console.print(TrapConfigLoader.generate_sample_config(), markup=False)


# =============================================================================
# Helpers
# =============================================================================


def _load_config(config_file: str | None, profile: str | None) -> TrapConfig:
    if config_file:
        return TrapConfigLoader.from_yaml(config_file, profile=profile)
    return TrapConfigLoader.from_profile(profile or "default")


def _import_file(path: Path) -> ModuleType:
    spec = importlib.util.spec_from_file_location(path.stem, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load module: {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[path.stem] = module
    spec.loader.exec_module(module)
    return module


def _find_test_cases(module: ModuleType) -> list[type[TrappingTestCase]]:
    """TrappingTestCase subclasses defined in the module itself."""
    return [
        member
        for _, member in inspect.getmembers(module, inspect.isclass)
        if issubclass(member, TrappingTestCase)
        and member is not TrappingTestCase
        and member.__module__ == module.__name__
    ]


def _display_method_result(result: MethodResult, verbose: bool) -> None:
    status = "[green]✓ PASS[/green]" if result.passed else "[red]✗ FAIL[/red]"
    console.print(
        f"{status} {result.test_case}.{result.method} [dim]({result.duration_ms} ms)[/dim]"
    )

    shown = [o for o in result.outcomes if verbose or o.is_failure]
    if not shown:
        return

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Kind")
    table.add_column("Message")
    table.add_column("Location", style="dim")
    for outcome in shown:
        style = _KIND_STYLES[outcome.kind]
        location = f"{outcome.file}:{outcome.line}" if outcome.file else ""
        table.add_row(
            f"[{style}]{outcome.kind.value}[/{style}]",
            Text(outcome.message),
            Text(location),
        )
    console.print(table)


if __name__ == "__main__":
    app()
