"""
Cleanroom CLI - run generated fixture suites from the command line.

The ``showcase`` command generates many copies of the heavy-load suite,
runs them on the in-process driver and reports results and leaked views.
"""

from __future__ import annotations

import json
import logging

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from cleanroom.config import HarnessConfig, HarnessConfigLoader
from cleanroom.showcase import create_lifecycle, heavy_load_suite
from cleanroom.testing import RunReport, SequentialDriver, generate

app = typer.Typer(
    name="cleanroom",
    help="Per-test fixture isolation for view components",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        from cleanroom import __version__

        console.print(f"[bold blue]Cleanroom[/bold blue] v{__version__}")
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
    """Cleanroom - per-test fixture isolation for view components."""
    pass


def run_showcase(config: HarnessConfig) -> RunReport:
    """Generate ``config.suite_count`` suites and run them sequentially."""
    lifecycle = create_lifecycle()
    driver = SequentialDriver(lifecycle)

    variants = {}
    if config.fail_index is not None:
        variants[config.fail_index] = heavy_load_suite(
            lifecycle, failing=True, template=config.template
        )

    generate(
        heavy_load_suite(lifecycle, template=config.template),
        config.suite_count,
        driver,
        label=config.label,
        variants=variants,
    )
    return driver.run()


@app.command()
def showcase(
    suites: int = typer.Option(None, "--suites", "-n", help="Number of suites to generate"),
    fail_index: int = typer.Option(
        None, "--fail-index", help="Flip the assertion in the suite with this index"
    ),
    config_path: str = typer.Option(None, "--config", "-c", help="YAML configuration file"),
    format_: str = typer.Option(
        "console", "--format", "-f", help="Output format: console, yaml, json"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Verbose output"),
) -> None:
    """
    Run generated heavy-load suites and check isolation.

    Every suite mounts the heavy-load directive on one shared document.
    The run passes when every case passes and no view is left attached.
    """
    try:
        data = HarnessConfigLoader.from_yaml(config_path).model_dump() if config_path else {}
        if suites is not None:
            data["suite_count"] = suites
        if fail_index is not None:
            data["fail_index"] = fail_index
        if verbose:
            data["log_level"] = "DEBUG"
        config = HarnessConfigLoader.from_dict(data)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1) from None

    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")

    if format_ == "console":
        summary = f"[bold]Suites:[/bold] {config.suite_count}\n[bold]Template:[/bold] {config.template}"
        if config.fail_index is not None:
            summary += f"\n[dim]Flipped assertion at #{config.fail_index}[/dim]"
        console.print(
            Panel(
                summary,
                title="🧪 Cleanroom Showcase",
                border_style="blue",
            )
        )

    report = run_showcase(config)

    if format_ == "json":
        typer.echo(json.dumps(report.model_dump(mode="json"), indent=2))
    elif format_ == "yaml":
        typer.echo(report.to_yaml())
    else:
        _print_report(report)

    if not report.ok:
        raise typer.Exit(1)


def _print_report(report: RunReport) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Count")

    table.add_row("Cases", str(report.total))
    table.add_row("Passed", f"[green]{report.passed}[/green]")
    table.add_row("Failed", f"[red]{report.failed}[/red]" if report.failed else "0")
    table.add_row("Errors", f"[red]{report.errors}[/red]" if report.errors else "0")
    table.add_row(
        "Leaked views",
        f"[red]{report.leaked_views}[/red]" if report.leaked_views else "0",
    )
    console.print(table)

    failures = report.failures()
    if failures:
        console.print("\n[bold red]Failures:[/bold red]")
        for result in failures[:20]:
            console.print(f"  [red]✗[/red] {result.full_name} ({result.phase}): {result.message}")
        if len(failures) > 20:
            console.print(f"  [dim]... and {len(failures) - 20} more[/dim]")

    if report.ok:
        console.print("\n[green]✓[/green] All cases passed and the document is clean")


if __name__ == "__main__":
    app()
