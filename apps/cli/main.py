"""CLI application for depscout."""

import json
from dataclasses import asdict
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from core.analyzer import UpdateAnalyzer, split_package_names
from core.config import get_settings
from core.detect import locate_manifest
from core.ecosystems import ECOSYSTEMS
from core.errors import DepscoutError
from core.executor import UpdateExecutor
from core.log import configure_logging
from core.models import AnalysisReport, PackageUpdateInfo, UpdateSummary

console = Console()

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOTHING_TO_DO = 2


def format_json_output(report: AnalysisReport) -> str:
    """Format an analysis report as JSON."""
    updates = []
    for update in report.updates:
        record = asdict(update)
        record["update_type"] = update.update_type.value
        updates.append(record)

    return json.dumps(
        {
            "ecosystem": report.ecosystem.id if report.ecosystem else None,
            "manifest": str(report.manifest_path) if report.manifest_path else None,
            "checked": report.checked,
            "updates": updates,
            "not_found": report.not_found,
        },
        indent=2,
    )


def render_updates(updates: list[PackageUpdateInfo]) -> Table:
    """Build a table of available updates."""
    table = Table(title="Available updates")
    table.add_column("Package", style="bold")
    table.add_column("Current")
    table.add_column("Latest", style="green")
    table.add_column("Type")
    table.add_column("Notes")

    type_styles = {"major": "red", "minor": "yellow", "patch": "green"}
    for update in updates:
        notes = []
        if update.has_breaking_change:
            notes.append("[red]breaking[/red]")
        if update.is_deprecated:
            notes.append("[magenta]deprecated[/magenta]")
        if not update.is_resolved:
            notes.append("[dim]lookup failed[/dim]")
        style = type_styles.get(update.update_type.value, "dim")
        table.add_row(
            update.name,
            update.current_version,
            update.latest_version,
            f"[{style}]{update.update_type.value}[/{style}]",
            ", ".join(notes),
        )
    return table


def print_summary(summary: UpdateSummary) -> None:
    """Print the outcome of an update run."""
    for name in summary.succeeded:
        console.print(f"[green]✓[/green] {name}")
    for failure in summary.failed:
        console.print(f"[red]✗[/red] {failure.name}: {failure.reason}")
    for name in summary.skipped:
        console.print(f"[yellow]-[/yellow] {name} (latest version unknown)")
    console.print(
        f"{len(summary.succeeded)} succeeded, {len(summary.failed)} failed, {len(summary.skipped)} skipped"
    )


def print_not_found(names: list[str]) -> None:
    if names:
        console.print(f"[yellow]Not declared in the manifest:[/yellow] {', '.join(names)}")


app = typer.Typer(
    name="depscout",
    help="depscout - Find and apply dependency updates across ecosystems",
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as NDJSON on stderr"),
) -> None:
    """depscout - Find and apply dependency updates across ecosystems."""
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, json_logs or settings.log_json)


@app.command()
def check(
    packages: list[str] | None = typer.Argument(None, help="Only check these packages (space or comma separated)"),
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project directory"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
) -> None:
    """Show which dependencies have newer releases."""
    try:
        report = UpdateAnalyzer().analyze(path, split_package_names(packages))
    except DepscoutError as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(EXIT_ERROR)

    if not report.project_found:
        console.print(f"No supported project found in {path}")
        raise typer.Exit(EXIT_NOTHING_TO_DO)

    if as_json:
        typer.echo(format_json_output(report))
    elif report.updates:
        console.print(render_updates(report.updates))
    else:
        console.print(f"All {report.checked} {report.ecosystem.display_name} dependencies are up to date")

    if not as_json:
        print_not_found(report.not_found)

    if not report.updates:
        raise typer.Exit(EXIT_NOTHING_TO_DO)


@app.command()
def update(
    packages: list[str] | None = typer.Argument(None, help="Only update these packages (space or comma separated)"),
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project directory"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Apply breaking updates without asking"),
    update_all: bool = typer.Option(False, "--all", help="Run the package manager's bulk update instead"),
) -> None:
    """Install the latest version of outdated dependencies."""
    executor = UpdateExecutor()

    if update_all:
        found = locate_manifest(path)
        if found is None:
            console.print(f"No supported project found in {path}")
            raise typer.Exit(EXIT_NOTHING_TO_DO)
        summary = executor.update_all(found.project_dir, found.ecosystem)
        print_summary(summary)
        raise typer.Exit(EXIT_OK if summary.ok else EXIT_ERROR)

    try:
        report = UpdateAnalyzer().analyze(path, split_package_names(packages))
    except DepscoutError as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(EXIT_ERROR)

    print_not_found(report.not_found)

    if not report.project_found or not report.updates:
        console.print("Nothing to update")
        raise typer.Exit(EXIT_NOTHING_TO_DO)

    console.print(render_updates(report.updates))

    if report.has_breaking_changes and not yes:
        for update_info in report.updates:
            for note in update_info.breaking_change_notes:
                console.print(f"[red]{update_info.name}[/red]: {note}")
        typer.confirm("Some updates may contain breaking changes. Continue?", abort=True)

    project_dir = report.manifest_path.parent if report.manifest_path else path
    try:
        summary = executor.apply(project_dir, report.ecosystem, report.updates, allow_breaking=True)
    except DepscoutError as e:
        console.print(f"Error: {e}", style="red")
        raise typer.Exit(EXIT_ERROR)

    print_summary(summary)
    if not summary.ok:
        raise typer.Exit(EXIT_ERROR)


@app.command()
def ecosystems() -> None:
    """List supported ecosystems."""
    table = Table(title="Supported ecosystems")
    table.add_column("Id", style="bold")
    table.add_column("Name")
    table.add_column("Manifests")
    table.add_column("Package managers")
    table.add_column("Registry")
    for descriptor in ECOSYSTEMS.values():
        table.add_row(
            descriptor.id,
            descriptor.display_name,
            ", ".join(descriptor.manifest_files),
            ", ".join(manager.name for manager in descriptor.package_managers),
            descriptor.registry_id,
        )
    console.print(table)


if __name__ == "__main__":
    app()
