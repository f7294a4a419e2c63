"""CLI application for PubCheck."""

import asyncio
import dataclasses
import json
import sys
from pathlib import Path

import typer
from rich.table import Table

from core.config import Settings
from core.detect import identify
from core.errors import ManifestError, ResolutionError
from core.logger import console, setup_logging
from core.models import Issue, Manifest, ResolutionResult, Severity
from core.parse_pub import parse_pubspec
from core.resolve_pub import PubResolver
from core.serialize import dependency_to_json, dump_pubspec, manifest_to_json


def read_input(file_path: str) -> tuple[str, str]:
    """Return the manifest content and a display name for it."""
    if file_path == "-":
        return sys.stdin.read(), "<stdin>"

    path_obj = Path(file_path)
    if not path_obj.exists():
        console.print(f"Error: File {file_path} not found", style="red", markup=False)
        raise typer.Exit(1)
    return path_obj.read_text(encoding="utf-8"), file_path


def load_manifest(file_path: str, engine: str | None) -> tuple[Manifest, str]:
    content, display_path = read_input(file_path)

    if engine:
        ecosystem = engine
    else:
        filename = file_path if file_path != "-" else None
        ecosystem = identify(content, filename)

    if ecosystem != "pub":
        console.print(f"Error: Unsupported ecosystem: {ecosystem}", style="red", markup=False)
        raise typer.Exit(1)

    return parse_pubspec(content), display_path


def _details(entry: dict) -> str:
    kind = entry["kind"]
    if kind == "hosted":
        details = entry["version"] or "any"
        if entry["url"]:
            details += f" from {entry['url']}"
        return details
    if kind == "git":
        details = entry["url"]
        if entry["ref"]:
            details += f" @ {entry['ref']}"
        if entry["path"]:
            details += f" ({entry['path']})"
        return details
    if kind == "path":
        return entry["path"]
    return entry["sdk"]


def format_manifest_table(manifest: Manifest, include_dev: bool = True) -> Table:
    """Render the dependencies of a manifest as a rich table."""
    title = manifest.name if not manifest.version else f"{manifest.name} {manifest.version}"
    table = Table(title=title)
    table.add_column("Package", style="bold")
    table.add_column("Section")
    table.add_column("Kind")
    table.add_column("Details")

    sections = [("dependencies", manifest.dependencies)]
    if include_dev:
        sections.append(("dev_dependencies", manifest.dev_dependencies))

    for section, deps in sections:
        for name, dep in deps.items():
            entry = dependency_to_json(name, dep, section)
            table.add_row(name, section, dep.kind, _details(entry))

    return table


def format_json_output(results: list[ResolutionResult], issues: list[Issue]) -> str:
    """Format JSON output."""
    reports = []
    for result in results:
        reports.append({
            "name": result.name,
            "section": "dev_dependencies" if result.dev else "dependencies",
            "constraint": result.dependency.version,
            "registry": result.dependency.url,
            "chosen_version": result.chosen_version,
            "latest_version": result.latest_version,
            "reason": result.reason,
            "semver_delta": result.semver_delta,
        })

    return json.dumps(
        {"reports": reports, "issues": [issue.to_dict() for issue in issues]}, indent=2
    )


def format_resolution_table(results: list[ResolutionResult]) -> Table:
    table = Table(title="Hosted dependencies")
    table.add_column("Package", style="bold")
    table.add_column("Constraint")
    table.add_column("Chosen")
    table.add_column("Latest")
    table.add_column("Delta")

    for result in results:
        table.add_row(
            result.name,
            result.dependency.version or "any",
            result.chosen_version,
            result.latest_version or "",
            result.semver_delta,
        )

    return table


app = typer.Typer(
    name="pubcheck",
    help="PubCheck - Inspect and resolve dependencies declared in pubspec.yaml manifests",
    add_completion=False,
)


@app.command()
def show(
    file_path: str = typer.Argument(help="Path to pubspec.yaml (use '-' for stdin)"),
    format_type: str = typer.Option("table", "--format", help="Output format: table, json or yaml"),
    engine: str | None = typer.Option(None, "--engine", help="Force specific ecosystem"),
    include_dev: bool = typer.Option(True, "--dev/--no-dev", help="Include dev_dependencies"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Show the dependencies declared in a pubspec manifest."""
    settings = Settings.from_env()
    setup_logging("DEBUG" if verbose else settings.log_level)

    try:
        manifest, _ = load_manifest(file_path, engine)
        if not include_dev:
            manifest = dataclasses.replace(manifest, dev_dependencies={})

        if format_type == "json":
            typer.echo(json.dumps(manifest_to_json(manifest), indent=2))
        elif format_type == "yaml":
            typer.echo(dump_pubspec(manifest), nl=False)
        elif format_type == "table":
            console.print(format_manifest_table(manifest, include_dev=include_dev))
        else:
            console.print(f"Error: Unknown format: {format_type}", style="red", markup=False)
            raise typer.Exit(1)

    except typer.Exit:
        raise
    except (ManifestError, OSError, UnicodeDecodeError) as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(1)


@app.command()
def resolve(
    file_path: str = typer.Argument(help="Path to pubspec.yaml (use '-' for stdin)"),
    format_type: str = typer.Option("table", "--format", help="Output format: table or json"),
    engine: str | None = typer.Option(None, "--engine", help="Force specific ecosystem"),
    registry: str | None = typer.Option(None, "--registry", help="Default pub registry URL"),
    include_dev: bool = typer.Option(False, "--include-dev", help="Also resolve dev_dependencies"),
    timeout: float | None = typer.Option(None, "--timeout", help="Request timeout in seconds"),
    max_concurrency: int | None = typer.Option(
        None, "--max-concurrency", help="Maximum concurrent registry requests"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Resolve hosted dependencies to the newest versions their constraints allow."""
    settings = Settings.from_env()
    setup_logging("DEBUG" if verbose else settings.log_level)

    try:
        manifest, _ = load_manifest(file_path, engine)

        if not manifest.hosted(include_dev=include_dev):
            console.print("No hosted dependencies to resolve")
            raise typer.Exit(2)

        resolver = PubResolver(
            hosted_url=registry or settings.hosted_url,
            timeout=timeout if timeout is not None else settings.timeout,
            max_concurrency=max_concurrency or settings.max_concurrency,
        )
        results, issues = asyncio.run(resolver.resolve_manifest(manifest, include_dev=include_dev))

        if format_type == "json":
            typer.echo(format_json_output(results, issues))
        else:
            console.print(format_resolution_table(results))
            for issue in issues:
                style = "red" if issue.severity == Severity.ERROR else "dim"
                console.print(f"{issue.severity.value}: {issue.message}", style=style, markup=False)

        if any(issue.severity == Severity.ERROR for issue in issues):
            raise typer.Exit(1)

    except typer.Exit:
        raise
    except (ManifestError, ResolutionError, OSError, UnicodeDecodeError) as e:
        console.print(f"Error: {e}", style="red", markup=False)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
