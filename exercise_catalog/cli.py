"""CLI entrypoints for the exercise catalog."""

from __future__ import annotations

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import Config, load_config
from .errors import CatalogError
from .pipeline import run_pipeline
from .query import CatalogReader
from .reporting import PipelineReport
from .thumbnails import generate_thumbnails
from .validation import IssueSeverity, SourceIssue, lint_workspace

console = Console()
app = typer.Typer(help="Exercise catalog build and API toolkit.")

ConfigPathOption = Annotated[
    str,
    typer.Option("--config", "-c", help="Path to configuration file or project directory."),
]
VerboseFlag = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show log output while running."),
]


@app.command()
def build(
    config_path: ConfigPathOption = ".",
    verbose: VerboseFlag = False,
) -> None:
    """Convert exercise sources into the versioned JSON dataset."""
    _configure_logging(verbose)
    config = _load(config_path)

    try:
        report = run_pipeline(config)
    except (CatalogError, OSError, ValueError) as exc:
        console.print(f"[bold red]Build failed[/]: {exc}")
        raise typer.Exit(code=1) from exc

    _print_build_summary(report, config)


@app.command()
def lint(
    config_path: ConfigPathOption = ".",
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Treat warnings as errors."),
    ] = False,
) -> None:
    """Check every exercise source without writing artifacts."""
    config = _load(config_path)
    report = lint_workspace(config)

    for issue in sorted(report.issues, key=_lint_sort_key):
        style = "red" if issue.severity is IssueSeverity.ERROR else "yellow"
        location = issue.source_path
        if issue.pointer:
            location = f"{location} :: {issue.pointer}"
        console.print(f"[bold {style}]{issue.severity.name}[/] {location} - {issue.message}")

    console.print(
        f"[bold blue]Summary[/]: {report.valid_count} valid, {report.invalid_count} invalid "
        f"across {report.source_count} file(s); {report.error_count} error(s), "
        f"{report.warning_count} warning(s)."
    )

    exit_code = 0
    if report.invalid_count > 0 or (strict and report.warning_count > 0):
        exit_code = 1
    raise typer.Exit(code=exit_code)


@app.command()
def thumbnails(config_path: ConfigPathOption = ".", verbose: VerboseFlag = False) -> None:
    """Generate thumbnails for asset images and write the thumbnail manifest."""
    _configure_logging(verbose)
    config = _load(config_path)
    result = generate_thumbnails(config.assets_dir, config.thumbnails)

    for entry in result.generated:
        console.print(f"[green]Thumbnail[/] {entry.file} -> {entry.thumbnail}")
    for name, message in sorted(result.errors.items()):
        console.print(f"[bold red]Error[/] {name}: {message}")
    console.print(
        f"[bold blue]Summary[/]: {len(result.generated)} generated, {len(result.skipped)} up to date, "
        f"{len(result.errors)} failed; manifest at {result.manifest_path}"
    )
    if result.errors:
        raise typer.Exit(code=1)


@app.command()
def serve(
    config_path: ConfigPathOption = ".",
    host: Annotated[str | None, typer.Option("--host", help="Interface to bind.")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Port to bind.")] = None,
    verbose: VerboseFlag = False,
) -> None:
    """Serve the read API for the last built dataset."""
    import uvicorn

    from .api import create_app

    _configure_logging(verbose)
    config = _load(config_path)
    bind_host = host or config.api.host
    bind_port = port or config.api.port
    console.print(f"[bold green]Serving[/] {config.data_dir} at http://{bind_host}:{bind_port}/")
    uvicorn.run(
        create_app(config),
        host=bind_host,
        port=bind_port,
        log_level="info" if verbose else "warning",
    )


@app.command()
def version(config_path: ConfigPathOption = ".") -> None:
    """Print the version of the built dataset."""
    config = _load(config_path)
    reader = CatalogReader(config.data_dir, initial_version=config.initial_version)
    try:
        info = reader.version_info()
    except CatalogError as exc:
        console.print(f"[bold red]Cannot read version[/]: {exc}")
        raise typer.Exit(code=1) from exc
    updated = info.lastUpdated.isoformat() if info.lastUpdated else "never"
    console.print(f"{info.version} ({info.exerciseCount} exercise(s), updated {updated})")


def _load(path: str) -> Config:
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        console.print(f"[bold red]Configuration not found[/]: {path}")
        raise typer.Exit(code=1) from exc
    except ValueError as exc:
        console.print(f"[bold red]Invalid configuration[/]: {exc}")
        raise typer.Exit(code=1) from exc


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _lint_sort_key(issue: SourceIssue) -> tuple[str, int, str]:
    return (issue.source_path, issue.severity.value, issue.pointer or "")


def _print_build_summary(report: PipelineReport, config: Config) -> None:
    for failure in report.failures:
        console.print(f"[bold red]Invalid[/] {failure.source_path}: {failure.message}")
        for detail in failure.errors[1:]:
            console.print(f"    {detail}")

    if report.changed:
        console.print(
            f"[bold green]Version[/]: {report.previous_version} -> {report.version} "
            f"({len(report.changed_sources)} changed source(s))"
        )
    else:
        console.print(f"[bold blue]Version[/]: {report.version} (no source changes)")

    console.print(
        f"[bold green]Processing complete[/]: {report.valid} valid, {report.invalid} invalid; "
        f"{len(report.written)} file(s) written to {config.data_dir}"
    )
    if report.pruned:
        console.print(f"[bold yellow]Pruned[/]: {len(report.pruned)} stale record file(s)")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
