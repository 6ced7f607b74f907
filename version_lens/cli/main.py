"""Main CLI interface for version-lens."""

import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ..changelog import ChangelogResolver
from ..core.checker import VersionChecker, VersionReport
from ..core.parsers import Dependency, Ecosystem, create_registry
from ..core.scheduler import UpdateScheduler
from ..output.formatters import ConsoleFormatter, JSONFormatter
from ..utils.config import Settings, load_settings
from ..utils.logging import get_logger, setup_logging
from ..utils.path_utils import ManifestFile, find_manifests

app = typer.Typer(
    name="version-lens",
    help="Annotate dependency manifests with the latest published version of each dependency",
    add_completion=False
)

console = Console()
logger = get_logger("version_lens.cli")

CONFIG_OPTION_HELP = "TOML file with a [tool.version-lens] table"
LOG_FILE_OPTION_HELP = "Also write log records to this file"


def _load(config: Optional[Path], verbose: bool, log_file: Optional[Path]) -> Settings:
    settings = load_settings(config)
    setup_logging(verbose=verbose or settings.verbose, log_file=log_file)
    return settings


async def _check_manifests(manifests: List[ManifestFile]) -> List[VersionReport]:
    """Run one pass per manifest, sequentially."""
    reports = []
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True
    ) as progress:
        task = progress.add_task("Querying package indexes...", total=len(manifests))

        async with VersionChecker() as checker:
            for manifest in manifests:
                progress.update(task, description=f"Checking {manifest.path.name}...")
                reports.append(await checker.check_file(manifest.path))
                progress.advance(task)
    return reports


@app.command()
def check(
    path: Path = typer.Argument(
        Path("."),
        help="Manifest file or project directory to check"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file for JSON results"
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help=CONFIG_OPTION_HELP
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help=LOG_FILE_OPTION_HELP),
    ignore_patterns: Optional[List[str]] = typer.Option(
        None,
        "--ignore",
        help="Additional ignore patterns"
    )
) -> None:
    """Check manifests for dependencies with newer published versions."""
    try:
        _load(config, verbose, log_file)

        if not path.exists():
            console.print(f"[red]Error: Path does not exist: {path}[/red]")
            raise typer.Exit(1)

        manifests = find_manifests(path, ignore_patterns)
        if not manifests:
            supported = ", ".join(ecosystem.file_name for ecosystem in Ecosystem)
            console.print(f"[yellow]No manifests found (looked for {supported})[/yellow]")
            return

        reports = asyncio.run(_check_manifests(manifests))

        formatter = ConsoleFormatter(console)
        for report in reports:
            formatter.format_report(report)

        if output:
            json_formatter = JSONFormatter(output)
            json_formatter.save_results(json_formatter.format_reports(reports))
            console.print(f"[green]Results saved to: {output}[/green]")

    except typer.Exit:
        raise
    except Exception as e:
        logger.error(f"Check failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


async def _resolve_changelog(name: str, version: str, file_hint: str, settings: Settings) -> Optional[str]:
    async with ChangelogResolver(settings=settings) as resolver:
        return await resolver.resolve(name, version, file_hint)


async def _resolve_line_changelog(
    file_path: Path,
    line: str,
    settings: Settings
) -> Tuple[Optional[Dependency], Optional[str]]:
    """Resolve the changelog of whatever dependency a manifest line declares."""
    async with ChangelogResolver(settings=settings) as resolver:
        dependency = resolver.dependency_for_line(file_path.name, line)
        if dependency is None:
            return None, None
        return dependency, await resolver.resolve(dependency.name, dependency.version, file_path.name)


def _read_line(file_path: Path, line_number: int) -> str:
    lines = file_path.read_text(encoding="utf-8").splitlines()
    if not 1 <= line_number <= len(lines):
        raise ValueError(f"No line {line_number} in {file_path}")
    return lines[line_number - 1]


@app.command()
def changelog(
    package: Optional[str] = typer.Argument(None, help="Package name"),
    version: Optional[str] = typer.Argument(None, help="Package version"),
    file_hint: str = typer.Option(
        ...,
        "--file",
        "-f",
        help="Manifest the package comes from (package.json, requirements.txt, pyproject.toml, Gemfile)"
    ),
    line: Optional[int] = typer.Option(
        None,
        "--line",
        "-l",
        help="1-based manifest line to read the package and version from, instead of PACKAGE VERSION"
    ),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help=LOG_FILE_OPTION_HELP)
) -> None:
    """Show the changelog of a package version, or of the dependency on a manifest line."""
    if line is None and not (package and version):
        console.print("[red]Error: Give PACKAGE and VERSION, or --line with a manifest --file[/red]")
        raise typer.Exit(1)

    try:
        settings = _load(config, verbose, log_file)
        if line is None:
            text = asyncio.run(_resolve_changelog(package, version, file_hint, settings))
        else:
            file_path = Path(file_hint)
            dependency, text = asyncio.run(
                _resolve_line_changelog(file_path, _read_line(file_path, line), settings)
            )
            if dependency is None:
                console.print(f"[yellow]No dependency declared on line {line} of {file_path}[/yellow]")
                raise typer.Exit(1)
            package, version = dependency.name, dependency.version
    except typer.Exit:
        raise
    except Exception as e:
        logger.error(f"Changelog lookup failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    ConsoleFormatter(console).format_changelog(package, version, text)
    if not text:
        raise typer.Exit(1)


async def _watch(file_path: Path, settings: Settings, poll_interval: float) -> None:
    """Re-check a manifest whenever its modification time changes."""
    formatter = ConsoleFormatter(console)

    def render(report: VersionReport) -> None:
        console.rule(str(file_path))
        formatter.format_report(report)

    async with VersionChecker() as checker:
        scheduler = UpdateScheduler(
            lambda: checker.check_file(file_path),
            render,
            interval=settings.debounce_interval,
        )
        last_mtime = None
        try:
            while True:
                mtime = file_path.stat().st_mtime_ns
                if mtime != last_mtime:
                    last_mtime = mtime
                    scheduler.trigger()
                await asyncio.sleep(poll_interval)
        finally:
            scheduler.cancel()


@app.command()
def watch(
    file_path: Path = typer.Argument(..., help="Manifest file to watch"),
    poll_interval: float = typer.Option(0.5, "--poll", help="Seconds between modification checks"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_OPTION_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help=LOG_FILE_OPTION_HELP)
) -> None:
    """Watch a manifest and re-check it after every change."""
    if Ecosystem.from_filename(file_path.name) is None or not file_path.is_file():
        console.print(f"[red]Error: Not a supported manifest: {file_path}[/red]")
        raise typer.Exit(1)

    try:
        settings = _load(config, verbose, log_file)
        console.print(f"Watching {file_path} (Ctrl+C to stop)")
        asyncio.run(_watch(file_path, settings, poll_interval))
    except KeyboardInterrupt:
        console.print("Stopped")
    except Exception as e:
        logger.error(f"Watch failed: {e}")
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def info() -> None:
    """Show version-lens information."""
    indexes = ", ".join(index.value for index in create_registry().get_supported_indexes())

    console.print(Panel.fit(
        "[bold blue]version-lens[/bold blue]\n"
        f"Checks dependency manifests against {indexes}\n"
        "and finds changelogs for package versions",
        title="Information"
    ))

    table = Table(title="Supported Manifests")
    table.add_column("Manifest", style="cyan")
    table.add_column("Package Index")
    for ecosystem in Ecosystem:
        table.add_row(ecosystem.file_name, ecosystem.package_index.value)
    console.print(table)


def main() -> None:
    """Main entry point for version-lens CLI."""
    app()


if __name__ == "__main__":
    main()
