"""Output formatters for version-lens results."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ..core.checker import VersionInfo, VersionReport
from ..utils.logging import get_logger


UP_TO_DATE_MARK = "✅"
UPDATE_MARK = "🆙"


def _line_label(info: VersionInfo) -> str:
    return str(info.line_number + 1) if info.line_number is not None else "-"


class ConsoleFormatter:
    """Rich console formatter standing in for the editor's inline markers."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self.logger = get_logger("version_lens.output")

    def format_report(self, report: VersionReport, source: Optional[str] = None) -> None:
        """Display the verdicts of one manifest.

        Args:
            report: Version report
            source: Manifest label, defaults to the report's source
        """
        title = source or report.source or "manifest"

        if not report.total:
            self.console.print(Panel(f"No resolvable dependencies in {title}", style="yellow"))
            return

        self.console.print(self._create_report_table(report, title))

        groups = report.grouped_by_latest()
        if not groups:
            self.console.print(Panel("All dependencies are up to date!", style="green"))
            return

        for latest_version, infos in groups.items():
            names = ", ".join(info.name for info in infos)
            self.console.print(f"[yellow]{UPDATE_MARK} {latest_version}[/yellow]: {names}")

    def _create_report_table(self, report: VersionReport, title: str) -> Table:
        table = Table(title=title)

        table.add_column("Line", justify="right", style="dim")
        table.add_column("Package", style="cyan", no_wrap=True)
        table.add_column("Current")
        table.add_column("Latest")
        table.add_column("Status")

        rows = sorted(
            report.up_to_date + report.needs_update,
            key=lambda info: (info.line_number is None, info.line_number or 0),
        )
        for info in rows:
            if info.is_up_to_date:
                status = f"[green]{UP_TO_DATE_MARK}[/green]"
            else:
                status = f"[yellow]{UPDATE_MARK} {info.latest_version}[/yellow] ({info.update_kind})"
            table.add_row(_line_label(info), info.name, info.current_version, info.latest_version, status)

        return table

    def format_changelog(self, name: str, version: str, changelog: Optional[str]) -> None:
        """Display a changelog the way the hover popup renders it."""
        if not changelog:
            self.console.print(f"[yellow]No changelog found for {name}@{version}[/yellow]")
            return

        self.console.print(Panel(Markdown(changelog), title=f"{name} {version} Changelog"))


class JSONFormatter:
    """JSON formatter for machine-readable reports."""

    def __init__(self, output_file: Optional[Path] = None) -> None:
        self.output_file = output_file
        self.logger = get_logger("version_lens.output")

    @staticmethod
    def _info_to_dict(info: VersionInfo) -> Dict[str, Any]:
        return {
            "name": info.name,
            "current_version": info.current_version,
            "latest_version": info.latest_version,
            "line": info.line_number,
            "update_kind": info.update_kind,
        }

    def format_report(self, report: VersionReport, source: Optional[str] = None) -> Dict[str, Any]:
        """Format one report as a JSON-serializable dict."""
        return {
            "source": source or report.source,
            "up_to_date": [self._info_to_dict(info) for info in report.up_to_date],
            "needs_update": [self._info_to_dict(info) for info in report.needs_update],
            "groups": {
                latest_version: [info.name for info in infos]
                for latest_version, infos in report.grouped_by_latest().items()
            },
        }

    def format_reports(self, reports: List[VersionReport]) -> Dict[str, Any]:
        return {
            "generated_at": datetime.now().isoformat(),
            "manifests": [self.format_report(report) for report in reports],
        }

    def save_results(self, results: Dict[str, Any]) -> None:
        """Save results to the configured output file."""
        if not self.output_file:
            raise ValueError("No output file specified")

        with open(self.output_file, "w", encoding="utf-8") as f:
            json.dump(results, f, indent=2, ensure_ascii=False)

        self.logger.info(f"Results saved to {self.output_file}")
