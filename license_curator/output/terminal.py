"""Terminal output formatter using Rich."""
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from license_curator.constants import LEGAL_DISCLAIMER_SHORT
from license_curator.models.incremental import IncrementalChanges
from license_curator.models.policy import PolicyReport, Severity
from license_curator.models.session import ApprovalReadiness, CurationSession
from license_curator.models.template import TemplateApplicationResult

_SEVERITY_STYLES = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "blue",
}


class TerminalFormatter:
    """Format policy reports and curation state for terminal display."""

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize the formatter with a Rich console.

        Args:
            console: Optional Rich Console instance. If not provided,
                a new Console will be created.
        """
        self._console = console if console is not None else Console()

    def format_report(self, report: PolicyReport) -> None:
        """Display a policy report with summary panel and violation table."""
        self._print_report_summary(report)
        self._print_disclaimer()

        if not report.violations:
            self._console.print("[green]No policy violations[/green]")
            return

        table = Table(title=f"Policy Violations ({report.policy_name})")
        table.add_column("Severity", no_wrap=True)
        table.add_column("Rule", style="magenta")
        table.add_column("Dependency", style="cyan")
        table.add_column("License", style="green")
        table.add_column("Message")

        for violation in report.violations:
            style = _SEVERITY_STYLES[violation.severity]
            table.add_row(
                f"[{style}]{violation.severity.value}[/{style}]",
                violation.rule_id,
                f"{violation.dependency_name} {violation.dependency_version}".strip(),
                violation.license,
                violation.message,
            )
        self._console.print(table)

        for violation in report.violations:
            if violation.explanation is None:
                continue
            recommended = violation.explanation.recommended
            if recommended is not None:
                self._console.print(
                    f"  [bold]{violation.dependency_name}[/bold]: "
                    f"{recommended.title} ({recommended.effort.value} effort)"
                )

    def _print_report_summary(self, report: PolicyReport) -> None:
        if report.passed:
            status, color = "PASSED", "green"
        else:
            status, color = "FAILED", "red"

        lines = [
            f"Policy: {report.policy_name} {report.policy_version}",
            f"Dependencies: {report.total_dependencies} "
            f"({report.evaluated_dependencies} evaluated, "
            f"{len(report.exempted_dependencies)} exempted)",
            f"Errors: {report.error_count}  Warnings: {report.warning_count}  "
            f"Info: {report.info_count}",
        ]
        if report.license_distribution:
            distribution = ", ".join(
                f"{category.display_name}: {count}"
                for category, count in sorted(
                    report.license_distribution.items(), key=lambda kv: kv[0].value
                )
            )
            lines.append(f"Licenses: {distribution}")
        lines.extend(["", f"Status: [{color}]{status}[/{color}]"])

        self._console.print(
            Panel("\n".join(lines), title="[bold]POLICY REPORT[/bold]", border_style=color)
        )
        self._console.print("")

    def _print_disclaimer(self) -> None:
        panel = Panel(
            LEGAL_DISCLAIMER_SHORT,
            title="[bold yellow]NOT LEGAL ADVICE[/bold yellow]",
            border_style="yellow",
        )
        self._console.print(panel)
        self._console.print("")

    def format_changes(self, changes: IncrementalChanges) -> None:
        """Display the difference between two scans."""
        if not changes.has_changes:
            self._console.print(
                f"[green]No changes[/green] ({len(changes.unchanged)} unchanged)"
            )
            return

        table = Table(title="Dependency Changes")
        table.add_column("Change", no_wrap=True)
        table.add_column("Dependency", style="cyan")
        table.add_column("Version")
        table.add_column("License", style="green")

        for change in [*changes.added, *changes.updated, *changes.removed]:
            version = _arrow(change.previous_version, change.current_version)
            license_text = _arrow(change.previous_license, change.current_license)
            table.add_row(change.change_type.value, change.dependency_name, version, license_text)

        self._console.print(table)
        self._console.print(
            f"\n[bold]Added:[/bold] {len(changes.added)}  "
            f"[bold]Updated:[/bold] {len(changes.updated)}  "
            f"[bold]Removed:[/bold] {len(changes.removed)}  "
            f"[bold]Unchanged:[/bold] {len(changes.unchanged)}"
        )

    def format_readiness(
        self, session: CurationSession, readiness: ApprovalReadiness
    ) -> None:
        """Display whether a session can be submitted for approval."""
        stats = session.statistics
        color = "green" if readiness.is_ready else "red"
        status = "READY" if readiness.is_ready else "BLOCKED"
        lines = [
            f"Session: {session.id} ({session.status.value})",
            f"Items: {stats.total}  Pending: {stats.pending}  Accepted: "
            f"{stats.accepted}  Rejected: {stats.rejected}  Modified: {stats.modified}",
            f"Completion: {stats.completion_percent}%",
            "",
            f"Status: [{color}]{status}[/{color}]",
        ]
        self._console.print(
            Panel("\n".join(lines), title="[bold]APPROVAL READINESS[/bold]", border_style=color)
        )
        for blocker in readiness.blockers:
            self._console.print(f"  - [red]{blocker.type.value}[/red]: {blocker.message}")
            for dependency_id in blocker.affected_items:
                self._console.print(f"      {dependency_id}")

    def format_template_result(self, result: TemplateApplicationResult) -> None:
        verb = "would match" if result.dry_run else "applied to"
        self._console.print(
            f"Template [bold]{result.template_name}[/bold] {verb} "
            f"{result.matched_count} item(s)"
        )
        for dependency_id in result.matched_items:
            self._console.print(f"  - {dependency_id}")


def _arrow(previous: Optional[str], current: Optional[str]) -> str:
    if previous is None:
        return current or ""
    if current is None or previous == current:
        return previous
    return f"{previous} -> {current}"
