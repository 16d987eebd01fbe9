"""CLI entry point for license-curator."""

from __future__ import annotations

import io
import json
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

import click
from pydantic import BaseModel
from rich.console import Console

from license_curator import __version__
from license_curator.analysis.categorizer import category_index
from license_curator.analysis.policy import evaluate as evaluate_policy
from license_curator.config import (
    load_policy,
    load_scan_file,
    load_session_file,
    load_templates_file,
    save_templates_file,
)
from license_curator.constants import EXIT_ERROR, EXIT_ISSUES, EXIT_SUCCESS
from license_curator.curation.incremental import diff as diff_scans
from license_curator.curation.session import (
    apply_template,
    compute_readiness,
    start_session,
)
from license_curator.exceptions import (
    ConfigurationError,
    LicenseCuratorError,
    NotFoundError,
)
from license_curator.models.template import CurationTemplate
from license_curator.output import JsonFormatter, TerminalFormatter

# Module-level console for consistent output
_console = Console()
# Separate console for error output (writes to stderr)
_error_console = Console(stderr=True)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["terminal", "json"], case_sensitive=False),
    default="terminal",
    help="Output format (default: terminal).",
)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Logging level written to stderr (default: WARNING).",
)
def main(log_level: str) -> None:
    """License Curator - Evaluate license policies and curate decisions.

    Evaluate scanned dependencies against a license policy, compare scans
    and prepare curation sessions for four-eyes approval.

    \b
    Examples:
        license-curator evaluate scan.json
        license-curator evaluate scan.json --policy policy.yaml --explain
        license-curator diff old-scan.json new-scan.json
        license-curator start-session scan.json --curator alice -o session.json
        license-curator readiness session.json
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=_LOG_FORMAT,
        stream=sys.stderr,
    )


@main.command()
@click.argument("scan_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--policy",
    "-p",
    "policy_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to policy file (default: .license-policy.yaml or built-in policy).",
)
@_format_option
@click.option(
    "--explain",
    "explain_flag",
    is_flag=True,
    default=False,
    help="Attach explanations and resolution suggestions to violations.",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write report to file instead of stdout.",
)
def evaluate(
    scan_file: str,
    policy_path: str | None,
    output_format: str,
    explain_flag: bool,
    output_path: str | None,
) -> None:
    """Evaluate scanned dependencies against a license policy.

    Exits with 0 when the policy passed, 1 when it failed and 2 on errors.

    \b
    Examples:
        license-curator evaluate scan.json
        license-curator evaluate scan.json --format json -o report.json
    """
    format_value = output_format.lower()
    try:
        policy = load_policy(policy_path)
        dependencies = load_scan_file(Path(scan_file))
        report = evaluate_policy(
            dependencies, policy, explain_violations=explain_flag
        )
        _emit(
            report,
            "report",
            format_value,
            output_path,
            lambda formatter: formatter.format_report(report),
        )
        sys.exit(EXIT_SUCCESS if report.passed else EXIT_ISSUES)

    except LicenseCuratorError as e:
        _display_error(e, format_value)
        sys.exit(EXIT_ERROR)


@main.command()
@click.argument("previous_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("current_file", type=click.Path(exists=True, dir_okay=False))
@_format_option
def diff(previous_file: str, current_file: str, output_format: str) -> None:
    """Show dependencies added, updated or removed between two scans.

    \b
    Examples:
        license-curator diff old-scan.json new-scan.json
        license-curator diff old-scan.json new-scan.json --format json
    """
    format_value = output_format.lower()
    try:
        changes = diff_scans(
            load_scan_file(Path(previous_file)), load_scan_file(Path(current_file))
        )
        _emit(
            changes,
            "changes",
            format_value,
            None,
            lambda formatter: formatter.format_changes(changes),
        )
        sys.exit(EXIT_SUCCESS)

    except LicenseCuratorError as e:
        _display_error(e, format_value)
        sys.exit(EXIT_ERROR)


@main.command("start-session")
@click.argument("scan_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--curator", "curator_id", required=True, help="Curator id.")
@click.option(
    "--policy",
    "-p",
    "policy_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to policy file (default: .license-policy.yaml or built-in policy).",
)
@click.option(
    "--scan-id",
    default=None,
    help="Scan id recorded in the session (default: scan file name).",
)
@click.option(
    "--auto-accept",
    is_flag=True,
    default=False,
    help="Accept high-confidence AI suggestions on low-priority items.",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    required=True,
    help="File the new session is written to.",
)
def start_session_command(
    scan_file: str,
    curator_id: str,
    policy_path: str | None,
    scan_id: str | None,
    auto_accept: bool,
    output_path: str,
) -> None:
    """Evaluate a scan and start a curation session for it.

    \b
    Examples:
        license-curator start-session scan.json --curator alice -o session.json
    """
    try:
        policy = load_policy(policy_path)
        dependencies = load_scan_file(Path(scan_file))
        report = evaluate_policy(dependencies, policy)
        session = start_session(
            scan_id or Path(scan_file).stem,
            dependencies,
            curator_id,
            report=report,
            settings=policy.settings,
            auto_accept=auto_accept,
            categories=category_index(policy),
        )
        _write_output_to_file(_to_json(session), output_path)
        stats = session.statistics
        _console.print(
            f"Session [bold]{session.id}[/bold] started with {stats.total} item(s), "
            f"{stats.pending} pending"
        )
        sys.exit(EXIT_SUCCESS)

    except LicenseCuratorError as e:
        _display_error(e, "terminal")
        sys.exit(EXIT_ERROR)


@main.command("apply-template")
@click.argument("session_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("templates_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--template", "template_id", required=True, help="Template id to apply.")
@click.option("--actor", "actor_id", required=True, help="Who applies the template.")
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Only list matching items; nothing is written.",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the updated session here (default: overwrite SESSION_FILE).",
)
def apply_template_command(
    session_file: str,
    templates_file: str,
    template_id: str,
    actor_id: str,
    dry_run: bool,
    output_path: str | None,
) -> None:
    """Apply a curation template to a stored session.

    A real run also records the template's new usage count in
    TEMPLATES_FILE.

    \b
    Examples:
        license-curator apply-template session.json templates.yaml \\
            --template accept-mit --actor alice --dry-run
    """
    try:
        session = load_session_file(Path(session_file))
        templates = load_templates_file(Path(templates_file))
        template = _find_template(templates, template_id)

        application = apply_template(session, template, actor_id, dry_run=dry_run)
        TerminalFormatter(_console).format_template_result(application.result)

        if not dry_run:
            _write_output_to_file(
                _to_json(application.session), output_path or session_file
            )
            save_templates_file(
                Path(templates_file),
                [
                    application.template if t.id == template.id else t
                    for t in templates
                ],
            )
        sys.exit(EXIT_SUCCESS)

    except LicenseCuratorError as e:
        _display_error(e, "terminal")
        sys.exit(EXIT_ERROR)


@main.command()
@click.argument("session_file", type=click.Path(exists=True, dir_okay=False))
@_format_option
def readiness(session_file: str, output_format: str) -> None:
    """Check whether a curation session can be submitted for approval.

    Exits with 0 when the session is ready, 1 when it is blocked and 2 on
    errors.
    """
    format_value = output_format.lower()
    try:
        session = load_session_file(Path(session_file))
        result = compute_readiness(session)
        _emit(
            result,
            "readiness",
            format_value,
            None,
            lambda formatter: formatter.format_readiness(session, result),
        )
        sys.exit(EXIT_SUCCESS if result.is_ready else EXIT_ISSUES)

    except LicenseCuratorError as e:
        _display_error(e, format_value)
        sys.exit(EXIT_ERROR)


def _find_template(
    templates: list[CurationTemplate], template_id: str
) -> CurationTemplate:
    for template in templates:
        if template.id == template_id:
            return template
    raise NotFoundError(f"Template '{template_id}' not found")


def _to_json(model: BaseModel) -> str:
    return json.dumps(model.model_dump(mode="json"), indent=2)


def _emit(
    payload: BaseModel,
    kind: str,
    format_type: str,
    output_path: Optional[str],
    render: Callable[[TerminalFormatter], None],
) -> None:
    """Display a result as JSON or through the terminal formatter.

    Args:
        payload: The model to display.
        kind: Section name used in JSON output.
        format_type: "terminal" or "json".
        output_path: Optional file to write to instead of stdout.
        render: Draws the payload with a TerminalFormatter.
    """
    if format_type == "json":
        content = JsonFormatter().format(kind, payload)
        if output_path:
            _write_output_to_file(content, output_path)
        else:
            click.echo(content)
        return

    if output_path:
        buffer = io.StringIO()
        render(TerminalFormatter(Console(file=buffer, width=120)))
        _write_output_to_file(buffer.getvalue(), output_path)
    else:
        render(TerminalFormatter(_console))


def _write_output_to_file(content: str, path: str) -> None:
    """Write content to file.

    Args:
        content: The content to write.
        path: The file path to write to.

    Raises:
        ConfigurationError: If file cannot be written.
    """
    file_path = Path(path)

    try:
        if file_path.exists():
            _console.print(
                f"[yellow]Warning: Overwriting existing file: {path}[/yellow]"
            )

        file_path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot write to file '{path}': {e}") from e

    _console.print(f"[green]Written to {path}[/green]")


def _display_error(error: LicenseCuratorError, format_type: str) -> None:
    """Display error message to user.

    All errors are written to stderr for consistent CI/CD behavior.

    Args:
        error: The exception that occurred.
        format_type: Output format type for styling.
    """
    error_type = type(error).__name__
    message = f"Error: {error_type}: {error}"

    if format_type == "terminal":
        _error_console.print(f"[red bold]{message}[/red bold]")
    else:
        click.echo(message, err=True)


if __name__ == "__main__":
    main()
