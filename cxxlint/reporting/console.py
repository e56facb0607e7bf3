# Rich console output: diagnostics grouped per file, file scores and a run summary.

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from cxxlint.engine import FileResult
from cxxlint.findings.models import Diagnostic, Severity
from cxxlint.scoring import CodeScore, compute_score

# Severity → Rich style
SEVERITY_STYLE: dict[Severity, str] = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "bold yellow",
    Severity.INFO: "bold blue",
    Severity.STYLE: "dim",
}

RATING_STYLE: dict[str, str] = {
    "Excellent": "bold green",
    "Good": "green",
    "Fair": "yellow",
    "Poor": "red",
    "Critical": "bold red",
}

DEFAULT_STYLE = "bold white"


def _severity_style(severity: Severity) -> str:
    return SEVERITY_STYLE.get(severity, DEFAULT_STYLE)


def print_results(
    results: Sequence[FileResult],
    verbose: bool = False,
    show_score: bool = True,
    weights: Optional[Mapping[str, float]] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Print a multi-file run.

    Diagnostics are grouped by file in the order the engine produced them,
    colored by severity, with snippets when available. If verbose, the
    suggestion of each rule that fired is shown once per file. Files that
    could not be scanned are listed separately. A per-file summary table
    (with scores when show_score is set) and a totals panel close the report.
    """
    console = console or Console()

    if not results:
        console.print(
            Panel(
                "[yellow]No C++ source files to analyze.[/yellow]",
                title="cxxlint",
                border_style="yellow",
                box=box.ROUNDED,
            )
        )
        return

    for result in results:
        if result.ok and result.diagnostics:
            _print_file_diagnostics(result.path, result.diagnostics, console, verbose)

    failures = [r for r in results if not r.ok]
    if failures:
        _print_failures(failures, console)

    _print_file_summary_table(results, console, show_score, weights)
    _print_summary([d for r in results for d in r.diagnostics], len(failures), console)


def _print_file_diagnostics(
    path: Path,
    diagnostics: Sequence[Diagnostic],
    console: Console,
    verbose: bool,
) -> None:
    console.print()
    console.print(Panel(
        f"[bold cyan]{_shorten_path(path)}[/bold cyan]",
        box=box.SIMPLE_HEAD,
        border_style="blue",
        padding=(0, 1),
    ))

    table = Table(
        show_header=True,
        header_style="bold magenta",
        box=box.SIMPLE,
        padding=(0, 1),
        expand=False,
    )
    table.add_column("Line", justify="right", style="dim", width=5)
    table.add_column("Col", justify="right", style="dim", width=4)
    table.add_column("Severity", width=8)
    table.add_column("Rule", width=24)
    table.add_column("Message", style="white")

    for d in diagnostics:
        table.add_row(
            str(d.line),
            str(d.column),
            Text(d.severity.value.upper(), style=_severity_style(d.severity)),
            Text(f"[{d.rule_id}]", style="dim"),
            Text(d.message),
        )

    console.print(table)

    snippets = [d for d in diagnostics if d.location.snippet]
    if snippets:
        for d in snippets:
            console.print(f"  [dim]{d.line:>4} |[/dim] {escape(d.location.snippet)}", highlight=False)
        console.print()

    if verbose:
        seen_rules: set[str] = set()
        for d in diagnostics:
            if d.rule_id in seen_rules:
                continue
            seen_rules.add(d.rule_id)
            if d.suggestion:
                tag = escape(f"[{d.rule_id}]")
                console.print(f"  [dim]\\[Fix][/dim] {tag} {escape(d.suggestion)}", highlight=False)
        if seen_rules:
            console.print()


def _print_failures(failures: Sequence[FileResult], console: Console) -> None:
    table = Table(
        title="Scan Failures",
        show_header=True,
        header_style="bold red",
        box=box.ROUNDED,
        padding=(0, 1),
    )
    table.add_column("File", style="white")
    table.add_column("Error", style="red")
    for r in failures:
        table.add_row(_shorten_path(r.path), Text(str(r.error)))
    console.print()
    console.print(table)


def _shorten_path(path: str | Path) -> str:
    """Return the path relative to the working directory when it lies below it."""
    p = Path(path)
    try:
        return p.resolve().relative_to(Path.cwd().resolve()).as_posix()
    except ValueError:
        return p.as_posix()


def file_score(result: FileResult, weights: Optional[Mapping[str, float]] = None) -> CodeScore:
    return compute_score(result.diagnostics, result.line_count, weights)


def _print_file_summary_table(
    results: Sequence[FileResult],
    console: Console,
    show_score: bool,
    weights: Optional[Mapping[str, float]],
) -> None:
    """Print one row per analyzed file: status, diagnostic count and optional score."""
    table = Table(
        title="Files Summary",
        show_header=True,
        header_style="bold cyan",
        box=box.ROUNDED,
        padding=(0, 1),
    )
    table.add_column("File", style="white")
    table.add_column("Status", width=8)
    table.add_column("Issues", justify="right", width=6)
    if show_score:
        table.add_column("Score", justify="right", width=6)
        table.add_column("Rating", width=10)

    for r in results:
        if not r.ok:
            status = Text("FAILED", style="bold red")
        elif r.diagnostics:
            status = Text("ISSUES", style="bold yellow")
        else:
            status = Text("OK", style="bold green")
        row: list[str | Text] = [_shorten_path(r.path), status, str(len(r.diagnostics))]
        if show_score:
            if r.ok:
                score = file_score(r, weights)
                row += [
                    f"{score.overall_score:.1f}",
                    Text(score.rating, style=RATING_STYLE.get(score.rating, DEFAULT_STYLE)),
                ]
            else:
                row += ["-", Text("-", style="dim")]
        table.add_row(*row)

    console.print()
    console.print(Panel(table, border_style="cyan", box=box.ROUNDED))


def _print_summary(diagnostics: Sequence[Diagnostic], failed: int, console: Console) -> None:
    """Print a compact summary of diagnostics by severity."""
    by_severity: dict[Severity, int] = {}
    for d in diagnostics:
        by_severity[d.severity] = by_severity.get(d.severity, 0) + 1

    total = len(diagnostics)
    summary_parts = [f"[bold]{total} issue{'s' if total != 1 else ''}[/bold]"]
    for sev in Severity:
        if sev in by_severity:
            summary_parts.append(f"[{_severity_style(sev)}]{by_severity[sev]} {sev.value}[/]")
    if failed:
        summary_parts.append(f"[bold red]{failed} file{'s' if failed != 1 else ''} failed to scan[/]")

    if failed:
        border = "red"
    elif total:
        border = "yellow"
    else:
        border = "green"

    console.print()
    console.print(
        Panel(
            " | ".join(summary_parts),
            title="Summary",
            border_style=border,
            box=box.ROUNDED,
        )
    )
