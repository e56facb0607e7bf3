from __future__ import annotations

"""
Typer CLI entry point and orchestration of the analysis pipeline.

The CLI:
- Accepts a C++ file or a directory (sources, plus headers with --headers)
- Builds a RuleConfig from --enable / --disable / --severity
- Reads the files and runs AnalysisEngine.analyze_many over them
- Prints the results with the rich reporter

Exit status is 1 when any file failed to scan, 0 otherwise.
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from cxxlint.config import RuleConfig, build_default_registry, parse_severity_overrides
from cxxlint.context import load_sources
from cxxlint.engine import AnalysisEngine
from cxxlint.reporting.console import SEVERITY_STYLE, print_results
from cxxlint.traversal import find_source_files, is_source_file

logger = logging.getLogger(__name__)

app = typer.Typer(help="cxxlint - code-quality analyzer for C++ source files.")


def _collect_sources(target: Path, include_headers: bool) -> List[Path]:
    """
    Resolve a target path into a list of C++ files to analyze.

    - If target is a C++ source (or a header with include_headers), return [target]
    - If target is a directory, use traversal.find_source_files()
    - Otherwise, raise BadParameter.
    """
    if target.is_file():
        if not is_source_file(target, include_headers=include_headers):
            raise typer.BadParameter(f"Target file is not a C++ source file: {target}")
        return [target]

    if target.is_dir():
        files = find_source_files(target, include_headers=include_headers)
        if not files:
            logger.warning("No C++ source files found under %s", target)
        return files

    raise typer.BadParameter(f"Target path is neither a file nor a directory: {target}")


def _build_config(
    enable: Optional[List[str]],
    disable: Optional[List[str]],
    severity: Optional[List[str]],
) -> RuleConfig:
    try:
        overrides = parse_severity_overrides(severity or [])
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--severity") from e
    return RuleConfig(
        enabled_rules=frozenset(enable) if enable else None,
        disabled_rules=frozenset(disable or []),
        severity_overrides=overrides,
    )


@app.command()
def analyze(
    target: Path = typer.Argument(
        ...,
        exists=True,
        readable=True,
        resolve_path=True,
        help="C++ file or directory to analyze.",
    ),
    headers: bool = typer.Option(False, "--headers", help="Also analyze header files."),
    enable: Optional[List[str]] = typer.Option(
        None, "--enable", "-e", help="Run only these rule ids (repeatable)."
    ),
    disable: Optional[List[str]] = typer.Option(
        None, "--disable", "-d", help="Skip these rule ids (repeatable)."
    ),
    severity: Optional[List[str]] = typer.Option(
        None, "--severity", "-s", help="Override a rule's severity, as RULE=LEVEL (repeatable)."
    ),
    jobs: int = typer.Option(1, "--jobs", "-j", min=1, help="Worker threads per file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show remediation hints."),
    score: bool = typer.Option(True, "--score/--no-score", help="Show per-file quality scores."),
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level."),
) -> None:
    """
    Analyze a single C++ file or all C++ files under a directory.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = _build_config(enable, disable, severity)
    registry = build_default_registry()
    if not registry.active_rules(config):
        typer.echo("No rules are enabled in the current configuration.")
        raise typer.Exit(code=1)

    files = _collect_sources(target, headers)
    sources = load_sources(files)

    engine = AnalysisEngine(registry, max_workers=jobs)
    results = engine.analyze_many(sources, config)

    weights = {d.id: d.weight for d in registry.descriptors()}
    print_results(results, verbose=verbose, show_score=score, weights=weights)

    unreadable = len(files) - len(sources)
    if unreadable or any(not r.ok for r in results):
        raise typer.Exit(code=1)


@app.command()
def rules() -> None:
    """List the built-in rules with their default severity."""
    registry = build_default_registry()
    table = Table(title="Rules", header_style="bold cyan", box=box.ROUNDED)
    table.add_column("Id", style="white", no_wrap=True)
    table.add_column("Severity", width=8)
    table.add_column("Title")
    table.add_column("Always on", justify="center")
    for d in registry.descriptors():
        table.add_row(
            d.id,
            f"[{SEVERITY_STYLE[d.default_severity]}]{d.default_severity.value}[/]",
            d.title,
            "yes" if d.always_on else "",
        )
    Console().print(table)


def main() -> None:
    """Entry point for the `cxxlint` console script."""
    app()


if __name__ == "__main__":
    main()
