# Analysis engine: scan text into a SourceUnit, run the active rules, then merge,
# order and deduplicate their findings into diagnostics.

from __future__ import annotations

import hashlib
import logging
import threading
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

from cxxlint.config import RuleConfig, build_default_registry
from cxxlint.context import SourceUnit, create_source_unit
from cxxlint.findings.models import Diagnostic, Finding
from cxxlint.lexer import ScanError
from cxxlint.rules.registry import RegisteredRule, RuleRegistry

logger = logging.getLogger(__name__)

SourceInput = Union[Mapping[Path, str], Iterable[tuple[Path, str]]]


class AnalysisError(Exception):
    """Base class for failures that abort the analysis of one unit."""


class ScanFailure(AnalysisError):
    """The unit could not be tokenized; wraps the underlying ScanError."""

    def __init__(self, scan_error: ScanError, path: Optional[Path] = None) -> None:
        where = f"{path}: " if path is not None else ""
        super().__init__(f"{where}scan failed at {scan_error}")
        self.scan_error = scan_error
        self.path = path


class AnalysisCancelled(AnalysisError):
    """The cancel signal was set before every rule had run."""


@dataclass
class FileResult:
    """Outcome for one unit of a multi-file run: diagnostics, or the error that stopped it."""

    path: Path
    diagnostics: list[Diagnostic] = field(default_factory=list)
    error: Optional[AnalysisError] = None
    line_count: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


class AnalysisEngine:
    """
    Runs a registry's rules over source text.

    Rules are independent and side-effect free, so with max_workers > 1 they
    run on a thread pool; the final order is the same either way. With
    cache_size > 0 results are remembered per (content hash, configuration).
    """

    def __init__(
        self,
        registry: Optional[RuleRegistry] = None,
        *,
        max_workers: Optional[int] = None,
        cache_size: int = 0,
    ) -> None:
        self.registry = registry if registry is not None else build_default_registry()
        self.max_workers = max_workers
        self.cache_size = cache_size
        self._cache: OrderedDict[tuple, tuple[Diagnostic, ...]] = OrderedDict()
        self._cache_lock = threading.Lock()

    def analyze(
        self,
        text: str,
        config: Optional[RuleConfig] = None,
        *,
        path: Optional[Path] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> list[Diagnostic]:
        """
        Analyze one unit of source text.

        Returns diagnostics ordered by (line, column, rule id) with exact
        (rule id, line, column) repeats removed; an empty list if nothing fired.

        Raises:
            ScanFailure: if the text cannot be tokenized (no diagnostics at all).
            AnalysisCancelled: if cancel_event is set before all rules ran.
        """
        config = config if config is not None else RuleConfig()
        key = self._cache_key(text, config, path)
        cached = self._cache_get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", path if path is not None else "<text>")
            return list(cached)

        try:
            unit = create_source_unit(text, path=path)
        except ScanError as e:
            logger.warning("Scan failed for %s: %s", path if path is not None else "<text>", e)
            raise ScanFailure(e, path=path) from e

        rules = self.registry.active_rules(config)
        findings = self._run_rules(rules, unit, cancel_event)
        diagnostics = self._finalize(findings, unit, config)
        logger.info(
            "Analyzed %s: %d rule(s), %d diagnostic(s)",
            path if path is not None else "<text>",
            len(rules),
            len(diagnostics),
        )
        self._cache_put(key, diagnostics)
        return diagnostics

    def analyze_many(
        self,
        sources: SourceInput,
        config: Optional[RuleConfig] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> list[FileResult]:
        """
        Analyze several units independently, in input order.

        A scan failure is recorded on that unit's FileResult and the run moves on.
        On cancellation the unit in flight is discarded and the results finished
        so far are returned.
        """
        items = sources.items() if isinstance(sources, Mapping) else sources
        results: list[FileResult] = []
        for path, text in items:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Analysis cancelled before %s", path)
                break
            line_count = len(text.splitlines())
            try:
                diagnostics = self.analyze(text, config, path=path, cancel_event=cancel_event)
            except AnalysisCancelled:
                logger.info("Analysis cancelled while processing %s; partial results discarded", path)
                break
            except ScanFailure as e:
                results.append(FileResult(path=path, error=e, line_count=line_count))
                continue
            results.append(FileResult(path=path, diagnostics=diagnostics, line_count=line_count))
        return results

    # -- internals ----------------------------------------------------------

    def _run_rules(
        self,
        rules: list[RegisteredRule],
        unit: SourceUnit,
        cancel_event: Optional[threading.Event],
    ) -> list[Finding]:
        if self.max_workers is not None and self.max_workers > 1 and len(rules) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as ex:
                futures = [ex.submit(self._run_one, rule, unit, cancel_event) for rule in rules]
                per_rule = [f.result() for f in futures]
        else:
            per_rule = [self._run_one(rule, unit, cancel_event) for rule in rules]

        if any(result is None for result in per_rule):
            raise AnalysisCancelled("analysis cancelled before all rules ran")

        findings: list[Finding] = []
        for result in per_rule:
            findings.extend(result)
        return findings

    def _run_one(
        self,
        rule: RegisteredRule,
        unit: SourceUnit,
        cancel_event: Optional[threading.Event],
    ) -> Optional[list[Finding]]:
        """Run one rule; None means the cancel signal was seen first."""
        if cancel_event is not None and cancel_event.is_set():
            return None
        try:
            return rule.run(unit)
        except Exception as exc:
            # A broken rule loses its own findings, never the whole analysis.
            logger.exception("Rule %s failed on %s: %s", rule.id, unit.path or "<text>", exc)
            return []

    def _finalize(
        self,
        findings: list[Finding],
        unit: SourceUnit,
        config: RuleConfig,
    ) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        seen: set[tuple[str, int, int]] = set()
        for finding in sorted(findings, key=Finding.sort_key):
            if not unit.contains_position(finding.line, finding.column):
                logger.warning(
                    "Dropping %s finding at %d:%d outside the unit",
                    finding.rule_id,
                    finding.line,
                    finding.column,
                )
                continue
            key = (finding.rule_id, finding.line, finding.column)
            if key in seen:
                continue
            seen.add(key)
            entry = self.registry.get(finding.rule_id)
            diagnostics.append(
                Diagnostic.from_finding(
                    finding,
                    severity=config.severity_for(finding.rule_id, finding.severity),
                    suggestion=entry.descriptor.suggestion if entry is not None else None,
                    path=unit.path,
                )
            )
        return diagnostics

    def _cache_key(self, text: str, config: RuleConfig, path: Optional[Path]) -> Optional[tuple]:
        if self.cache_size <= 0:
            return None
        digest = hashlib.sha256(text.encode("utf-8", errors="surrogatepass")).hexdigest()
        return digest, config.fingerprint(), str(path) if path is not None else None

    def _cache_get(self, key: Optional[tuple]) -> Optional[tuple[Diagnostic, ...]]:
        if key is None:
            return None
        with self._cache_lock:
            hit = self._cache.get(key)
            if hit is not None:
                self._cache.move_to_end(key)
            return hit

    def _cache_put(self, key: Optional[tuple], diagnostics: list[Diagnostic]) -> None:
        if key is None:
            return
        with self._cache_lock:
            self._cache[key] = tuple(diagnostics)
            self._cache.move_to_end(key)
            while len(self._cache) > self.cache_size:
                self._cache.popitem(last=False)


def analyze(text: str, config: Optional[RuleConfig] = None) -> list[Diagnostic]:
    """Analyze text with a freshly built default registry."""
    return AnalysisEngine(build_default_registry()).analyze(text, config)
