"""Drive a size analysis run over every configured component.

A run resolves each component's files into variants, measures every variant, evaluates it against the
component's limits and the stored baseline, and finally rewrites the baseline and (when anything
exceeded its limits) the failure report, removing a stale one otherwise. Each file is measured once
per run however many variants contain it. Any fatal error aborts the run before the baseline is
touched, so the baseline is always written from a complete set of results.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from bundlesize.baseline import load_baseline, persist_baseline
from bundlesize.config import CompressionConfig, Config, ResolvedComponent
from bundlesize.file_sets import component_variants
from bundlesize.filesystem import FileSystem, LocalFileSystem
from bundlesize.report import remove_failure_report, write_failure_report
from bundlesize.sizes import FileSize, SizeCalculator
from bundlesize.thresholds import ComparisonResult, FailureRecord, Limits, evaluate, failure_for

_LOGGER = logging.getLogger(__name__)


@dataclass
class AnalysisRun:
    """Everything accumulated during one run. Results are keyed by result key, in evaluation order."""

    results: dict[str, ComparisonResult] = field(default_factory=dict)
    failures: list[FailureRecord] = field(default_factory=list)
    has_warnings: bool = False

    @property
    def passed(self) -> bool:
        return not self.has_warnings

    def record(self, results: list[ComparisonResult]) -> None:
        for result in results:
            if result.key in self.results:
                _LOGGER.warning("Result key %s was produced twice; keeping the later result", result.key)
            self.results[result.key] = result
            failure = failure_for(result)
            if failure:
                self.failures.append(failure)
            if result.has_warnings:
                self.has_warnings = True

    def baseline_sizes(self) -> dict[str, int]:
        return {key: result.size.raw_bytes for key, result in self.results.items()}


class BundleSizeAnalyser:
    def __init__(self, fs: FileSystem | None = None, calculator: SizeCalculator | None = None):
        self.fs = fs or LocalFileSystem()
        self.calculator = calculator or SizeCalculator(self.fs)

    def analyse_component(
        self,
        component: ResolvedComponent,
        baseline: Mapping[str, float],
        compression: CompressionConfig,
        measured: dict[str, FileSize] | None = None,
    ) -> list[ComparisonResult]:
        limits = Limits(max_size=component.max_size, warn_on_increase=component.warn_on_increase)
        if measured is None:
            measured = {}
        results = []
        for variant in component_variants(component, self.fs):
            size = self.calculator.calculate(variant.files, compression, measured)
            result = evaluate(size, variant.key, baseline, limits)
            _LOGGER.debug(
                "%s: %d files, %d bytes, %s%% change", variant.key, size.file_count, size.raw_bytes,
                result.percentage_increase,
            )
            results.append(result)
        return results

    def analyse(self, config: Config, update_baseline: bool = True) -> AnalysisRun:
        """Analyse every component in ``config``.

        Raises:
            BundleSizeError: On a configuration defect, a missing distribution folder or a codec failure.
            OSError: If a file cannot be read or the baseline cannot be written.
        """
        components = config.resolved_components()
        baseline = load_baseline(config.baseline_file)

        run = AnalysisRun()
        measured: dict[str, FileSize] = {}
        for component in components:
            _LOGGER.info("Analysing component %s", component.name)
            run.record(self.analyse_component(component, baseline, config.compression, measured))

        if update_baseline:
            persist_baseline(config.baseline_file, run.baseline_sizes())
        else:
            _LOGGER.info("Leaving baseline %s untouched", config.baseline_file)

        if run.has_warnings:
            write_failure_report(config.failure_report_file, run.failures)
        else:
            remove_failure_report(config.failure_report_file)
        return run
