"""
Contract Fuzzer Engine.
Orchestrates unit execution, cancellation and the run summary.
"""

import logging
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import nullcontext
from typing import Iterable, Optional

from contractfuzz.config import EngineConfig
from contractfuzz.fuzzer.context import ContractContext
from contractfuzz.fuzzer.executor import Executor, Reporter, Transport
from contractfuzz.models import FuzzingUnit, RunSummary, Verdict, VerdictStatus
from contractfuzz.reporters.collector import VerdictCollector
from contractfuzz.ui import console, print_section, print_summary, get_progress

logger = logging.getLogger(__name__)


class FuzzEngine:
    """Orchestrates the fuzzing campaign."""

    def __init__(self, transport: Transport, context: Optional[ContractContext] = None, config: Optional[EngineConfig] = None, reporter: Optional[Reporter] = None, show_progress: bool = True, target: str = ""):
        self.transport = transport
        self.config = config or EngineConfig()
        self.context = context or ContractContext(
            max_depth=self.config.max_depth, strict_types=self.config.strict_types
        )
        self.reporter = reporter
        self.show_progress = show_progress
        self.target = target
        self._cancel = threading.Event()

    def cancel(self):
        """Stop before the next unit. In-flight requests still complete to a verdict."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def run(self, units: Iterable[FuzzingUnit]) -> RunSummary:
        """Run all units and return the summary, verdicts in unit order."""
        self._cancel.clear()
        units = [unit.model_copy(update={"unit_id": i}) for i, unit in enumerate(units, start=1)]
        summary = RunSummary(run_id=uuid.uuid4().hex[:12], target=self.target)

        # Each run collects its own verdicts; unit ids restart at 1.
        collector = VerdictCollector(on_verdict=self.reporter.report if self.reporter else None)
        executor = Executor(self.transport, collector, self.context, timeout=self.config.timeout)

        if self.show_progress:
            print_section("Fuzzing", "🔥")
            if self.target:
                console.print(f"  [accent]Target:[/accent] {self.target}")
            console.print(f"  [accent]Units:[/accent] {len(units)}")
            console.print()

        with get_progress() if self.show_progress else nullcontext() as progress:
            task = progress.add_task("Fuzzing...", total=len(units)) if progress else None

            def advance():
                if progress:
                    progress.advance(task)

            if self.config.concurrency <= 1:
                for unit in units:
                    if self.cancelled:
                        break
                    self._run_unit(executor, unit)
                    advance()
            else:
                with ThreadPoolExecutor(max_workers=self.config.concurrency) as pool:
                    futures = [pool.submit(self._run_unit, executor, unit) for unit in units]
                    try:
                        for future in as_completed(futures):
                            future.result()
                            advance()
                    except KeyboardInterrupt:
                        # queued units see the flag and return before the pool drains
                        self.cancel()
                        raise

        summary.verdicts = sorted(collector.verdicts, key=lambda v: (v.unit_id, v.location))
        summary.cancelled = self.cancelled
        summary.mark_complete()

        if self.cancelled:
            logger.warning("Run cancelled after %d verdict(s)", summary.total_count)
        if self.show_progress:
            print_summary(
                summary.total_count, summary.pass_count, summary.fail_count,
                summary.error_count, summary.warn_count, summary.skipped_count,
            )
        return summary

    def _run_unit(self, executor: Executor, unit: FuzzingUnit) -> list[Verdict]:
        """Run one unit; nothing it raises may stop the rest of the run."""
        if self.cancelled:
            return []
        try:
            return executor.execute(unit)
        except Exception as e:
            logger.exception("Unit %d (%s) failed unexpectedly", unit.unit_id, unit.fuzzer)
            verdict = Executor.verdict_for(
                unit, VerdictStatus.ERROR,
                diagnostic=f"Unexpected error: {e}", cause=repr(e),
            )
            executor.reporter.report(verdict)
            return [verdict]
