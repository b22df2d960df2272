"""
FilterExecutor - High-level run orchestrator.

Wires together the reader, the scanners and the statistics sink.

Architecture:
  The sorted input is split into batches at collision boundaries. Every
  batch is scanned by its own GroupScanner in a thread pool; decisions are
  re-assembled in batch order, so the output keeps input order. The run
  directory receives:
    - logs/decisions.json   one decision per collision
    - logs/stats.json       run statistics
    - histograms/<name>     ROOT histograms
    - plots/                optional plots
"""

import json
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from tqdm import tqdm

from domain.config import PipelineConfig
from domain.decisions import PairMetric, TriggerDecision
from domain.records import ClusterRecord, ParticleRecord
from domain.statistics import BatchStatistics, ScanStatistics
from services.analysis.histograms import HistogramSink
from services.analysis.statistics_plotter import StatisticsPlotter
from services.analysis.trigger_statistics import TriggerStatistics
from services.filtering.group_scanner import GroupScanner, PAIR_MASS_LABEL
from services.pairing.pair_analysis import PairAnalysis, SAME_EVENT_LABEL
from services.reading.record_reader import RecordReader
from utils.batching import split_at_group_boundaries
from utils.paths import prepare_run_dir


@dataclass
class RunResult:
    """Outputs of one executor run."""

    decisions: list[TriggerDecision] = field(default_factory=list)
    scan_stats: Optional[ScanStatistics] = None
    pairs_processed: int = 0
    created_files: list[str] = field(default_factory=list)

    def get_summary(self) -> dict:
        return {
            "collisions": len(self.decisions),
            "collisions_fired": sum(1 for d in self.decisions if d.any_fired),
            "pairs_processed": self.pairs_processed,
            "created_files": self.created_files,
        }


class FilterExecutor:
    """
    High-level filter executor.

    Responsible for:
    1. Reading the input records
    2. Splitting them into collision-aligned batches
    3. Scanning batches concurrently and collecting decisions in order
    4. Writing decisions, statistics, histograms and plots
    """

    def __init__(self, config: PipelineConfig, sink: Optional[HistogramSink] = None):
        self.config = config
        self.sink = sink if sink is not None else HistogramSink()
        self.trigger_statistics = TriggerStatistics()
        self.logger = logging.getLogger(self.__class__.__name__)

        TriggerStatistics.declare(self.sink)
        hc = config.histogram_config
        self.sink.add(PAIR_MASS_LABEL, hc.pair_mass_bins, *hc.pair_mass_range, title="Cluster pair mass")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, run_dir: str) -> RunResult:
        """Execute every enabled task and write outputs to ``run_dir``."""
        self.logger.info("Initializing filter run")
        paths = prepare_run_dir(run_dir)
        result = RunResult()

        if self.config.tasks.do_trigger_scan:
            clusters = RecordReader.read_clusters(self.config.input_path, self.config.clusters_tree)
            result.decisions, result.scan_stats = self.run_trigger_scan(clusters)
            result.created_files.append(self._save_decisions(paths["logs"], result.decisions))

        if self.config.tasks.do_pair_analysis:
            particles = RecordReader.read_particles(self.config.input_path, self.config.particles_tree)
            result.pairs_processed = self.run_pair_analysis(particles)

        hist_path = os.path.join(paths["histograms"], self.config.histogram_config.output_filename)
        result.created_files.append(str(self.sink.write_root(hist_path)))
        result.created_files.append(self._save_stats(paths["logs"], result))

        if self.config.tasks.do_plots:
            plotter = StatisticsPlotter(paths["plots"])
            scan_dict = result.scan_stats.to_dict() if result.scan_stats else None
            plots = plotter.create_all_plots(scan_dict, self.sink, [PAIR_MASS_LABEL, SAME_EVENT_LABEL])
            result.created_files.extend(str(p) for p in plots)

        self._log_results(result)
        return result

    def run_trigger_scan(
        self, records: list[ClusterRecord]
    ) -> tuple[list[TriggerDecision], ScanStatistics]:
        """
        Scan a sorted cluster stream with one scanner per batch.

        Returns:
            Decisions in input order and the aggregated statistics
        """
        start_time = datetime.now()
        batches = split_at_group_boundaries(
            records, self.config.total_batches,
            validate_order=self.config.trigger_config.validate_order,
        )

        results: list[Optional[tuple[list[TriggerDecision], BatchStatistics]]] = [None] * len(batches)
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            futures = {
                executor.submit(self._scan_batch, index, batch): index
                for index, batch in enumerate(batches)
            }
            with self._create_progress_bar(len(batches), "Scanning batches") as pbar:
                for future in as_completed(futures):
                    # a failed batch fails the run
                    results[futures[future]] = future.result()
                    if pbar is not None:
                        pbar.update(1)

        decisions: list[TriggerDecision] = []
        batch_stats: list[BatchStatistics] = []
        for batch_decisions, stats in results:
            decisions.extend(batch_decisions)
            batch_stats.append(stats)

        for decision in decisions:
            self.trigger_statistics.add(decision)
            TriggerStatistics.fill(self.sink, decision)

        scan_stats = ScanStatistics.from_batches(
            batch_stats,
            trigger_counts=self.trigger_statistics.to_dict(),
            start_time=start_time,
            end_time=datetime.now(),
        )
        self.logger.info(
            f"Trigger scan: {scan_stats.total_groups} collisions from "
            f"{scan_stats.total_records} clusters in {len(batches)} batch(es)"
        )
        return decisions, scan_stats

    def run_pair_analysis(self, particles: list[ParticleRecord]) -> int:
        """
        Run the pair analysis over a sorted particle stream.

        Returns:
            Number of pairs evaluated
        """
        hc = self.config.histogram_config
        batches = split_at_group_boundaries(particles, self.config.total_batches)

        def analyse(batch: list[ParticleRecord]) -> int:
            analysis = PairAnalysis(
                self.config.pairing_config,
                self.sink,
                kstar_binning=(hc.kstar_bins, *hc.kstar_range),
            )
            return analysis.process(batch)

        total_pairs = 0
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            futures = [executor.submit(analyse, batch) for batch in batches]
            with self._create_progress_bar(len(futures), "Pairing batches") as pbar:
                for future in as_completed(futures):
                    total_pairs += future.result()
                    if pbar is not None:
                        pbar.update(1)

        self.logger.info(f"Pair analysis: {total_pairs} pairs from {len(particles)} particles")
        return total_pairs

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _scan_batch(
        self, batch_index: int, records: list[ClusterRecord]
    ) -> tuple[list[TriggerDecision], BatchStatistics]:
        start = time.time()
        scanner = GroupScanner(self.config.trigger_config, on_pair_metric=self._fill_pair_metric)
        decisions = scanner.scan_all(records)

        stats = BatchStatistics(
            batch_index=batch_index,
            record_count=scanner.records_scanned,
            group_count=scanner.groups_emitted,
            malformed_count=scanner.records_malformed,
            processing_time_sec=time.time() - start,
        )
        if scanner.bc_mismatches:
            self.logger.warning(
                f"Batch {batch_index}: {scanner.bc_mismatches} cluster(s) with a bunch crossing "
                f"different from their collision's first cluster"
            )
        return decisions, stats

    def _fill_pair_metric(self, metric: PairMetric) -> None:
        self.sink.fill(metric.label, metric.value)

    def _save_decisions(self, logs_dir: str, decisions: list[TriggerDecision]) -> str:
        decisions_path = os.path.join(logs_dir, "decisions.json")
        with open(decisions_path, "w") as f:
            json.dump([d.to_dict() for d in decisions], f, indent=2, default=str)
        self.logger.info(f"Saved {len(decisions)} decisions to: {decisions_path}")
        return decisions_path

    def _save_stats(self, logs_dir: str, result: RunResult) -> str:
        stats = {
            "summary": result.get_summary(),
            "histograms": self.sink.summary(),
        }
        if result.scan_stats:
            stats["scan"] = result.scan_stats.to_dict()

        stats_path = os.path.join(logs_dir, "stats.json")
        with open(stats_path, "w") as f:
            json.dump(stats, f, indent=2, default=str)
        self.logger.info(f"Saved run stats to: {stats_path}")
        return stats_path

    def _create_progress_bar(self, total: int, desc: str):
        if self.config.show_progress_bar:
            return tqdm(total=total, desc=desc, unit="batch", dynamic_ncols=True, mininterval=1)
        from contextlib import nullcontext
        return nullcontext()

    def _log_results(self, result: RunResult):
        summary = result.get_summary()
        self.logger.info("=" * 60)
        self.logger.info("RUN SUMMARY")
        self.logger.info("=" * 60)
        self.logger.info(f"Collisions: {summary['collisions']} ({summary['collisions_fired']} fired)")
        self.logger.info(f"Pairs processed: {summary['pairs_processed']}")
        for path in summary["created_files"]:
            self.logger.info(f"  - {path}")
