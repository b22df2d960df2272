"""
GroupScanner - Single-pass trigger scan over a sorted cluster stream.

Drives the boundary detector, the accumulator and the decision emitter.
Pair metrics are handed to an optional callback instead of being stored.
"""
import logging
from typing import Callable, Iterable, Iterator, Optional

from domain.config import TriggerConfig
from domain.decisions import PairMetric, TriggerDecision
from domain.records import ClusterRecord
from services.pairing.engine import PairwiseMetricEngine
from services.pairing.metrics import cluster_pair_mass
from services.pairing.policy import PairCombinationPolicy
from .accumulator import GroupAccumulator
from .boundary import GroupBoundaryDetector
from .emitter import emit_decision

PAIR_MASS_LABEL = "Pair/hMass"


class GroupScanner:
    """
    Produces exactly one TriggerDecision per collision, in stream order.

    One scanner instance handles one stream at a time; independent streams
    need independent scanners.
    """

    def __init__(
        self,
        config: TriggerConfig,
        on_pair_metric: Optional[Callable[[PairMetric], None]] = None,
    ):
        """
        Initialize scanner.

        Args:
            config: Trigger thresholds and scan behavior
            on_pair_metric: Called with every same-group cluster pair mass
                when ``config.emit_pair_metrics`` is set
        """
        self.config = config
        self.on_pair_metric = on_pair_metric
        self.pair_engine = PairwiseMetricEngine(cluster_pair_mass, PairCombinationPolicy.SELF_PAIRS)
        self.logger = logging.getLogger(self.__class__.__name__)
        self._reset_counters()

    def scan(self, records: Iterable[ClusterRecord]) -> Iterator[TriggerDecision]:
        """
        Scan a cluster stream sorted by collision id.

        Args:
            records: Clusters in stream order

        Yields:
            One TriggerDecision per collision, the final collision included
        """
        self._reset_counters()
        detector = GroupBoundaryDetector(validate_order=self.config.validate_order)
        accumulator = GroupAccumulator(self.config, self.pair_engine)

        for record in records:
            if self.config.calo_type is not None and record.calo_type != self.config.calo_type:
                self.records_skipped += 1
                continue

            opens_stream = not detector.is_open
            if detector.observe(record.group_key):
                yield self._flush(accumulator)
                accumulator.reset(record.group_key)
            elif opens_stream:
                accumulator.reset(record.group_key)

            accumulator.add(record)
            self.records_scanned += 1

        if detector.is_open:
            yield self._flush(accumulator)
        detector.close()

        self.bc_mismatches = accumulator.bc_mismatches
        self.logger.debug(
            f"Scanned {self.records_scanned} clusters in {self.groups_emitted} groups "
            f"({self.records_skipped} skipped, {self.records_malformed} malformed)"
        )

    def scan_all(self, records: Iterable[ClusterRecord]) -> list[TriggerDecision]:
        return list(self.scan(records))

    def _flush(self, accumulator: GroupAccumulator) -> TriggerDecision:
        if self.config.emit_pair_metrics and self.on_pair_metric is not None:
            for metric in self.pair_engine.iter_metrics(
                accumulator.group_key, accumulator.records, label=PAIR_MASS_LABEL
            ):
                self.on_pair_metric(metric)

        decision = emit_decision(accumulator)
        self.groups_emitted += 1
        self.records_malformed += decision.n_malformed
        return decision

    def _reset_counters(self):
        self.records_scanned = 0
        self.records_skipped = 0
        self.records_malformed = 0
        self.groups_emitted = 0
        self.bc_mismatches = 0
