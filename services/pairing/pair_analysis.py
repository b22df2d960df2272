"""
PairAnalysis - Same-collision particle pair analysis.

Applies the collision vertex cut, partitions the particles of each accepted
collision into two species, fills QA histograms and the k* distribution of
same-event pairs.
"""
import logging
from typing import Callable, Hashable, Iterable, Optional, Sequence

from domain.config import PairingConfig
from domain.decisions import PairMetric
from domain.records import ParticleRecord
from services.analysis.histograms import HistogramSink
from services.filtering.boundary import iter_groups
from . import consts
from .engine import PairwiseMetricEngine
from .masses import get_mass
from .metrics import KStarMetric
from .partitions import passes_collision_selection, passes_selection, select_partition
from .policy import PairCombinationPolicy

SAME_EVENT_LABEL = "Pair/hSE"
ZVTX_LABEL = "Event/hZvtx"


class PairAnalysis:
    """
    Runs the pair analysis over a particle stream sorted by collision.

    Mass hypotheses are resolved once at construction, so an unknown PDG code
    fails the batch before any collision is processed.
    """

    def __init__(
        self,
        config: PairingConfig,
        sink: HistogramSink,
        kstar_binning: tuple[int, float, float] = (1000, 0.0, 5.0),
        on_pair_metric: Optional[Callable[[PairMetric], None]] = None,
        mass_lookup: Callable[[int], float] = get_mass,
    ):
        """
        Initialize analysis.

        Args:
            config: Partitions, selection and combination policy
            sink: Receives QA and pair histograms
            kstar_binning: ``(bins, low, high)`` of the k* histogram
            on_pair_metric: Called with every computed pair metric
            mass_lookup: PDG code to mass; raises ConfigurationError if unknown
        """
        self.config = config
        self.sink = sink
        self.on_pair_metric = on_pair_metric
        self.logger = logging.getLogger(self.__class__.__name__)

        self.policy = PairCombinationPolicy.from_name(config.combination_policy)
        m0 = mass_lookup(config.partition_one.pdg_code)
        m1 = m0 if config.is_same else mass_lookup(config.partition_two.pdg_code)
        self.engine = PairwiseMetricEngine(KStarMetric(m0, m1), self.policy)

        if config.is_same and config.partition_two != config.partition_one:
            self.logger.warning(
                "partition_two differs from partition_one but is ignored with "
                "combination_policy='self'; pairs are built from partition_one only"
            )

        self.groups_processed = 0
        self.groups_rejected = 0
        self.pairs_processed = 0
        self.particles_rejected = 0

        self._declare_histograms(kstar_binning)

    def _declare_histograms(self, kstar_binning: tuple[int, float, float]) -> None:
        self.sink.add(ZVTX_LABEL, *consts.ZVTX_BINNING, title="Primary vertex z")
        for prefix in self._qa_prefixes():
            for name, (bins, low, high) in consts.QA_BINNING.items():
                self.sink.add(f"{prefix}/{name}", bins, low, high)
        self.sink.add(SAME_EVENT_LABEL, *kstar_binning, title="k* same event")

    def _qa_prefixes(self) -> list[str]:
        # second species QA is identical to the first when both are the same
        if self.config.is_same:
            return ["Particle1"]
        return ["Particle1", "Particle2"]

    def process(self, particles: Iterable[ParticleRecord]) -> int:
        """
        Process every collision of a sorted particle stream.

        Returns:
            Number of pairs evaluated
        """
        start_pairs = self.pairs_processed
        for group_key, group in iter_groups(particles):
            self.process_group(group_key, group)

        pairs = self.pairs_processed - start_pairs
        self.logger.debug(f"Processed {self.groups_processed} collisions, {pairs} pairs")
        return pairs

    def process_group(self, group_key: Hashable, particles: Sequence[ParticleRecord]) -> list[PairMetric]:
        """
        Partition one collision, fill QA and same-event pair histograms.

        Collisions whose vertex z lies outside the selection are skipped
        entirely and produce no metrics.
        """
        if not particles:
            return []

        pos_z = particles[0].pos_z
        if not passes_collision_selection(pos_z, self.config.selection):
            self.groups_rejected += 1
            return []
        self.sink.fill(ZVTX_LABEL, pos_z)

        accepted = []
        for particle in particles:
            if particle.is_finite() and passes_selection(particle, self.config.selection):
                accepted.append(particle)
            else:
                self.particles_rejected += 1

        parts_one = select_partition(accepted, self.config.partition_one)
        self._fill_qa("Particle1", parts_one)

        if self.policy is PairCombinationPolicy.SELF_PAIRS:
            metrics = list(self.engine.iter_metrics(group_key, parts_one, label=SAME_EVENT_LABEL))
        else:
            parts_two = select_partition(accepted, self.config.partition_two)
            self._fill_qa("Particle2", parts_two)
            metrics = list(self.engine.iter_metrics(group_key, parts_one, parts_two, label=SAME_EVENT_LABEL))

        self.sink.fill_many(SAME_EVENT_LABEL, [m.value for m in metrics])
        if self.on_pair_metric is not None:
            for metric in metrics:
                self.on_pair_metric(metric)

        self.groups_processed += 1
        self.pairs_processed += len(metrics)
        return metrics

    def _fill_qa(self, prefix: str, particles: Sequence[ParticleRecord]) -> None:
        if not particles:
            return
        self.sink.fill_many(f"{prefix}/hPt", [p.pt for p in particles])
        self.sink.fill_many(f"{prefix}/hEta", [p.eta for p in particles])
        self.sink.fill_many(f"{prefix}/hPhi", [p.phi for p in particles])
