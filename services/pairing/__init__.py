"""
Pairing services.

Combination policies, pair metrics and the same-collision pair analysis.
"""

from .policy import PairCombinationPolicy
from .metrics import invariant_mass, cluster_pair_mass, kstar, KStarMetric
from .masses import get_mass
from .engine import PairwiseMetricEngine
from .partitions import passes_collision_selection, passes_selection, in_partition, select_partition
from .pair_analysis import PairAnalysis

__all__ = [
    "PairCombinationPolicy",
    "invariant_mass",
    "cluster_pair_mass",
    "kstar",
    "KStarMetric",
    "get_mass",
    "PairwiseMetricEngine",
    "passes_collision_selection",
    "passes_selection",
    "in_partition",
    "select_partition",
    "PairAnalysis",
]
