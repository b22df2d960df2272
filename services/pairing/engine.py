"""
PairwiseMetricEngine - Enumerates same-collision pairs and evaluates a metric.

Single responsibility: apply a combination policy to group-restricted record
slices and compute one scalar per pair.
"""
from typing import Callable, Hashable, Iterator, Optional, Sequence

from domain.decisions import PairMetric
from .policy import PairCombinationPolicy


class PairwiseMetricEngine:
    """
    Evaluates a pair metric over the pairs selected by a combination policy.

    The engine holds no per-group state; every call works on the slices it is
    given.
    """

    def __init__(self, metric: Callable, policy: PairCombinationPolicy):
        """
        Initialize engine.

        Args:
            metric: Pure function ``metric(first, second) -> float``
            policy: Which pairs to enumerate
        """
        self.metric = metric
        self.policy = policy

    def iter_pairs(self, first: Sequence, second: Optional[Sequence] = None) -> Iterator[tuple]:
        return self.policy.pairs(first, second)

    def count_pairs(self, first: Sequence, second: Optional[Sequence] = None) -> int:
        return self.policy.count(first, second)

    def compute(self, first: Sequence, second: Optional[Sequence] = None) -> list[float]:
        """Metric value for every pair, in enumeration order."""
        return [self.metric(a, b) for a, b in self.iter_pairs(first, second)]

    def iter_metrics(
        self,
        group_key: Hashable,
        first: Sequence,
        second: Optional[Sequence] = None,
        label: str = "pair",
    ) -> Iterator[PairMetric]:
        """Full pair set of one group as tagged ``PairMetric`` values."""
        for a, b in self.iter_pairs(first, second):
            yield PairMetric(group_key=group_key, value=self.metric(a, b), label=label)

    def first_exceeding(
        self,
        threshold: float,
        first: Sequence,
        second: Optional[Sequence] = None,
    ) -> Optional[tuple[tuple, float]]:
        """
        Find the first pair whose metric is above ``threshold``.

        Stops enumerating as soon as one is found.

        Returns:
            ``((a, b), value)`` or None if no pair qualifies
        """
        for a, b in self.iter_pairs(first, second):
            value = self.metric(a, b)
            if value > threshold:
                return (a, b), value
        return None

    def any_with(self, record, others: Sequence, threshold: float) -> bool:
        """
        Check ``record`` against records already seen in the same group.

        Feeding each record of a group through this, against the records
        before it, visits exactly the SELF_PAIRS set.
        """
        return any(self.metric(other, record) > threshold for other in others)
