"""
Pair combination policies.

SELF_PAIRS draws both members from one partition, each unordered pair once.
CROSS_PAIRS takes one member from each of two partitions, all combinations.
"""
import itertools
from enum import Enum
from typing import Iterator, Optional, Sequence


class PairCombinationPolicy(Enum):
    SELF_PAIRS = "self"
    CROSS_PAIRS = "cross"

    @classmethod
    def from_name(cls, name: str) -> 'PairCombinationPolicy':
        """Resolve ``"self"``/``"cross"`` (or the member name) to a policy."""
        for policy in cls:
            if name in (policy.value, policy.name, policy.name.lower()):
                return policy
        raise ValueError(f"Unknown combination policy: {name!r}")

    def pairs(self, first: Sequence, second: Optional[Sequence] = None) -> Iterator[tuple]:
        if self is PairCombinationPolicy.SELF_PAIRS:
            if second is not None and second is not first:
                raise ValueError("SELF_PAIRS takes a single partition")
            return itertools.combinations(first, 2)

        if second is None:
            raise ValueError("CROSS_PAIRS requires two partitions")
        return itertools.product(first, second)

    def count(self, first: Sequence, second: Optional[Sequence] = None) -> int:
        """Number of pairs ``pairs`` yields for these partitions."""
        if self is PairCombinationPolicy.SELF_PAIRS:
            n = len(first)
            return n * (n - 1) // 2
        if second is None:
            raise ValueError("CROSS_PAIRS requires two partitions")
        return len(first) * len(second)
