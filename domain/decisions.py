"""
Decision domain models.

Output values of the trigger scan and the pair-metric engine.
"""

from dataclasses import dataclass
from enum import IntEnum

from .records import GroupKey


class TriggerKind(IntEnum):
    """
    Trigger flags evaluated per collision.

    The integer value is the bit position in ``TriggerDecision.bitmask``.
    """

    PHOTON = 0
    ELECTRON = 1
    PAIR = 2
    ANTINEUTRON = 3

    def __str__(self) -> str:
        return self.name.lower()


N_TRIGGERS = len(TriggerKind)


@dataclass(frozen=True)
class TriggerDecision:
    """Final trigger flags for one collision."""

    group_key: GroupKey
    flags: tuple[bool, ...]
    n_records: int = 0
    n_malformed: int = 0

    def __post_init__(self):
        """Validate the decision."""
        if len(self.flags) != N_TRIGGERS:
            raise ValueError(f"flags must have {N_TRIGGERS} entries, got {len(self.flags)}")
        if self.n_records < 0:
            raise ValueError(f"n_records must be non-negative, got {self.n_records}")
        if not 0 <= self.n_malformed <= self.n_records:
            raise ValueError(
                f"n_malformed ({self.n_malformed}) must be between 0 and n_records ({self.n_records})"
            )

    def is_set(self, kind: TriggerKind) -> bool:
        return self.flags[kind]

    @property
    def bitmask(self) -> int:
        """Flags packed into an int, bit i set for ``TriggerKind(i)``."""
        return sum(1 << kind for kind in TriggerKind if self.flags[kind])

    @property
    def any_fired(self) -> bool:
        return any(self.flags)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "group_key": self.group_key,
            **{str(kind): self.flags[kind] for kind in TriggerKind},
            "n_records": self.n_records,
            "n_malformed": self.n_malformed,
        }


@dataclass(frozen=True)
class PairMetric:
    """A scalar computed from one pair of records in a collision."""

    group_key: GroupKey
    value: float
    label: str = "pair"
