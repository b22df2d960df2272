"""
Record domain models.

Immutable values produced by the record reader for one processing pass.
"""

import math
from dataclasses import dataclass
from typing import Hashable

GroupKey = Hashable


@dataclass(frozen=True)
class ClusterRecord:
    """A calorimeter cluster belonging to one collision."""

    e: float
    px: float
    py: float
    pz: float
    m02: float
    m20: float
    n_cells: int
    track_dist: float
    group_key: GroupKey
    calo_type: int = 0
    bc_id: int = 0

    def is_finite(self) -> bool:
        """Check that every kinematic and shape value is finite."""
        return all(
            math.isfinite(value)
            for value in (self.e, self.px, self.py, self.pz, self.m02, self.m20, self.track_dist)
        )

    @property
    def four_momentum(self) -> tuple[float, float, float, float]:
        return (self.e, self.px, self.py, self.pz)


@dataclass(frozen=True)
class ParticleRecord:
    """A reconstructed particle (track) belonging to one collision."""

    pt: float
    eta: float
    phi: float
    pdg_hypothesis: int
    selection_bits: int
    group_key: GroupKey
    pid_bits: int = 0
    particle_type: int = 0
    # primary vertex z of the owning collision, cm
    pos_z: float = 0.0

    def __post_init__(self):
        """Validate the particle record."""
        if self.selection_bits < 0:
            raise ValueError(f"selection_bits must be non-negative, got {self.selection_bits}")
        if self.pid_bits < 0:
            raise ValueError(f"pid_bits must be non-negative, got {self.pid_bits}")

    def is_finite(self) -> bool:
        """Check that every kinematic value is finite."""
        return all(math.isfinite(value) for value in (self.pt, self.eta, self.phi))
