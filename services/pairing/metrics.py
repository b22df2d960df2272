"""
Pair metrics.

Pure functions of two records (and their mass hypotheses). No state is shared
between evaluations, so pairs can be evaluated in any order.
"""
import math

import vector

from domain.records import ClusterRecord, ParticleRecord


def invariant_mass(
    e0: float, px0: float, py0: float, pz0: float,
    e1: float, px1: float, py1: float, pz1: float,
) -> float:
    """
    Invariant mass of two four-momenta.

    A radicand pushed below zero by floating point cancellation is clamped
    to zero.
    """
    m2 = (e0 + e1) ** 2 - (px0 + px1) ** 2 - (py0 + py1) ** 2 - (pz0 + pz1) ** 2
    return math.sqrt(max(0.0, m2))


def cluster_pair_mass(first: ClusterRecord, second: ClusterRecord) -> float:
    return invariant_mass(*first.four_momentum, *second.four_momentum)


def kstar(first: ParticleRecord, m0: float, second: ParticleRecord, m1: float) -> float:
    """
    Relative momentum k* of a particle pair.

    Both particles are boosted into the pair rest frame and k* is half the
    magnitude of their momentum difference there.
    """
    p0 = vector.obj(pt=first.pt, eta=first.eta, phi=first.phi, mass=m0)
    p1 = vector.obj(pt=second.pt, eta=second.eta, phi=second.phi, mass=m1)
    pair = p0 + p1

    p0_cms = p0.boostCM_of_p4(pair)
    p1_cms = p1.boostCM_of_p4(pair)
    return 0.5 * (p0_cms - p1_cms).p


class KStarMetric:
    """k* with the two mass hypotheses bound, usable as an engine metric."""

    def __init__(self, m0: float, m1: float):
        if m0 < 0 or m1 < 0:
            raise ValueError(f"masses must be non-negative, got ({m0}, {m1})")
        self.m0 = m0
        self.m1 = m1

    def __call__(self, first: ParticleRecord, second: ParticleRecord) -> float:
        return kstar(first, self.m0, second, self.m1)

    def __repr__(self) -> str:
        return f"KStarMetric(m0={self.m0}, m1={self.m1})"
