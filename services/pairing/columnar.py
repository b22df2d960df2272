"""
Columnar pair metrics over awkward arrays.

Events are jagged arrays: one list of records per collision. Pairs never
cross collision boundaries because combinations are taken along axis 1.
"""
from typing import Optional, Sequence

import awkward as ak
import numpy as np
import vector

from .policy import PairCombinationPolicy

vector.register_awkward()


def group_records(records: Sequence, fields: Sequence[str], key: str = "group_key") -> ak.Array:
    """
    Build a jagged array from a stream sorted by ``key``.

    Args:
        records: Record objects in stream order
        fields: Attributes to copy into the array
        key: Attribute holding the collision id

    Returns:
        Array of shape (n_groups, var) with the requested fields
    """
    if len(records) == 0:
        return ak.Array([])

    columns = {name: np.asarray([getattr(r, name) for r in records]) for name in fields}
    keys = [getattr(r, key) for r in records]

    counts = []
    for index, group_key in enumerate(keys):
        if index == 0 or group_key != keys[index - 1]:
            counts.append(0)
        counts[-1] += 1

    flat = ak.zip(columns)
    return ak.unflatten(flat, counts)


def make_pairs(
    first: ak.Array,
    policy: PairCombinationPolicy,
    second: Optional[ak.Array] = None,
) -> ak.Array:
    """Per-collision pairs as records with ``first``/``second`` fields."""
    if policy is PairCombinationPolicy.SELF_PAIRS:
        return ak.combinations(first, 2, axis=1, fields=["first", "second"])
    if second is None:
        raise ValueError("CROSS_PAIRS requires two partitions")
    if len(first) != len(second):
        raise ValueError(
            f"Partitions must cover the same collisions, got {len(first)} and {len(second)}"
        )
    return ak.cartesian({"first": first, "second": second}, axis=1)


def pair_masses(
    clusters: ak.Array,
    policy: PairCombinationPolicy = PairCombinationPolicy.SELF_PAIRS,
    second: Optional[ak.Array] = None,
) -> ak.Array:
    """Invariant mass of every pair, clamped at zero, per collision."""
    pairs = make_pairs(clusters, policy, second)
    e = pairs.first.e + pairs.second.e
    px = pairs.first.px + pairs.second.px
    py = pairs.first.py + pairs.second.py
    pz = pairs.first.pz + pairs.second.pz
    return np.sqrt(np.maximum(e ** 2 - px ** 2 - py ** 2 - pz ** 2, 0.0))


def pair_kstar(
    particles: ak.Array,
    m0: float,
    m1: float,
    policy: PairCombinationPolicy = PairCombinationPolicy.SELF_PAIRS,
    second: Optional[ak.Array] = None,
) -> ak.Array:
    """k* of every pair per collision, using fixed mass hypotheses."""
    pairs = make_pairs(particles, policy, second)
    p0 = _to_momentum(pairs.first, m0)
    p1 = _to_momentum(pairs.second, m1)
    total = p0 + p1
    return 0.5 * (p0.boostCM_of_p4(total) - p1.boostCM_of_p4(total)).p


def _to_momentum(particles: ak.Array, mass: float) -> ak.Array:
    return vector.zip({
        "pt": particles.pt,
        "eta": particles.eta,
        "phi": particles.phi,
        "mass": ak.ones_like(particles.pt) * mass,
    })
