"""
Per-cluster trigger predicates.

Each predicate decides whether a single cluster satisfies one trigger
condition. Thresholds come from TriggerConfig.
"""
from domain.config import TriggerConfig
from domain.decisions import TriggerKind
from domain.errors import DataError
from domain.records import ClusterRecord


def validate_record(record: ClusterRecord) -> None:
    """Raise DataError for a cluster that cannot be evaluated."""
    if not record.is_finite():
        raise DataError(f"Non-finite values in cluster of group {record.group_key!r}: {record}")


def is_photon(record: ClusterRecord, config: TriggerConfig) -> bool:
    return record.e > config.energy_threshold


def is_electron(record: ClusterRecord, config: TriggerConfig) -> bool:
    """Cluster matched to a charged track and above the electron threshold."""
    return (
        record.track_dist < config.dist_sigma_threshold
        and record.e > config.secondary_energy_threshold
    )


def is_antineutron(record: ClusterRecord, config: TriggerConfig) -> bool:
    """
    Neutral, wide cluster passing the energy-dependent shape cut.

    Baseline cuts must all hold, then one of the two energy regimes must
    pass its shape cut.
    """
    baseline = (
        record.n_cells > config.min_cells
        and record.m02 > config.min_m02
        and record.e > config.min_shape_energy
        and record.track_dist > config.dist_sigma_threshold
    )
    low_regime = (
        record.e < config.regime_split_energy
        and record.m02 > config.low_regime_offset - record.m20
    )
    high_regime = (
        record.e > config.regime_split_energy
        and record.m02 > config.high_regime_offset - record.m20
    )
    return baseline and (low_regime or high_regime)


# Single-cluster triggers; the pair trigger needs the whole group
RECORD_PREDICATES = {
    TriggerKind.PHOTON: is_photon,
    TriggerKind.ELECTRON: is_electron,
    TriggerKind.ANTINEUTRON: is_antineutron,
}
