"""
Shared fixtures for the collision filter tests.
"""

import pytest

from domain.records import ClusterRecord, ParticleRecord


def _cluster(group_key=1, e=1.0, px=0.0, py=0.0, pz=0.0, m02=0.1, m20=0.1,
             n_cells=1, track_dist=10.0, calo_type=0, bc_id=0) -> ClusterRecord:
    return ClusterRecord(
        e=e, px=px, py=py, pz=pz, m02=m02, m20=m20, n_cells=n_cells,
        track_dist=track_dist, group_key=group_key, calo_type=calo_type, bc_id=bc_id,
    )


def _particle(group_key=1, pt=1.0, eta=0.0, phi=0.5, pdg_hypothesis=2212,
              selection_bits=3191978, pid_bits=6, particle_type=0, pos_z=0.0) -> ParticleRecord:
    return ParticleRecord(
        pt=pt, eta=eta, phi=phi, pdg_hypothesis=pdg_hypothesis,
        selection_bits=selection_bits, group_key=group_key,
        pid_bits=pid_bits, particle_type=particle_type, pos_z=pos_z,
    )


@pytest.fixture
def make_cluster():
    """Factory for ClusterRecords: soft, neutral, at rest unless overridden."""
    return _cluster


@pytest.fixture
def make_particle():
    """Factory for ParticleRecords passing the default selection and partitions."""
    return _particle
