"""
Particle selection and partitioning.
"""
from typing import Iterable

from domain.config import PartitionConfig, SelectionConfig
from domain.records import ParticleRecord


def _has_bits(value: int, bits: int) -> bool:
    return (value & bits) == bits


def passes_selection(particle: ParticleRecord, selection: SelectionConfig) -> bool:
    """Kinematic acceptance, open intervals on both eta and pt."""
    return (
        selection.eta_min < particle.eta < selection.eta_max
        and selection.pt_min < particle.pt < selection.pt_max
    )


def passes_collision_selection(pos_z: float, selection: SelectionConfig) -> bool:
    """Primary vertex z inside the open interval (zvtx_min, zvtx_max)."""
    return selection.zvtx_min < pos_z < selection.zvtx_max


def in_partition(particle: ParticleRecord, partition: PartitionConfig) -> bool:
    """
    Track type, all selection bits of the partition, then PID bits.

    Below ``pid_threshold`` the TPC-only PID bits are required, above it the
    combined TPC+TOF bits.
    """
    if particle.particle_type != partition.particle_type:
        return False
    if not _has_bits(particle.selection_bits, partition.cut_bits):
        return False
    if particle.pt < partition.pid_threshold:
        return _has_bits(particle.pid_bits, partition.pid_tpc_bits)
    return _has_bits(particle.pid_bits, partition.pid_tpctof_bits)


def select_partition(particles: Iterable[ParticleRecord], partition: PartitionConfig) -> list[ParticleRecord]:
    return [p for p in particles if in_partition(p, partition)]
