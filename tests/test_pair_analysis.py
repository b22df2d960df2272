"""
Tests for particle selection, partitioning and the same-event pair analysis.
"""

import math
import pytest

from domain.config import PairingConfig, PartitionConfig, SelectionConfig
from domain.errors import ConfigurationError
from services.analysis.histograms import HistogramSink
from services.pairing.metrics import KStarMetric
from services.pairing.pair_analysis import PairAnalysis, SAME_EVENT_LABEL, ZVTX_LABEL
from services.pairing.partitions import (
    in_partition,
    passes_collision_selection,
    passes_selection,
    select_partition,
)


@pytest.fixture
def sink():
    return HistogramSink()


def _open_partition(pdg_code):
    """A partition every track belongs to."""
    return PartitionConfig(pdg_code=pdg_code, cut_bits=0, pid_tpc_bits=0, pid_tpctof_bits=0)


class TestPartitions:
    """Tests for kinematic selection and partition membership."""

    def test_selection_is_open_interval(self, make_particle):
        selection = SelectionConfig()
        assert passes_selection(make_particle(eta=0.5, pt=1.0), selection)
        assert not passes_selection(make_particle(eta=0.8), selection)
        assert not passes_selection(make_particle(pt=0.5), selection)
        assert not passes_selection(make_particle(pt=5.0), selection)

    def test_collision_selection_is_open_interval(self):
        """Vertex z must lie strictly inside (zvtx_min, zvtx_max)."""
        selection = SelectionConfig()
        assert passes_collision_selection(9.9, selection)
        assert passes_collision_selection(-9.9, selection)
        assert not passes_collision_selection(10.0, selection)
        assert not passes_collision_selection(-11.0, selection)
        assert not passes_collision_selection(math.nan, selection)

    def test_all_cut_bits_required(self, make_particle):
        partition = PartitionConfig(cut_bits=0b110)
        assert in_partition(make_particle(selection_bits=0b111), partition)
        assert not in_partition(make_particle(selection_bits=0b010), partition)

    def test_pid_bits_depend_on_momentum(self, make_particle):
        """TPC bits below the PID threshold, TPC+TOF bits above it."""
        partition = PartitionConfig()
        tpc_only = 2
        assert in_partition(make_particle(pt=0.6, pid_bits=tpc_only), partition)
        assert not in_partition(make_particle(pt=1.0, pid_bits=tpc_only), partition)

    def test_particle_type_must_match(self, make_particle):
        assert not in_partition(make_particle(particle_type=1), PartitionConfig())

    def test_select_partition_keeps_order(self, make_particle):
        particles = [make_particle(pt=pt) for pt in (1.0, 2.0, 3.0)]
        selected = select_partition(particles, PartitionConfig())
        assert [p.pt for p in selected] == [1.0, 2.0, 3.0]


class TestPairAnalysis:
    """Tests for the pair analysis pass."""

    def test_self_pairs(self, sink, make_particle):
        """Three accepted protons in one collision give three pairs."""
        analysis = PairAnalysis(PairingConfig(), sink)
        particles = [make_particle(group_key=1, pt=pt) for pt in (1.0, 1.5, 2.0)]

        assert analysis.process(particles) == 3
        assert sink.entries(SAME_EVENT_LABEL) == 3
        assert sink.entries("Particle1/hPt") == 3
        assert analysis.groups_processed == 1

    def test_second_species_histograms_only_when_different(self, sink):
        PairAnalysis(PairingConfig(combination_policy="self"), sink)
        assert "Particle1/hPt" in sink
        assert "Particle2/hPt" not in sink

        cross_sink = HistogramSink()
        PairAnalysis(
            PairingConfig(combination_policy="cross", partition_two=_open_partition(211)),
            cross_sink,
        )
        assert "Particle2/hPt" in cross_sink

    def test_cross_pairs(self, sink, make_particle):
        """Overlapping partitions pair every track with every track."""
        config = PairingConfig(
            combination_policy="cross",
            partition_one=_open_partition(2212),
            partition_two=_open_partition(211),
        )
        analysis = PairAnalysis(config, sink)
        particles = [make_particle(group_key=1, pt=pt) for pt in (1.0, 1.5, 2.0)]

        assert analysis.process(particles) == 9
        assert sink.entries("Particle2/hEta") == 3

    def test_pairs_stay_within_collision(self, sink, make_particle):
        analysis = PairAnalysis(PairingConfig(), sink)
        particles = [
            make_particle(group_key=1),
            make_particle(group_key=1, pt=1.5),
            make_particle(group_key=2),
            make_particle(group_key=3, pt=2.0),
        ]
        assert analysis.process(particles) == 1
        assert analysis.groups_processed == 3

    def test_rejected_particles_are_counted(self, sink, make_particle):
        analysis = PairAnalysis(PairingConfig(), sink)
        particles = [
            make_particle(group_key=1),
            make_particle(group_key=1, eta=2.0),
            make_particle(group_key=1, pt=math.nan),
        ]
        assert analysis.process(particles) == 0
        assert analysis.particles_rejected == 2

    def test_unknown_pdg_code_fails_early(self, sink):
        config = PairingConfig(partition_one=PartitionConfig(pdg_code=999))
        with pytest.raises(ConfigurationError, match="999"):
            PairAnalysis(config, sink)

    def test_pair_metric_callback(self, sink, make_particle):
        metrics = []
        analysis = PairAnalysis(PairingConfig(), sink, on_pair_metric=metrics.append)
        analysis.process([
            make_particle(group_key="a", phi=0.0),
            make_particle(group_key="a", phi=math.pi),
        ])

        assert len(metrics) == 1
        assert metrics[0].group_key == "a"
        assert metrics[0].label == SAME_EVENT_LABEL
        assert metrics[0].value == pytest.approx(1.0, rel=1e-6)

    def test_collisions_outside_vertex_range_are_skipped(self, sink, make_particle):
        """Test that a collision failing the vertex cut fills nothing."""
        analysis = PairAnalysis(PairingConfig(), sink)
        particles = [
            make_particle(group_key=1, pos_z=2.5),
            make_particle(group_key=1, pos_z=2.5, pt=1.5),
            make_particle(group_key=2, pos_z=11.0),
            make_particle(group_key=2, pos_z=11.0, pt=1.5),
        ]

        assert analysis.process(particles) == 1
        assert analysis.groups_processed == 1
        assert analysis.groups_rejected == 1
        assert sink.entries(ZVTX_LABEL) == 1
        assert sink.entries("Particle1/hPt") == 2

    def test_vertex_histogram_filled_once_per_collision(self, sink, make_particle):
        analysis = PairAnalysis(PairingConfig(), sink)
        analysis.process([make_particle(group_key=k, pos_z=-3.05) for k in (1, 1, 1, 2)])

        counts, edges = sink.get(ZVTX_LABEL)
        assert len(counts) == 240
        assert edges[0] == -12.0 and edges[-1] == 12.0
        assert counts.sum() == 2
        assert counts[89] == 2

    def test_ignored_second_partition_is_logged(self, sink, caplog):
        config = PairingConfig(combination_policy="self", partition_two=_open_partition(2212))
        PairAnalysis(config, sink)
        assert "partition_two" in caplog.text

    def test_identical_partitions_not_logged(self, sink, caplog):
        PairAnalysis(PairingConfig(), sink)
        assert "partition_two" not in caplog.text

    def test_self_mode_uses_first_partition_mass(self, sink, make_particle):
        """Test that a pion partition_two changes neither pairs nor k* in self mode."""
        config = PairingConfig(combination_policy="self", partition_two=_open_partition(211))
        analysis = PairAnalysis(config, sink)
        first = make_particle(group_key=1, pt=1.0, phi=0.0)
        second = make_particle(group_key=1, pt=2.0, eta=0.5, phi=1.0)

        (metric,) = analysis.process_group(1, [first, second])

        proton = KStarMetric(0.938272, 0.938272)
        assert metric.value == pytest.approx(proton(first, second), rel=1e-6)
