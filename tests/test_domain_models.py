"""
Unit tests for domain models.

Tests that all domain models validate correctly and are immutable.
"""

import math
import pytest
from datetime import datetime, timedelta

from domain import (
    ClusterRecord,
    ParticleRecord,
    TriggerKind,
    TriggerDecision,
    PairMetric,
    BatchStatistics,
    ScanStatistics,
    PipelineConfig,
    TaskConfig,
    TriggerConfig,
    PairingConfig,
    SelectionConfig,
    PartitionConfig,
    HistogramConfig,
    ConfigurationError,
    DataError,
)


class TestClusterRecord:
    """Tests for ClusterRecord domain model."""

    def test_cluster_is_immutable(self, make_cluster):
        """Test that ClusterRecord is immutable."""
        cluster = make_cluster()
        with pytest.raises(Exception):  # FrozenInstanceError
            cluster.e = 5.0

    def test_is_finite(self, make_cluster):
        """Test finiteness check over kinematic and shape values."""
        assert make_cluster().is_finite() is True
        assert make_cluster(e=math.nan).is_finite() is False
        assert make_cluster(m20=math.inf).is_finite() is False

    def test_four_momentum(self, make_cluster):
        """Test four-momentum ordering (e, px, py, pz)."""
        cluster = make_cluster(e=2.0, px=0.1, py=0.2, pz=0.3)
        assert cluster.four_momentum == (2.0, 0.1, 0.2, 0.3)


class TestParticleRecord:
    """Tests for ParticleRecord domain model."""

    def test_negative_selection_bits_fails(self, make_particle):
        """Test that negative selection bits raise ValueError."""
        with pytest.raises(ValueError, match="selection_bits must be non-negative"):
            make_particle(selection_bits=-1)

    def test_negative_pid_bits_fails(self, make_particle):
        """Test that negative PID bits raise ValueError."""
        with pytest.raises(ValueError, match="pid_bits must be non-negative"):
            make_particle(pid_bits=-4)

    def test_is_finite(self, make_particle):
        assert make_particle().is_finite() is True
        assert make_particle(phi=math.nan).is_finite() is False


class TestTriggerDecision:
    """Tests for TriggerDecision domain model."""

    def test_bitmask_and_is_set(self):
        """Test flag access by kind and packed bitmask."""
        decision = TriggerDecision(group_key=7, flags=(True, False, True, False), n_records=3)

        assert decision.is_set(TriggerKind.PHOTON)
        assert not decision.is_set(TriggerKind.ELECTRON)
        assert decision.is_set(TriggerKind.PAIR)
        assert decision.bitmask == 0b0101
        assert decision.any_fired

    def test_wrong_flag_count_fails(self):
        """Test that a flag tuple of the wrong size is rejected."""
        with pytest.raises(ValueError, match="flags must have 4 entries"):
            TriggerDecision(group_key=1, flags=(True,))

    def test_malformed_above_records_fails(self):
        """Test that more malformed than scanned records is rejected."""
        with pytest.raises(ValueError, match="n_malformed"):
            TriggerDecision(group_key=1, flags=(False,) * 4, n_records=1, n_malformed=2)

    def test_to_dict(self):
        """Test dictionary conversion uses lowercase trigger names."""
        decision = TriggerDecision(group_key=3, flags=(False, True, False, False), n_records=2)
        data = decision.to_dict()

        assert data["group_key"] == 3
        assert data["electron"] is True
        assert data["photon"] is False
        assert data["antineutron"] is False
        assert data["n_records"] == 2

    def test_pair_metric_defaults(self):
        metric = PairMetric(group_key="A", value=0.25)
        assert metric.label == "pair"


class TestTriggerConfig:
    """Tests for TriggerConfig domain model."""

    def test_defaults(self):
        """Test default thresholds."""
        config = TriggerConfig()
        assert config.energy_threshold == 2.0
        assert config.secondary_energy_threshold == 2.0
        assert config.pair_mass_threshold == 0.5
        assert config.calo_type == 0

    def test_negative_threshold_fails(self):
        """Test that negative thresholds are rejected."""
        with pytest.raises(ConfigurationError, match="energy_threshold must be non-negative"):
            TriggerConfig(energy_threshold=-1.0)

    def test_configuration_error_is_value_error(self):
        """Test that configuration errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            TriggerConfig(dist_sigma_threshold=0.0)

    def test_from_dict_rejects_unknown_options(self):
        """Test that misspelled options are not silently ignored."""
        with pytest.raises(ConfigurationError, match="Unknown trigger options"):
            TriggerConfig.from_dict({"energy_treshold": 3.0})


class TestPairingConfig:
    """Tests for PairingConfig and its parts."""

    def test_unknown_policy_fails(self):
        with pytest.raises(ConfigurationError, match="combination_policy"):
            PairingConfig(combination_policy="mixed")

    def test_is_same(self):
        assert PairingConfig(combination_policy="self").is_same is True
        assert PairingConfig(combination_policy="cross").is_same is False

    def test_selection_range_validation(self):
        with pytest.raises(ConfigurationError, match="eta_min"):
            SelectionConfig(eta_min=1.0, eta_max=-1.0)

    def test_vertex_range_validation(self):
        with pytest.raises(ConfigurationError, match="zvtx_min"):
            SelectionConfig(zvtx_min=10.0, zvtx_max=-10.0)

    def test_partition_negative_bits_fails(self):
        with pytest.raises(ConfigurationError, match="cut_bits"):
            PartitionConfig(cut_bits=-1)

    def test_from_dict(self):
        """Test building nested configuration from a dictionary."""
        config = PairingConfig.from_dict({
            "combination_policy": "cross",
            "partition_two": {"pdg_code": 211},
            "selection": {"pt_max": 3.0},
        })
        assert config.combination_policy == "cross"
        assert config.partition_one.pdg_code == 2212
        assert config.partition_two.pdg_code == 211
        assert config.selection.pt_max == 3.0
        assert config.mixing_depth == 10


class TestPipelineConfig:
    """Tests for PipelineConfig domain model."""

    def test_no_tasks_fails(self):
        """Test that at least one task must be enabled."""
        with pytest.raises(ConfigurationError, match="At least one task"):
            PipelineConfig(tasks=TaskConfig(do_trigger_scan=False), input_path="in.root")

    def test_pair_analysis_requires_pairing_config(self):
        with pytest.raises(ConfigurationError, match="pairing_config required"):
            PipelineConfig(
                tasks=TaskConfig(do_pair_analysis=True),
                input_path="in.root",
            )

    def test_empty_input_fails(self):
        with pytest.raises(ConfigurationError, match="input_path cannot be empty"):
            PipelineConfig(tasks=TaskConfig(), input_path="")

    def test_histogram_range_validation(self):
        with pytest.raises(ConfigurationError, match="kstar_range"):
            HistogramConfig(kstar_range=(5.0, 0.0))

    def test_from_dict(self):
        """Test creating config from a YAML-like dictionary."""
        config = PipelineConfig.from_dict({
            "tasks": {"do_trigger_scan": True, "do_pair_analysis": True},
            "input": {"path": "data/clusters.root"},
            "trigger_config": {"energy_threshold": 3.0, "calo_type": None},
            "pairing_config": {"combination_policy": "self"},
            "histogram_config": {"pair_mass_range": [0.0, 1.0]},
            "performance": {"workers": 2, "batches_per_worker": 3},
        })

        assert config.input_path == "data/clusters.root"
        assert config.trigger_config.energy_threshold == 3.0
        assert config.trigger_config.calo_type is None
        assert config.pairing_config is not None
        assert config.histogram_config.pair_mass_range == (0.0, 1.0)
        assert config.total_batches == 6

    def test_config_is_immutable(self):
        config = PipelineConfig(tasks=TaskConfig(), input_path="in.root")
        with pytest.raises(Exception):
            config.workers = 10


class TestStatistics:
    """Tests for BatchStatistics and ScanStatistics."""

    def test_negative_batch_counts_fail(self):
        with pytest.raises(ValueError, match="record_count must be non-negative"):
            BatchStatistics(batch_index=0, record_count=-1, group_count=0,
                            malformed_count=0, processing_time_sec=0.0)

    def test_from_batches(self):
        """Test aggregation of per-batch statistics."""
        start = datetime.now()
        end = start + timedelta(seconds=4)
        batches = [
            BatchStatistics(batch_index=0, record_count=10, group_count=4,
                            malformed_count=1, processing_time_sec=1.0),
            BatchStatistics(batch_index=1, record_count=6, group_count=4,
                            malformed_count=0, processing_time_sec=1.0),
        ]

        stats = ScanStatistics.from_batches(batches, {"scanned": 8}, start, end)

        assert stats.total_records == 16
        assert stats.total_groups == 8
        assert stats.malformed_records == 1
        assert stats.records_per_group == pytest.approx(2.0)
        assert stats.total_time_sec == pytest.approx(4.0)
        assert stats.to_dict()["trigger_counts"] == {"scanned": 8}
        assert stats.trigger_counts_dict == {"scanned": 8}

    def test_end_before_start_fails(self):
        start = datetime.now()
        with pytest.raises(ValueError, match="end_time must be after start_time"):
            ScanStatistics.from_batches([], {}, start, start - timedelta(seconds=1))


class TestErrors:
    def test_data_error_is_value_error(self):
        assert issubclass(DataError, ValueError)
