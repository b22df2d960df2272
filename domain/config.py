"""
Configuration domain models.

Validated configuration objects for the trigger scan and the pair analysis.
"""

from dataclasses import dataclass, field
from typing import Optional

from .errors import ConfigurationError

COMBINATION_POLICIES = ("self", "cross")


@dataclass(frozen=True)
class TaskConfig:
    """Configuration for which tasks to run."""

    do_trigger_scan: bool = True
    do_pair_analysis: bool = False
    do_plots: bool = False

    def any_enabled(self) -> bool:
        """Check if any processing task is enabled."""
        return any([self.do_trigger_scan, self.do_pair_analysis])


@dataclass(frozen=True)
class TriggerConfig:
    """Thresholds for the per-cluster trigger predicates."""

    energy_threshold: float = 2.0
    secondary_energy_threshold: float = 2.0
    dist_sigma_threshold: float = 2.0
    pair_mass_threshold: float = 0.5

    # Only clusters of this detector subtype are scanned, None scans all
    calo_type: Optional[int] = 0

    # Antineutron shape cuts
    min_cells: int = 2
    min_m02: float = 0.2
    min_shape_energy: float = 0.7
    regime_split_energy: float = 2.0
    low_regime_offset: float = 4.5
    high_regime_offset: float = 4.0

    # Behavior
    emit_pair_metrics: bool = False
    validate_order: bool = False

    def __post_init__(self):
        """Validate trigger configuration."""
        for name in ("energy_threshold", "secondary_energy_threshold", "pair_mass_threshold"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.dist_sigma_threshold <= 0:
            raise ConfigurationError(f"dist_sigma_threshold must be positive, got {self.dist_sigma_threshold}")
        if self.min_cells < 0:
            raise ConfigurationError(f"min_cells must be non-negative, got {self.min_cells}")

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'TriggerConfig':
        """Create TriggerConfig from the ``trigger_config`` YAML section."""
        known = cls.__dataclass_fields__.keys()
        unknown = set(config_dict) - set(known)
        if unknown:
            raise ConfigurationError(f"Unknown trigger options: {sorted(unknown)}")
        return cls(**config_dict)


@dataclass(frozen=True)
class SelectionConfig:
    """Collision vertex and particle kinematic acceptance applied before partitioning."""

    eta_min: float = -0.8
    eta_max: float = 0.8
    pt_min: float = 0.5
    pt_max: float = 4.0
    zvtx_min: float = -10.0
    zvtx_max: float = 10.0

    def __post_init__(self):
        """Validate selection ranges."""
        if self.eta_min >= self.eta_max:
            raise ConfigurationError(f"eta_min ({self.eta_min}) must be less than eta_max ({self.eta_max})")
        if self.pt_min >= self.pt_max:
            raise ConfigurationError(f"pt_min ({self.pt_min}) must be less than pt_max ({self.pt_max})")
        if self.zvtx_min >= self.zvtx_max:
            raise ConfigurationError(f"zvtx_min ({self.zvtx_min}) must be less than zvtx_max ({self.zvtx_max})")


@dataclass(frozen=True)
class PartitionConfig:
    """Selection of one particle species out of a collision."""

    pdg_code: int = 2212
    cut_bits: int = 3191978
    pid_tpc_bits: int = 2
    pid_tpctof_bits: int = 4
    pid_threshold: float = 0.75
    particle_type: int = 0

    def __post_init__(self):
        """Validate partition configuration."""
        for name in ("cut_bits", "pid_tpc_bits", "pid_tpctof_bits"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.pid_threshold < 0:
            raise ConfigurationError(f"pid_threshold must be non-negative, got {self.pid_threshold}")


@dataclass(frozen=True)
class PairingConfig:
    """Configuration for the same-collision pair analysis."""

    combination_policy: str = "self"
    partition_one: PartitionConfig = field(default_factory=PartitionConfig)
    partition_two: PartitionConfig = field(default_factory=PartitionConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)

    # Collisions kept for event mixing. Mixing itself is left to the caller.
    mixing_depth: int = 10

    def __post_init__(self):
        """Validate pairing configuration."""
        if self.combination_policy not in COMBINATION_POLICIES:
            raise ConfigurationError(
                f"combination_policy must be one of {COMBINATION_POLICIES}, got {self.combination_policy!r}"
            )
        if self.mixing_depth < 0:
            raise ConfigurationError(f"mixing_depth must be non-negative, got {self.mixing_depth}")

    @property
    def is_same(self) -> bool:
        """Both partitions describe the same species."""
        return self.combination_policy == "self"

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'PairingConfig':
        """Create PairingConfig from the ``pairing_config`` YAML section."""
        return cls(
            combination_policy=config_dict.get("combination_policy", "self"),
            partition_one=PartitionConfig(**config_dict.get("partition_one", {})),
            partition_two=PartitionConfig(**config_dict.get("partition_two", {})),
            selection=SelectionConfig(**config_dict.get("selection", {})),
            mixing_depth=config_dict.get("mixing_depth", 10),
        )


@dataclass(frozen=True)
class HistogramConfig:
    """Binning and output of the statistics sink."""

    output_filename: str = "histograms.root"
    pair_mass_bins: int = 200
    pair_mass_range: tuple[float, float] = (0.0, 2.0)
    kstar_bins: int = 1000
    kstar_range: tuple[float, float] = (0.0, 5.0)

    def __post_init__(self):
        """Validate histogram configuration."""
        for name in ("pair_mass", "kstar"):
            bins = getattr(self, f"{name}_bins")
            low, high = getattr(self, f"{name}_range")
            if bins <= 0:
                raise ConfigurationError(f"{name}_bins must be positive, got {bins}")
            if low >= high:
                raise ConfigurationError(f"{name}_range must be increasing, got ({low}, {high})")
        if not self.output_filename:
            raise ConfigurationError("output_filename cannot be empty")


@dataclass(frozen=True)
class PipelineConfig:
    """
    Complete pipeline configuration.

    Immutable configuration object validated at creation.
    """

    tasks: TaskConfig
    input_path: str

    trigger_config: TriggerConfig = field(default_factory=TriggerConfig)
    pairing_config: Optional[PairingConfig] = None
    histogram_config: HistogramConfig = field(default_factory=HistogramConfig)

    # Input
    clusters_tree: str = "clusters"
    particles_tree: str = "particles"

    # Run metadata
    run_name: str = "filter_run"
    output_dir: str = "./output"

    # Performance
    workers: int = 4
    batches_per_worker: int = 2
    show_progress_bar: bool = True

    def __post_init__(self):
        """Validate pipeline configuration."""
        if not self.tasks.any_enabled():
            raise ConfigurationError("At least one task must be enabled")
        if not self.input_path:
            raise ConfigurationError("input_path cannot be empty")
        if self.tasks.do_pair_analysis and self.pairing_config is None:
            raise ConfigurationError("pairing_config required when do_pair_analysis=True")
        if self.workers <= 0:
            raise ConfigurationError(f"workers must be positive, got {self.workers}")
        if self.batches_per_worker <= 0:
            raise ConfigurationError(f"batches_per_worker must be positive, got {self.batches_per_worker}")

    @property
    def total_batches(self) -> int:
        return self.workers * self.batches_per_worker

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'PipelineConfig':
        """
        Create PipelineConfig from a dictionary (e.g., loaded from YAML).

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            Validated PipelineConfig instance
        """
        tasks_dict = config_dict.get("tasks", {})
        tasks = TaskConfig(
            do_trigger_scan=tasks_dict.get("do_trigger_scan", True),
            do_pair_analysis=tasks_dict.get("do_pair_analysis", False),
            do_plots=tasks_dict.get("do_plots", False),
        )

        trigger_config = TriggerConfig.from_dict(config_dict.get("trigger_config", {}))

        pairing_config = None
        if tasks.do_pair_analysis or "pairing_config" in config_dict:
            pairing_config = PairingConfig.from_dict(config_dict.get("pairing_config", {}))

        hist_dict = config_dict.get("histogram_config", {})
        histogram_config = HistogramConfig(
            output_filename=hist_dict.get("output_filename", "histograms.root"),
            pair_mass_bins=hist_dict.get("pair_mass_bins", 200),
            pair_mass_range=tuple(hist_dict.get("pair_mass_range", (0.0, 2.0))),
            kstar_bins=hist_dict.get("kstar_bins", 1000),
            kstar_range=tuple(hist_dict.get("kstar_range", (0.0, 5.0))),
        )

        input_dict = config_dict.get("input", {})
        run_metadata = config_dict.get("run_metadata", {})
        performance = config_dict.get("performance", {})

        return cls(
            tasks=tasks,
            input_path=input_dict.get("path", ""),
            trigger_config=trigger_config,
            pairing_config=pairing_config,
            histogram_config=histogram_config,
            clusters_tree=input_dict.get("clusters_tree", "clusters"),
            particles_tree=input_dict.get("particles_tree", "particles"),
            run_name=run_metadata.get("run_name", "filter_run"),
            output_dir=run_metadata.get("base_output_dir", "./output"),
            workers=performance.get("workers", 4),
            batches_per_worker=performance.get("batches_per_worker", 2),
            show_progress_bar=performance.get("show_progress_bar", True),
        )
