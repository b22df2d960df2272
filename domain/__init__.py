"""
Domain models for the collision filter.

Pure data structures with validation, no business logic.
"""

from .records import ClusterRecord, ParticleRecord, GroupKey
from .decisions import TriggerKind, TriggerDecision, PairMetric, N_TRIGGERS
from .statistics import BatchStatistics, ScanStatistics
from .errors import (
    CollisionFilterError,
    PreconditionViolation,
    ConfigurationError,
    DataError,
)
from .config import (
    PipelineConfig,
    TaskConfig,
    TriggerConfig,
    PairingConfig,
    PartitionConfig,
    SelectionConfig,
    HistogramConfig,
)

__all__ = [
    "ClusterRecord",
    "ParticleRecord",
    "GroupKey",
    "TriggerKind",
    "TriggerDecision",
    "PairMetric",
    "N_TRIGGERS",
    "BatchStatistics",
    "ScanStatistics",
    "CollisionFilterError",
    "PreconditionViolation",
    "ConfigurationError",
    "DataError",
    "PipelineConfig",
    "TaskConfig",
    "TriggerConfig",
    "PairingConfig",
    "PartitionConfig",
    "SelectionConfig",
    "HistogramConfig",
]
