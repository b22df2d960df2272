"""
Statistics-related domain models.

Immutable snapshots of scan and batch processing statistics.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class BatchStatistics:
    """Statistics for a single processed batch."""

    batch_index: int
    record_count: int
    group_count: int
    malformed_count: int
    processing_time_sec: float
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        """Validate batch statistics."""
        if self.batch_index < 0:
            raise ValueError(f"batch_index must be non-negative, got {self.batch_index}")
        if self.record_count < 0:
            raise ValueError(f"record_count must be non-negative, got {self.record_count}")
        if self.group_count < 0:
            raise ValueError(f"group_count must be non-negative, got {self.group_count}")
        if self.malformed_count < 0:
            raise ValueError(f"malformed_count must be non-negative, got {self.malformed_count}")
        if self.processing_time_sec < 0:
            raise ValueError(f"processing_time_sec must be non-negative, got {self.processing_time_sec}")


@dataclass(frozen=True)
class ScanStatistics:
    """
    Aggregated statistics for a complete run.

    Built from the per-batch statistics once every batch has finished.
    """

    total_records: int
    total_groups: int
    malformed_records: int
    total_batches: int
    trigger_counts: tuple[tuple[str, int], ...]
    total_time_sec: float
    start_time: datetime
    end_time: datetime

    def __post_init__(self):
        """Validate scan statistics."""
        if self.malformed_records > self.total_records:
            raise ValueError(
                f"malformed_records ({self.malformed_records}) cannot exceed "
                f"total_records ({self.total_records})"
            )
        if self.end_time < self.start_time:
            raise ValueError("end_time must be after start_time")

    @property
    def trigger_counts_dict(self) -> dict[str, int]:
        """Trigger counts by statistic name."""
        return dict(self.trigger_counts)

    @property
    def records_per_group(self) -> float:
        """Average number of records per collision."""
        if self.total_groups == 0:
            return 0.0
        return self.total_records / self.total_groups

    @classmethod
    def from_batches(
        cls,
        batches: list[BatchStatistics],
        trigger_counts: dict[str, int],
        start_time: datetime,
        end_time: datetime,
    ) -> 'ScanStatistics':
        """Combine per-batch statistics into a run summary."""
        return cls(
            total_records=sum(b.record_count for b in batches),
            total_groups=sum(b.group_count for b in batches),
            malformed_records=sum(b.malformed_count for b in batches),
            total_batches=len(batches),
            trigger_counts=tuple(trigger_counts.items()),
            total_time_sec=(end_time - start_time).total_seconds(),
            start_time=start_time,
            end_time=end_time,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_records": self.total_records,
            "total_groups": self.total_groups,
            "malformed_records": self.malformed_records,
            "total_batches": self.total_batches,
            "records_per_group": f"{self.records_per_group:.2f}",
            "trigger_counts": self.trigger_counts_dict,
            "total_time_sec": f"{self.total_time_sec:.1f}",
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
        }
