"""
GroupAccumulator - Folds the clusters of one collision into trigger flags.

Single responsibility: per-group mutable trigger state.
"""
import logging
from typing import Hashable, Optional

from domain.config import TriggerConfig
from domain.decisions import TriggerKind, N_TRIGGERS
from domain.errors import DataError
from domain.records import ClusterRecord
from services.pairing.engine import PairwiseMetricEngine
from .predicates import RECORD_PREDICATES, validate_record

logger = logging.getLogger(__name__)


class GroupAccumulator:
    """
    Trigger flags and clusters of the currently open collision.

    Flags only go from False to True until ``reset`` is called for the next
    group.
    """

    def __init__(self, config: TriggerConfig, pair_engine: PairwiseMetricEngine):
        """
        Initialize accumulator.

        Args:
            config: Trigger thresholds
            pair_engine: Engine evaluating the cluster pair mass
        """
        self._config = config
        self._pair_engine = pair_engine
        self._group_key: Optional[Hashable] = None
        self._is_open = False
        self._flags = [False] * N_TRIGGERS
        self._records: list[ClusterRecord] = []
        self._n_records = 0
        self._n_malformed = 0
        self._bc_id: Optional[int] = None
        self._bc_mismatches = 0

    def reset(self, group_key: Hashable) -> None:
        """Start accumulating a new group."""
        self._group_key = group_key
        self._is_open = True
        self._flags = [False] * N_TRIGGERS
        self._records = []
        self._n_records = 0
        self._n_malformed = 0
        self._bc_id = None

    def add(self, record: ClusterRecord) -> None:
        """
        Fold one cluster into the flags.

        Malformed clusters are counted but take no part in any trigger.
        """
        if not self._is_open:
            raise RuntimeError("reset() must be called before the first add()")

        self._n_records += 1
        try:
            validate_record(record)
        except DataError as e:
            self._n_malformed += 1
            logger.warning(f"Skipping cluster: {e}")
            return

        self._check_bunch_crossing(record)

        for kind, predicate in RECORD_PREDICATES.items():
            self._flags[kind] |= predicate(record, self._config)

        # once a pair is found the rest of the group needs no pair search
        if not self._flags[TriggerKind.PAIR]:
            self._flags[TriggerKind.PAIR] = self._pair_engine.any_with(
                record, self._records, self._config.pair_mass_threshold
            )

        self._records.append(record)

    def _check_bunch_crossing(self, record: ClusterRecord) -> None:
        if self._bc_id is None:
            self._bc_id = record.bc_id
        elif record.bc_id != self._bc_id:
            self._bc_mismatches += 1
            logger.debug(
                f"Group {self._group_key!r} spans bunch crossings {self._bc_id} and {record.bc_id}"
            )

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def group_key(self) -> Optional[Hashable]:
        return self._group_key

    @property
    def flags(self) -> tuple[bool, ...]:
        return tuple(self._flags)

    @property
    def records(self) -> tuple[ClusterRecord, ...]:
        """Valid clusters of the open group, in stream order."""
        return tuple(self._records)

    @property
    def n_records(self) -> int:
        return self._n_records

    @property
    def n_malformed(self) -> int:
        return self._n_malformed

    @property
    def bc_mismatches(self) -> int:
        """Clusters seen so far whose bunch crossing differed from their group's first cluster."""
        return self._bc_mismatches
