"""
GroupBoundaryDetector - Finds collision boundaries in a sorted stream.

Single responsibility: decide, record by record, whether a new group starts.
"""
import logging
from operator import attrgetter
from typing import Callable, Hashable, Iterable, Iterator, Optional

from domain.errors import PreconditionViolation

logger = logging.getLogger(__name__)


class GroupBoundaryDetector:
    """
    Tracks the currently open group key of a stream sorted by group.

    The detector starts unset. The first observed key opens a group without
    signalling a boundary; every later key change is a boundary.
    """

    def __init__(self, validate_order: bool = False):
        """
        Initialize detector.

        Args:
            validate_order: Raise PreconditionViolation when a key reappears
                after its group was closed. Costs one set entry per group.
        """
        self.validate_order = validate_order
        self._current_key: Optional[Hashable] = None
        self._is_open = False
        self._closed_keys: set = set()
        self._boundaries = 0

    def observe(self, key: Hashable) -> bool:
        """
        Observe the group key of the next record.

        Returns:
            True if ``key`` closes the open group and starts a new one
        """
        if not self._is_open:
            self._current_key = key
            self._is_open = True
            return False

        if key == self._current_key:
            return False

        if self.validate_order:
            if key in self._closed_keys:
                raise PreconditionViolation(
                    f"Group {key!r} reappeared after it was closed; input is not grouped by key"
                )
            self._closed_keys.add(self._current_key)

        logger.debug(f"Group boundary: {self._current_key!r} -> {key!r}")
        self._current_key = key
        self._boundaries += 1
        return True

    def close(self) -> None:
        """Mark the stream as exhausted; the detector returns to unset."""
        if self._is_open and self.validate_order:
            self._closed_keys.add(self._current_key)
        self._current_key = None
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def current_key(self) -> Optional[Hashable]:
        """Key of the open group, None while unset."""
        return self._current_key

    @property
    def boundary_count(self) -> int:
        return self._boundaries


def iter_groups(
    records: Iterable,
    key: Callable = attrgetter("group_key"),
    validate_order: bool = False,
) -> Iterator[tuple[Hashable, list]]:
    """
    Split a sorted stream into contiguous groups.

    Args:
        records: Records in stream order
        key: Returns the group key of a record
        validate_order: Fail fast on a reappearing key

    Yields:
        ``(group_key, records)`` for every group, the last one included
    """
    detector = GroupBoundaryDetector(validate_order=validate_order)
    current: list = []

    for record in records:
        if detector.observe(key(record)):
            yield key(current[0]), current
            current = []
        current.append(record)

    if detector.is_open:
        yield key(current[0]), current
    detector.close()
