"""
Tests for GroupBoundaryDetector and iter_groups.
"""

import pytest

from domain.errors import PreconditionViolation
from services.filtering.boundary import GroupBoundaryDetector, iter_groups


class TestGroupBoundaryDetector:
    """Tests for the boundary detector."""

    def test_starts_unset(self):
        detector = GroupBoundaryDetector()
        assert detector.is_open is False
        assert detector.current_key is None

    def test_first_key_is_not_a_boundary(self):
        """Test that opening the stream never signals a boundary."""
        detector = GroupBoundaryDetector()
        assert detector.observe(5) is False
        assert detector.is_open is True
        assert detector.current_key == 5

    def test_key_that_looks_like_a_sentinel(self):
        """Test that 0 and None are ordinary keys, not 'unset' markers."""
        detector = GroupBoundaryDetector()
        assert detector.observe(0) is False
        assert detector.observe(0) is False
        assert detector.observe(None) is True
        assert detector.observe(0) is True

    def test_key_change_is_a_boundary(self):
        detector = GroupBoundaryDetector()
        signals = [detector.observe(key) for key in ["A", "A", "B", "B", "C"]]
        assert signals == [False, False, True, False, True]
        assert detector.boundary_count == 2

    def test_close_resets_to_unset(self):
        detector = GroupBoundaryDetector()
        detector.observe(1)
        detector.close()
        assert detector.is_open is False
        assert detector.observe(2) is False

    def test_reappearing_key_without_validation(self):
        """Test that a reappearing key silently starts a new group."""
        detector = GroupBoundaryDetector()
        signals = [detector.observe(key) for key in [1, 2, 1]]
        assert signals == [False, True, True]

    def test_reappearing_key_with_validation_fails(self):
        """Test fail-fast on unsorted input when validation is on."""
        detector = GroupBoundaryDetector(validate_order=True)
        detector.observe(1)
        detector.observe(2)
        with pytest.raises(PreconditionViolation, match="reappeared"):
            detector.observe(1)


class TestIterGroups:
    """Tests for contiguous group iteration."""

    def test_empty_stream(self):
        assert list(iter_groups([], key=lambda r: r)) == []

    def test_final_group_is_yielded(self):
        """Test that the last, unterminated group is not lost."""
        groups = list(iter_groups([1, 1, 2, 3, 3, 3], key=lambda r: r))
        assert groups == [(1, [1, 1]), (2, [2]), (3, [3, 3, 3])]

    def test_single_record(self):
        assert list(iter_groups(["x"], key=lambda r: r)) == [("x", ["x"])]

    def test_default_key_uses_group_key(self, make_cluster):
        clusters = [make_cluster(group_key=k) for k in (4, 4, 9)]
        groups = list(iter_groups(clusters))
        assert [key for key, _ in groups] == [4, 9]
        assert [len(g) for _, g in groups] == [2, 1]

    def test_validation_propagates(self):
        with pytest.raises(PreconditionViolation):
            list(iter_groups([1, 2, 1], key=lambda r: r, validate_order=True))
