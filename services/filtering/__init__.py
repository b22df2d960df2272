"""
Filtering services.

Single-pass trigger scan of cluster streams grouped by collision.
"""

from .boundary import GroupBoundaryDetector, iter_groups
from .accumulator import GroupAccumulator
from .emitter import emit_decision
from .group_scanner import GroupScanner

__all__ = [
    "GroupBoundaryDetector",
    "iter_groups",
    "GroupAccumulator",
    "emit_decision",
    "GroupScanner",
]
