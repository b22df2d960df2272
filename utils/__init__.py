"""
Utility modules for the filter pipeline.
"""

from .paths import create_timestamped_run_dir, prepare_run_dir
from .batching import get_batch_slice, split_at_group_boundaries

__all__ = [
    "create_timestamped_run_dir",
    "prepare_run_dir",
    "get_batch_slice",
    "split_at_group_boundaries",
]
