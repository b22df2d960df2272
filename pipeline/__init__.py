"""
Pipeline execution layer.

High-level executor that wires together reading, scanning and output.
"""

from .executor import FilterExecutor, RunResult

__all__ = ["FilterExecutor", "RunResult"]
