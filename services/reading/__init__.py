"""
Reading services.

Services responsible for turning ROOT trees into record streams.
"""

from .record_reader import RecordReader

__all__ = ["RecordReader"]
