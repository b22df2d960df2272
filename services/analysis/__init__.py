"""
Analysis services.

Statistics sink, trigger counters and plots fed by the scan.
"""

from .histograms import Histogram, HistogramSink
from .trigger_statistics import TriggerStatistics, TRIGGER_STATISTICS, statistic_bins
from .statistics_plotter import StatisticsPlotter

__all__ = [
    "Histogram",
    "HistogramSink",
    "TriggerStatistics",
    "TRIGGER_STATISTICS",
    "statistic_bins",
    "StatisticsPlotter",
]
