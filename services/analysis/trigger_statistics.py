"""
Trigger statistics.

Maps each decision to the named counters it contributes to. The mapping is
declarative: a counter is filled when all of its trigger kinds are set.
"""
import threading
from typing import Iterable

from domain.decisions import TriggerDecision, TriggerKind
from .histograms import HistogramSink

EVENTS_LABEL = "events"

# (bin, name, required triggers)
TRIGGER_STATISTICS = (
    (0, "scanned", ()),
    (1, "photon", (TriggerKind.PHOTON,)),
    (2, "photon_and_electron", (TriggerKind.PHOTON, TriggerKind.ELECTRON)),
    (3, "photon_and_pair", (TriggerKind.PHOTON, TriggerKind.PAIR)),
    (4, "electron", (TriggerKind.ELECTRON,)),
    (5, "pair", (TriggerKind.PAIR,)),
    (6, "antineutron", (TriggerKind.ANTINEUTRON,)),
)

STATISTIC_NAMES = {bin_index: name for bin_index, name, _required in TRIGGER_STATISTICS}


def statistic_bins(decision: TriggerDecision) -> list[int]:
    """Bins of the events histogram this decision fills."""
    return [
        bin_index
        for bin_index, _name, required in TRIGGER_STATISTICS
        if all(decision.is_set(kind) for kind in required)
    ]


class TriggerStatistics:
    """Counts decisions per named statistic; safe to share between threads."""

    def __init__(self):
        self._counts = {name: 0 for name in STATISTIC_NAMES.values()}
        self._lock = threading.Lock()

    def add(self, decision: TriggerDecision) -> None:
        with self._lock:
            for bin_index in statistic_bins(decision):
                self._counts[STATISTIC_NAMES[bin_index]] += 1

    def add_all(self, decisions: Iterable[TriggerDecision]) -> None:
        for decision in decisions:
            self.add(decision)

    def to_dict(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counts)

    @staticmethod
    def declare(sink: HistogramSink) -> None:
        sink.add(EVENTS_LABEL, 10, 0.0, 10.0, title="Events analysed")

    @staticmethod
    def fill(sink: HistogramSink, decision: TriggerDecision) -> None:
        """Fill the events histogram of ``sink`` for one decision."""
        sink.fill_many(EVENTS_LABEL, [float(b) for b in statistic_bins(decision)])
