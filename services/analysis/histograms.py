"""
HistogramSink - Thread-safe fixed-binning histograms.

Receives ``(label, value)`` fills from the scan and pair analysis and writes
them out as ROOT histograms with uproot.
"""
import logging
import threading
from pathlib import Path
from typing import Iterable

import numpy as np
import uproot


class Histogram:
    """A 1D histogram with fixed bin edges."""

    def __init__(self, bins: int, low: float, high: float, title: str = ""):
        if bins <= 0:
            raise ValueError(f"bins must be positive, got {bins}")
        if low >= high:
            raise ValueError(f"low ({low}) must be less than high ({high})")
        self.edges = np.linspace(low, high, bins + 1)
        self.counts = np.zeros(bins, dtype=np.float64)
        self.title = title
        self.underflow = 0
        self.overflow = 0

    def fill(self, values: Iterable[float]) -> None:
        values = np.asarray(list(values), dtype=np.float64)
        values = values[np.isfinite(values)]
        if values.size == 0:
            return
        counts, _ = np.histogram(values, bins=self.edges)
        self.counts += counts
        self.underflow += int(np.count_nonzero(values < self.edges[0]))
        self.overflow += int(np.count_nonzero(values > self.edges[-1]))

    @property
    def entries(self) -> int:
        return int(self.counts.sum()) + self.underflow + self.overflow

    def to_numpy(self) -> tuple[np.ndarray, np.ndarray]:
        return self.counts.copy(), self.edges.copy()


class HistogramSink:
    """
    Named histograms shared between batch workers.

    Histograms must be declared with ``add`` before they are filled.
    """

    def __init__(self):
        self._histograms: dict[str, Histogram] = {}
        self._lock = threading.Lock()
        self.logger = logging.getLogger(self.__class__.__name__)

    def add(self, label: str, bins: int, low: float, high: float, title: str = "") -> None:
        """Declare a histogram; declaring an existing label is a no-op."""
        with self._lock:
            if label not in self._histograms:
                self._histograms[label] = Histogram(bins, low, high, title)

    def fill(self, label: str, value: float) -> None:
        self.fill_many(label, [value])

    def fill_many(self, label: str, values: Iterable[float]) -> None:
        with self._lock:
            try:
                histogram = self._histograms[label]
            except KeyError:
                raise KeyError(f"Histogram {label!r} was never declared") from None
            histogram.fill(values)

    def __contains__(self, label: str) -> bool:
        return label in self._histograms

    @property
    def labels(self) -> list[str]:
        return sorted(self._histograms)

    def counts(self, label: str) -> np.ndarray:
        with self._lock:
            return self._histograms[label].counts.copy()

    def entries(self, label: str) -> int:
        with self._lock:
            return self._histograms[label].entries

    def get(self, label: str) -> tuple[np.ndarray, np.ndarray]:
        """``(counts, edges)`` of one histogram."""
        with self._lock:
            return self._histograms[label].to_numpy()

    def write_root(self, path: str) -> Path:
        """
        Write every histogram to a ROOT file.

        Labels containing ``/`` end up in sub-directories.
        """
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with self._lock, uproot.recreate(output_path) as root_file:
            for label, histogram in self._histograms.items():
                root_file[label] = histogram.to_numpy()

        self.logger.info(f"Wrote {len(self._histograms)} histograms to {output_path}")
        return output_path

    def summary(self) -> dict:
        """Entries per histogram, for the run statistics."""
        with self._lock:
            return {label: h.entries for label, h in sorted(self._histograms.items())}
