"""
Statistics plotter for filter runs.

Generates 2 visualization categories:
1. Trigger Summary      – trigger counts, fire fractions, run performance
2. Pair Distributions   – pair mass and k* histograms from the sink
"""

import logging
from pathlib import Path
from typing import Optional, List
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for servers
import matplotlib.pyplot as plt
import numpy as np

from .histograms import HistogramSink


class StatisticsPlotter:
    """
    Creates statistical plots from run statistics and histograms.
    """

    COLORS = {
        'primary': '#2980b9',
        'secondary': '#8e44ad',
        'accent': '#f39c12',
        'info': '#16a085',
        'success': '#27ae60',
        'text_dark': '#2c3e50',
    }

    def __init__(self, output_dir: str):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger(self.__class__.__name__)
        plt.style.use('seaborn-v0_8-whitegrid')

    # =========================================================================
    # PLOT 1: Trigger Summary
    # =========================================================================
    def plot_trigger_summary(
        self,
        scan_stats: dict,
        save_name: str = "01_trigger_summary.png",
    ) -> Optional[Path]:
        """
        Trigger-level summary:
        - Collisions per trigger statistic (bar)
        - Fraction of scanned collisions firing each statistic
        """
        trigger_counts = scan_stats.get('trigger_counts', {})
        scanned = int(trigger_counts.get('scanned', 0))
        if scanned == 0:
            self.logger.info("No scanned collisions – skipping trigger summary plot")
            return None

        self.logger.info("Generating trigger summary plot...")

        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(16, 6))
        fig.suptitle('Trigger Summary', fontsize=18, fontweight='bold',
                     color=self.COLORS['text_dark'])

        names = list(trigger_counts.keys())
        counts = [int(trigger_counts[n]) for n in names]
        bars = ax1.bar(names, counts, color=self.COLORS['primary'],
                       edgecolor='white', linewidth=1.5)
        for bar, v in zip(bars, counts):
            ax1.text(bar.get_x() + bar.get_width() / 2, bar.get_height(),
                     f'{v:,}', ha='center', va='bottom', fontweight='bold', fontsize=10)
        ax1.set_ylabel('Collisions', fontsize=11)
        ax1.set_title('Collisions per Statistic', fontsize=13, fontweight='bold', pad=10)
        ax1.tick_params(axis='x', rotation=30)

        fired = [n for n in names if n != 'scanned']
        fractions = [int(trigger_counts[n]) / scanned * 100 for n in fired]
        ax2.barh(fired, fractions, color=self.COLORS['accent'], edgecolor='white')
        ax2.set_xlabel('% of scanned collisions', fontsize=11)
        ax2.set_xlim(0, 100)
        ax2.invert_yaxis()
        ax2.set_title(
            f"Fire Fraction ({scan_stats.get('total_records', 0)} clusters, "
            f"{scan_stats.get('total_time_sec', '0')}s)",
            fontsize=13, fontweight='bold', pad=10,
        )

        output_path = self.output_dir / save_name
        plt.savefig(output_path, dpi=150, bbox_inches='tight', facecolor='white')
        plt.close(fig)
        self.logger.info(f"Saved trigger summary plot to: {output_path}")
        return output_path

    # =========================================================================
    # PLOT 2: Pair Distributions
    # =========================================================================
    def plot_pair_distributions(
        self,
        sink: HistogramSink,
        labels: List[str],
        save_name: str = "02_pair_distributions.png",
    ) -> Optional[Path]:
        """Step plot of each non-empty pair histogram."""
        labels = [label for label in labels if label in sink and sink.entries(label) > 0]
        if not labels:
            self.logger.info("No filled pair histograms – skipping distribution plot")
            return None

        self.logger.info("Generating pair distribution plot...")

        fig, axes = plt.subplots(1, len(labels), figsize=(8 * len(labels), 6), squeeze=False)
        for ax, label in zip(axes[0], labels):
            counts, edges = sink.get(label)
            ax.stairs(counts, edges, color=self.COLORS['secondary'], linewidth=1.5)
            ax.set_title(label, fontsize=13, fontweight='bold', pad=10)
            ax.set_ylabel('Pairs', fontsize=11)
            ax.text(0.97, 0.95, f'entries: {int(np.sum(counts)):,}',
                    ha='right', va='top', transform=ax.transAxes, fontsize=10)

        output_path = self.output_dir / save_name
        plt.savefig(output_path, dpi=150, bbox_inches='tight', facecolor='white')
        plt.close(fig)
        self.logger.info(f"Saved pair distribution plot to: {output_path}")
        return output_path

    # =========================================================================
    # Orchestrator
    # =========================================================================
    def create_all_plots(self, scan_stats: Optional[dict], sink: HistogramSink,
                         pair_labels: List[str]) -> List[Path]:
        """
        Create all applicable plots.

        Returns:
            List of paths to created plots
        """
        created_plots = []

        if scan_stats:
            try:
                path = self.plot_trigger_summary(scan_stats)
                if path:
                    created_plots.append(path)
            except Exception as e:
                self.logger.warning(f"Failed to create trigger summary plot: {e}")

        try:
            path = self.plot_pair_distributions(sink, pair_labels)
            if path:
                created_plots.append(path)
        except Exception as e:
            self.logger.warning(f"Failed to create pair distribution plot: {e}")

        self.logger.info(f"Created {len(created_plots)} statistical plots")
        return created_plots
