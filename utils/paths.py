"""
Path utilities for filter runs.

Handles timestamped run directories and the output layout inside them.
"""

import os
from datetime import datetime

RUN_SUBDIRS = ("histograms", "plots", "logs")


def create_timestamped_run_dir(base_output_dir: str, run_name: str = None) -> str:
    """
    Create a timestamped directory for the current run.

    Args:
        base_output_dir: Base output directory (e.g., "./output")
        run_name: Optional run name to include in directory

    Returns:
        Path to the timestamped run directory

    Example:
        create_timestamped_run_dir("./output", "photon_filter")
        -> "./output/photon_filter_20261019_211730"
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if run_name:
        dir_name = f"{run_name}_{timestamp}"
    else:
        dir_name = f"run_{timestamp}"

    run_dir = os.path.join(base_output_dir, dir_name)
    os.makedirs(run_dir, exist_ok=True)

    return run_dir


def prepare_run_dir(run_dir: str) -> dict[str, str]:
    """
    Create the standard sub-directories of a run directory.

    Layout under run_dir:
        histograms/   - ROOT histogram file
        plots/        - statistical plots
        logs/         - decisions and run statistics

    Returns:
        Mapping of sub-directory name to its path
    """
    paths = {}
    for name in RUN_SUBDIRS:
        path = os.path.join(run_dir, name)
        os.makedirs(path, exist_ok=True)
        paths[name] = path
    return paths
