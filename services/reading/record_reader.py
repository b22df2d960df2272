"""
RecordReader service - Reads cluster and particle tables.

Reads flat ROOT trees with uproot (one entry per cluster or particle) and
turns them into record objects, keeping file order.
No grouping or sorting is done here.
"""

import logging
from typing import Mapping, Optional, Union

import awkward as ak
import numpy as np
import uproot

from domain.errors import DataError
from domain.records import ClusterRecord, ParticleRecord

# record field -> branch name
CLUSTER_BRANCHES = {
    "e": "e",
    "px": "px",
    "py": "py",
    "pz": "pz",
    "m02": "m02",
    "m20": "m20",
    "n_cells": "n_cells",
    "track_dist": "track_dist",
    "group_key": "collision_id",
}
CLUSTER_OPTIONAL_BRANCHES = {
    "calo_type": "calo_type",
    "bc_id": "bc_id",
}

PARTICLE_BRANCHES = {
    "pt": "pt",
    "eta": "eta",
    "phi": "phi",
    "pdg_hypothesis": "pdg_code",
    "selection_bits": "cut",
    "group_key": "collision_id",
}
PARTICLE_OPTIONAL_BRANCHES = {
    "pid_bits": "pid_cut",
    "particle_type": "part_type",
    "pos_z": "pos_z",
}

ArrayLike = Union[ak.Array, Mapping[str, object]]


class RecordReader:
    """
    Service for reading records from ROOT files or in-memory columns.

    Pure function-like service with no state. All methods are static.
    """

    @staticmethod
    def read_clusters(file_path: str, tree_name: str = "clusters",
                      entry_stop: Optional[int] = None) -> list[ClusterRecord]:
        """
        Read every cluster of a ROOT tree.

        Args:
            file_path: Path or URI to ROOT file
            tree_name: Name of the cluster tree
            entry_stop: Read at most this many entries

        Returns:
            ClusterRecords in file order

        Raises:
            DataError: If the tree or a required branch is missing
        """
        arrays = RecordReader._read_tree(
            file_path, tree_name, CLUSTER_BRANCHES, CLUSTER_OPTIONAL_BRANCHES, entry_stop
        )
        return RecordReader.clusters_from_arrays(arrays)

    @staticmethod
    def read_particles(file_path: str, tree_name: str = "particles",
                       entry_stop: Optional[int] = None) -> list[ParticleRecord]:
        """Read every particle of a ROOT tree, in file order."""
        arrays = RecordReader._read_tree(
            file_path, tree_name, PARTICLE_BRANCHES, PARTICLE_OPTIONAL_BRANCHES, entry_stop
        )
        return RecordReader.particles_from_arrays(arrays)

    @staticmethod
    def clusters_from_arrays(arrays: ArrayLike) -> list[ClusterRecord]:
        """Build ClusterRecords from columns named like the ROOT branches."""
        columns = RecordReader._extract_columns(arrays, CLUSTER_BRANCHES, CLUSTER_OPTIONAL_BRANCHES)
        n = len(columns["e"])
        return [
            ClusterRecord(
                e=float(columns["e"][i]),
                px=float(columns["px"][i]),
                py=float(columns["py"][i]),
                pz=float(columns["pz"][i]),
                m02=float(columns["m02"][i]),
                m20=float(columns["m20"][i]),
                n_cells=int(columns["n_cells"][i]),
                track_dist=float(columns["track_dist"][i]),
                group_key=int(columns["group_key"][i]),
                calo_type=int(columns["calo_type"][i]),
                bc_id=int(columns["bc_id"][i]),
            )
            for i in range(n)
        ]

    @staticmethod
    def particles_from_arrays(arrays: ArrayLike) -> list[ParticleRecord]:
        """Build ParticleRecords from columns named like the ROOT branches."""
        columns = RecordReader._extract_columns(arrays, PARTICLE_BRANCHES, PARTICLE_OPTIONAL_BRANCHES)
        n = len(columns["pt"])
        return [
            ParticleRecord(
                pt=float(columns["pt"][i]),
                eta=float(columns["eta"][i]),
                phi=float(columns["phi"][i]),
                pdg_hypothesis=int(columns["pdg_hypothesis"][i]),
                selection_bits=int(columns["selection_bits"][i]),
                group_key=int(columns["group_key"][i]),
                pid_bits=int(columns["pid_bits"][i]),
                particle_type=int(columns["particle_type"][i]),
                pos_z=float(columns["pos_z"][i]),
            )
            for i in range(n)
        ]

    @staticmethod
    def write_clusters(file_path: str, records: list[ClusterRecord], tree_name: str = "clusters") -> None:
        """Write clusters as a flat tree readable by ``read_clusters``."""
        branches = {**CLUSTER_BRANCHES, **CLUSTER_OPTIONAL_BRANCHES}
        columns = {
            branch: np.asarray([getattr(r, field) for r in records])
            for field, branch in branches.items()
        }
        with uproot.recreate(file_path) as root_file:
            root_file[tree_name] = columns

    @staticmethod
    def _read_tree(
        file_path: str,
        tree_name: str,
        required: dict[str, str],
        optional: dict[str, str],
        entry_stop: Optional[int],
    ) -> ak.Array:
        with uproot.open(file_path) as root_file:
            available_trees = [key.split(";")[0] for key in root_file.keys()]
            if tree_name not in available_trees:
                raise DataError(f"Tree {tree_name!r} not found in {file_path} (found {available_trees})")

            tree = root_file[tree_name]
            tree_branches = set(tree.keys())
            missing = [b for b in required.values() if b not in tree_branches]
            if missing:
                raise DataError(f"Missing branches {missing} in {file_path}:{tree_name}")

            branches = list(required.values()) + [b for b in optional.values() if b in tree_branches]
            logging.info(f"Reading {tree.num_entries} entries from {file_path}:{tree_name}")
            return tree.arrays(branches, library="ak", entry_stop=entry_stop)

    @staticmethod
    def _extract_columns(
        arrays: ArrayLike,
        required: dict[str, str],
        optional: dict[str, str],
    ) -> dict[str, np.ndarray]:
        if not isinstance(arrays, ak.Array):
            arrays = ak.Array(dict(arrays))

        fields = set(arrays.fields)
        missing = [b for b in required.values() if b not in fields]
        if missing:
            raise DataError(f"Missing columns {missing}")

        columns = {name: ak.to_numpy(arrays[branch]) for name, branch in required.items()}
        n = len(arrays)
        for name, branch in optional.items():
            if branch in fields:
                columns[name] = ak.to_numpy(arrays[branch])
            else:
                columns[name] = np.zeros(n, dtype=np.int64)
        return columns
