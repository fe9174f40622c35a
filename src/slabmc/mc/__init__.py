# src/slabmc/mc/__init__.py
from .kernels_cpu import (
    sample_hg_cos_theta,
    sample_phi,
    rotate_direction,
    scatter_direction,
    sample_free_path,
    trace_photon,
)
from .photon_types import Direction, ExitSide, PhotonFate, PhotonResult
from .tallies import AccumulationGrid, EnergyTally, VizTallies

__all__ = [
    "sample_hg_cos_theta",
    "sample_phi",
    "rotate_direction",
    "scatter_direction",
    "sample_free_path",
    "trace_photon",
    "Direction",
    "ExitSide",
    "PhotonFate",
    "PhotonResult",
    "AccumulationGrid",
    "EnergyTally",
    "VizTallies",
]
