# src/slabmc/simulation/run_pass.py
from __future__ import annotations
from dataclasses import dataclass
import logging

from tqdm import trange

from ..models.materials import SlabOpticalProps
from ..models.slab import Slab
from ..mc.kernels_cpu import ABSORPTION_MODES, trace_photon
from ..mc.tallies import AccumulationGrid, EnergyTally

logger = logging.getLogger(__name__)

@dataclass
class PassConfig:
    n_photons: int = 1_000_000
    rr_threshold: float = 1e-3   # 低于该权重进入俄罗斯轮盘
    rr_m: int = 10               # 存活概率 1/m，存活后 w *= m
    absorption: str = "subtract"

    def validate(self):
        if not isinstance(self.n_photons, int) or isinstance(self.n_photons, bool) or self.n_photons <= 0:
            raise ValueError(f"n_photons must be a positive integer, got {self.n_photons!r}")
        if not 0.0 < self.rr_threshold < 1.0:
            raise ValueError(f"rr_threshold must lie in (0, 1), got {self.rr_threshold}")
        if not isinstance(self.rr_m, int) or isinstance(self.rr_m, bool) or self.rr_m < 2:
            raise ValueError(f"roulette parameter m must be an integer >= 2, got {self.rr_m!r}")
        if self.absorption not in ABSORPTION_MODES:
            raise ValueError(f"absorption must be one of {ABSORPTION_MODES}, got {self.absorption!r}")
        return self


@dataclass
class PassResult:
    R_d: float          # 原始权重和
    T_d: float
    n_photons: int
    n_absorbed: int = 0
    n_dropped: int = 0

    @property
    def Rd(self) -> float:
        return self.R_d / self.n_photons

    @property
    def Tt(self) -> float:
        return self.T_d / self.n_photons


def run_pass(props: SlabOpticalProps,
             slab: Slab,
             cfg: PassConfig,
             grid: AccumulationGrid,
             rng,
             progress: bool = False,
             viz=None,
             viz_first_photons: int = 50) -> PassResult:
    """
    一个 pass：固定数量的光子依次走完随机游走。
    R_d / T_d 每个 pass 从 0 开始；grid 跨 pass 累加，结束时 n_passes += 1。

    可选 viz: 只对前 viz_first_photons 个光子采样轨迹/步长/uz。
    """
    energy = EnergyTally()

    for p_idx in trange(cfg.n_photons, disable=not progress, desc="slab MC"):
        result = trace_photon(
            props, slab, rng, grid,
            rr_threshold=cfg.rr_threshold,
            rr_m=cfg.rr_m,
            absorption=cfg.absorption,
            viz=viz if p_idx < viz_first_photons else None,
        )
        energy.add(result)

    grid.end_pass()
    if energy.n_dropped:
        logger.debug("pass %d: %d far-side exits fell outside the grid", grid.n_passes, energy.n_dropped)

    return PassResult(
        R_d=energy.R_d,
        T_d=energy.T_d,
        n_photons=energy.N,
        n_absorbed=energy.n_absorbed,
        n_dropped=energy.n_dropped,
    )
