# src/slabmc/simulation/driver.py
from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Callable, List, Optional, Tuple
import json
import logging

import numpy as np

from ..models.materials import SlabOpticalProps
from ..models.slab import Slab
from ..mc.tallies import AccumulationGrid
from .run_pass import PassConfig, PassResult, run_pass

logger = logging.getLogger(__name__)

DEFAULT_TINT = (0.0, 0.77, 0.80)


@dataclass
class SimulationConfig:
    size: int = 512               # 输出图像边长（像素）
    n_passes: int = 64
    seed: Optional[int] = None    # None → 每次运行不同
    tint: Tuple[float, float, float] = DEFAULT_TINT
    props: SlabOpticalProps = field(default_factory=SlabOpticalProps)
    slab: Slab = field(default_factory=Slab)
    pass_cfg: PassConfig = field(default_factory=PassConfig)

    def validate(self):
        if not isinstance(self.size, int) or isinstance(self.size, bool) or self.size <= 0:
            raise ValueError(f"size must be a positive integer, got {self.size!r}")
        if not isinstance(self.n_passes, int) or isinstance(self.n_passes, bool) or self.n_passes <= 0:
            raise ValueError(f"n_passes must be a positive integer, got {self.n_passes!r}")
        if len(self.tint) != 3 or not all(0.0 <= c <= 1.0 for c in self.tint):
            raise ValueError(f"tint must be three channels in [0, 1], got {self.tint!r}")
        self.props.validate()
        self.slab.validate()
        self.pass_cfg.validate()
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "SimulationConfig":
        """
        嵌套字典 → 配置，例如
        {"size": 256, "props": {"mu_a": 1.0}, "slab": {"d": 0.5}, "pass": {"n_photons": 10000}}
        未知键直接报错。
        """
        if not isinstance(data, dict):
            raise ValueError(f"config must be a mapping, got {type(data).__name__}")
        data = dict(data)
        nested = {
            "props": (SlabOpticalProps, data.pop("props", {})),
            "slab": (Slab, data.pop("slab", {})),
            "pass_cfg": (PassConfig, data.pop("pass", {})),
        }
        kwargs = {}
        for name, (klass, sub) in nested.items():
            kwargs[name] = klass(**_checked(klass, sub))
        top = _checked(cls, data, exclude=set(nested))
        if "tint" in top:
            top["tint"] = tuple(float(c) for c in top["tint"])
        kwargs.update(top)
        return cls(**kwargs)

    @classmethod
    def from_json(cls, path) -> "SimulationConfig":
        with open(path, "r") as f:
            return cls.from_dict(json.load(f))


def _checked(klass, data: dict, exclude=()) -> dict:
    if not isinstance(data, dict):
        raise ValueError(f"{klass.__name__} section must be a mapping, got {type(data).__name__}")
    allowed = {f.name for f in fields(klass)} - set(exclude)
    unknown = set(data) - allowed
    if unknown:
        raise ValueError(f"unknown {klass.__name__} keys: {sorted(unknown)}")
    return dict(data)


@dataclass
class SimulationResult:
    grid: AccumulationGrid
    pixels: np.ndarray                        # 最近一次归一化后的显示缓冲
    passes: List[PassResult] = field(default_factory=list)


def run_simulation(cfg: SimulationConfig,
                   rng=None,
                   progress: bool = False,
                   on_pass: Optional[Callable[[int, PassResult, np.ndarray], None]] = None,
                   ) -> SimulationResult:
    """
    重复 n_passes 次 pass，全部写入同一块持久网格；
    每个 pass 结束后重新计算显示缓冲 pixels = records / 已完成 pass 数。
    """
    cfg.validate()
    if rng is None:
        rng = np.random.default_rng(cfg.seed)

    grid = AccumulationGrid(cfg.size)
    pixels = grid.normalized()
    passes = []

    for i in range(1, cfg.n_passes + 1):
        res = run_pass(cfg.props, cfg.slab, cfg.pass_cfg, grid, rng, progress=progress)
        pixels = grid.normalized()
        passes.append(res)
        logger.info("pass %d/%d: Rd %f Tt %f", i, cfg.n_passes, res.Rd, res.Tt)
        if on_pass is not None:
            on_pass(i, res, pixels)

    return SimulationResult(grid=grid, pixels=pixels, passes=passes)
