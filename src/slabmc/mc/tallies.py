import numpy as np

from .photon_types import ExitSide, PhotonFate, PhotonResult


class EnergyTally:
    """单次 pass 的标量统计，每个 pass 重新创建。"""

    def __init__(self):
        self.R_d = 0.0   # 入射面出射权重之和
        self.T_d = 0.0   # 远端面出射权重之和
        self.N = 0
        self.n_absorbed = 0
        self.n_exit_entry = 0
        self.n_exit_far = 0
        self.n_dropped = 0   # 远端出射但落在网格外（只计入 T_d）

    def add(self, result: PhotonResult):
        self.N += 1
        if result.fate is PhotonFate.ABSORBED:
            self.n_absorbed += 1
        elif result.side is ExitSide.FAR:
            self.T_d += float(result.weight)
            self.n_exit_far += 1
            if result.cell is None:
                self.n_dropped += 1
        else:
            self.R_d += float(result.weight)
            self.n_exit_entry += 1

    def results(self):
        scale = 1.0 / max(self.N, 1)
        return self.R_d * scale, self.T_d * scale


class AccumulationGrid:
    """
    size×size 的累加缓冲区：只在构造时清零，之后所有 pass 都往里加，从不重置。
    显示值 = records / n_passes（累计和除以已完成的 pass 数），不是滑动平均。
    """

    def __init__(self, size: int):
        size = int(size)
        if size <= 0:
            raise ValueError(f"grid size must be a positive integer, got {size}")
        self.size = size
        self.records = np.zeros((size, size), dtype=float)
        self.n_passes = 0

    def deposit(self, row: int, col: int, w: float):
        self.records[row, col] += w

    def end_pass(self):
        self.n_passes += 1

    def normalized(self) -> np.ndarray:
        if self.n_passes == 0:
            return np.zeros_like(self.records)
        return self.records / self.n_passes

    def merge(self, other: "AccumulationGrid"):
        """把另一块网格（例如单个 pass 的网格）加进来。"""
        if other.size != self.size:
            raise ValueError(f"grid size mismatch: {self.size} vs {other.size}")
        self.records += other.records
        self.n_passes += other.n_passes
        return self

    def copy(self) -> "AccumulationGrid":
        g = AccumulationGrid(self.size)
        g.records[:] = self.records
        g.n_passes = self.n_passes
        return g


# 一个轻量的可视化采样器，字段名和 tracer 的 viz 接口一致
class VizTallies:
    def __init__(self, track_trajectories=True, max_tracks=50, max_points=20000, step_stride=1):
        self.sampled_steps = []
        self.sampled_uz = []
        self.tracks = []   # 每条轨迹是 [(x,z), (x,z), ...]
        self._track_on = track_trajectories
        self._max_tracks = int(max_tracks)
        self._max_points = int(max_points)
        self._step_stride = int(step_stride)
        self._current = None
        self._n_points = 0
        self._step_count = 0

    def _ok(self):
        return self._n_points < self._max_points

    def start_track(self):
        self._current = None
        if self._track_on and len(self.tracks) < self._max_tracks:
            self._current = []
            self.tracks.append(self._current)

    def log_step(self, s: float):
        self._step_count += 1
        if self._ok() and (self._step_count % self._step_stride == 0):
            self.sampled_steps.append(float(s))
            self._n_points += 1

    def log_uz(self, uz: float):
        if self._ok():
            self.sampled_uz.append(float(uz))
            self._n_points += 1

    def log_pos(self, x: float, z: float):
        if self._current is not None and self._ok():
            self._current.append((float(x), float(z)))
            self._n_points += 1
