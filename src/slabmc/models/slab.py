# src/slabmc/models/slab.py
import math
from dataclasses import dataclass
from typing import Optional, Tuple

@dataclass
class Slab:
    """均匀平板几何：z=0 为入射面，z=d 为远端面。"""
    d: float = 0.5           # 厚度
    slab_size: float = 2.0   # 横向尺寸，只用于出射位置 → 网格映射

    def validate(self):
        if not self.d > 0.0 or math.isinf(self.d):
            raise ValueError(f"slab thickness d must be finite and > 0, got {self.d}")
        if not self.slab_size > 0.0 or math.isinf(self.slab_size):
            raise ValueError(f"slab_size must be finite and > 0, got {self.slab_size}")
        return self

    def get_boundary_distance(self, z: float, uz: float) -> float:
        """
        沿当前方向到最近界面的距离。
        约定：uz>0 走向远端面 z=d；uz<0 走向入射面 z=0；uz=0 本步不可能出射（返回 inf）。
        """
        if uz > 0.0:
            return (self.d - z) / uz
        if uz < 0.0:
            return -z / uz
        return math.inf

    def lateral_cell(self, x: float, y: float, size: int) -> Optional[Tuple[int, int]]:
        """
        把出射点 (x, y) 投影到 size×size 网格，返回 (row, col)=(yi, xi)。
        平板中心 (0,0) 对应网格中心；越界返回 None。
        """
        xi = math.floor((x + self.slab_size / 2.0) / self.slab_size * size)
        yi = math.floor((y + self.slab_size / 2.0) / self.slab_size * size)
        if 0 <= xi < size and 0 <= yi < size:
            return yi, xi
        return None
