from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Tuple


class Direction(NamedTuple):
    """单位传播方向（不可变），散射时返回新值而不是原地修改"""
    ux: float
    uy: float
    uz: float

    def norm(self) -> float:
        return (self.ux * self.ux + self.uy * self.uy + self.uz * self.uz) ** 0.5


class PhotonFate(Enum):
    PROPAGATING = "propagating"
    EXITED = "exited"
    ABSORBED = "absorbed"


class ExitSide(Enum):
    ENTRY = "entry"   # z=0 面出射 → R_d
    FAR = "far"       # z=d 面出射 → T_d（唯一写入空间网格的一侧）


@dataclass
class PhotonResult:
    fate: PhotonFate
    side: Optional[ExitSide] = None
    weight: float = 0.0                       # 计入 R_d / T_d 的终态权重
    cell: Optional[Tuple[int, int]] = None    # 被记入的网格 (row, col)
    steps: int = 0
