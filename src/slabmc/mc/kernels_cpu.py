import math
from typing import Optional

from ..models.materials import SlabOpticalProps
from ..models.slab import Slab
from .photon_types import Direction, ExitSide, PhotonFate, PhotonResult
from .tallies import AccumulationGrid

# |uz| 与 1 的差小于该值时按极轴分支处理；一般分支在 denom→0 时数值不稳定
POLE_EPS = 1e-12

ABSORPTION_MODES = ("subtract", "proportional")


# --- HG 采样与方向旋转 ---

def sample_hg_cos_theta(g: float, u: float) -> float:
    """
    采样 HG 相函数的 cos(theta)。u~U[0,1)

    g=0 为各向同性：cosθ = 2u - 1（实际判据 |g| < 1e-6，更小的 g 反演公式精度不足，两种分布已无法区分）
    否则解析反演：μ = (1-g²)/(1-g+2gu)，cosθ = (1+g²-μ²)/(2g)
    g=±1 不在这里检查（配置阶段已拒绝）。
    """
    if abs(g) < 1e-6:
        return 2.0 * u - 1.0  # 各向同性特例
    mu = (1.0 - g*g) / (1.0 - g + 2.0*g*u)
    cos_theta = (1.0 + g*g - mu*mu) / (2.0*g)
    # 数值安全
    return max(-1.0, min(1.0, cos_theta))


def sample_phi(u: float) -> float:
    return 2.0 * math.pi * u


def rotate_direction(ux, uy, uz, cos_t, phi) -> Direction:
    """把(ux,uy,uz)按(theta,phi)偏转，返回新的单位方向。

    uz≈±1 时走极轴分支；一般分支里 denom=sqrt(1-uz²)，|uz|→1 时会失稳。
    """
    sin_t = math.sqrt(max(0.0, 1.0 - cos_t*cos_t))
    cos_p, sin_p = math.cos(phi), math.sin(phi)

    if uz > 1.0 - POLE_EPS:
        return Direction(sin_t*cos_p, sin_t*sin_p, cos_t)
    if uz < -1.0 + POLE_EPS:
        return Direction(sin_t*cos_p, -sin_t*sin_p, -cos_t)

    denom = math.sqrt(1.0 - uz*uz)
    uz_cos_p = uz * cos_p
    ux_p = sin_t * (ux*uz_cos_p - uy*sin_p) / denom + ux*cos_t
    uy_p = sin_t * (uy*uz_cos_p + ux*sin_p) / denom + uy*cos_t
    uz_p = -denom * sin_t * cos_p + uz*cos_t

    # 归一化抑制漂移
    norm = math.sqrt(ux_p*ux_p + uy_p*uy_p + uz_p*uz_p) or 1.0
    return Direction(ux_p/norm, uy_p/norm, uz_p/norm)


def scatter_direction(direction: Direction, g: float, rng) -> Direction:
    """一次散射：先抽 cosθ，再抽 φ，两个独立随机数。"""
    u1 = float(rng.random())
    u2 = float(rng.random())
    cos_t = sample_hg_cos_theta(g, u1)
    phi = sample_phi(u2)
    return rotate_direction(direction.ux, direction.uy, direction.uz, cos_t, phi)


def sample_free_path(rng, mu_t: float) -> float:
    """指数分布步长采样；ξ 不能取 0，否则步长无穷"""
    return -math.log(max(1e-12, float(rng.random()))) / mu_t


def trace_photon(
    props: SlabOpticalProps,
    slab: Slab,
    rng,
    grid: Optional[AccumulationGrid] = None,
    rr_threshold: float = 1e-3,
    rr_m: int = 10,
    absorption: str = "subtract",
    viz=None,
) -> PhotonResult:
    """
    单个光子的随机游走，直到出射或被吸收。

    初始：(0,0,0) 处沿 +z 入射，w=1。
    每一步：
      1) 采样自由程 s
      2) s 超过到界面的距离 → 出射；uz>0 为远端面 (T_d)，否则为入射面 (R_d)。
         只有远端出射且落在网格内时才写入 grid。
      3) 否则前进 s，吸收 w -= σa/σt（"proportional" 模式为 w -= w·σa/σt），截断到 >=0；
         w 恰好为 0 时立即判定为吸收
      4) w < rr_threshold → 俄罗斯轮盘：以 1/m 概率存活并 w *= m
      5) HG 散射改变方向
    出射位置直接用最后一次相互作用点的 (x, y) 投影，不再推进到界面。

    可选 viz: 提供 start_track(), log_step(s), log_uz(uz), log_pos(x,z) 接口的对象。
    """
    if absorption not in ABSORPTION_MODES:
        raise ValueError(f"unknown absorption mode {absorption!r}, expected one of {ABSORPTION_MODES}")
    proportional = absorption == "proportional"

    mu_t, g = props.mu_t, props.g
    dw = props.mu_a / mu_t
    survive_p = 1.0 / rr_m

    x, y, z = 0.0, 0.0, 0.0
    u = Direction(0.0, 0.0, 1.0)
    w = 1.0
    steps = 0

    if viz is not None:
        viz.start_track()
        viz.log_pos(x, z)

    while True:
        steps += 1
        s = sample_free_path(rng, mu_t)
        dist = slab.get_boundary_distance(z, u.uz)

        # 边界优先
        if s > dist:
            side = ExitSide.FAR if u.uz > 0.0 else ExitSide.ENTRY
            cell = None
            if side is ExitSide.FAR and grid is not None:
                cell = slab.lateral_cell(x, y, grid.size)
                if cell is not None:
                    grid.deposit(cell[0], cell[1], w)
            return PhotonResult(PhotonFate.EXITED, side, w, cell, steps)

        x += s * u.ux
        y += s * u.uy
        z += s * u.uz
        if viz is not None:
            viz.log_step(s)
            viz.log_pos(x, z)

        # 吸收
        if proportional:
            w -= w * dw
        else:
            w -= dw
        w = max(0.0, w)
        if w == 0.0:
            return PhotonResult(PhotonFate.ABSORBED, steps=steps)

        # 俄罗斯轮盘
        if w < rr_threshold:
            if float(rng.random()) > survive_p:
                return PhotonResult(PhotonFate.ABSORBED, steps=steps)
            w *= rr_m

        # 散射
        u = scatter_direction(u, g, rng)
        if viz is not None:
            viz.log_uz(u.uz)
