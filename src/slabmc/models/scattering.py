# src/slabmc/models/scattering.py

import numpy as np

def hg_phase_function(cos_theta, g: float):
    """
    Henyey-Greenstein 相函数（对 cosθ 归一化的概率密度）

    参数:
        cos_theta: 散射角余弦，标量或数组，取值 [-1, 1]
        g: 各向异性因子 (-1, 1)

    返回:
        p(cosθ) = (1 - g²) / (2 (1 + g² - 2g cosθ)^1.5)，在 [-1, 1] 上积分为 1
    """
    cos_theta = np.asarray(cos_theta, dtype=float)
    numerator = 1.0 - g**2
    denominator = 2.0 * (1.0 + g**2 - 2.0 * g * cos_theta) ** 1.5
    return numerator / denominator


def hg_cdf(cos_theta, g: float):
    """
    HG 分布的累积分布 P(cosθ' <= cosθ)，g=0 时退化为 (cosθ + 1)/2。
    用于对采样器做分箱检验。
    """
    cos_theta = np.asarray(cos_theta, dtype=float)
    if abs(g) < 1e-6:
        return 0.5 * (cos_theta + 1.0)
    return (1.0 - g**2) / (2.0 * g) * (1.0 / np.sqrt(1.0 + g**2 - 2.0 * g * cos_theta) - 1.0 / (1.0 + g))
