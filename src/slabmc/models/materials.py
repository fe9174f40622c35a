import math
from dataclasses import dataclass

@dataclass
class SlabOpticalProps:
    mu_a: float = 1.0    # 吸收系数 σ_a
    mu_s: float = 2.0    # 散射系数 σ_s
    g: float = 0.75      # 各向异性因子 (-1, 1)

    @property
    def mu_t(self) -> float:
        return self.mu_a + self.mu_s

    @property
    def albedo(self) -> float:
        return self.mu_s / self.mu_t

    def validate(self):
        """配置阶段校验，运行时不再逐光子检查。"""
        if not (math.isfinite(self.mu_a) and math.isfinite(self.mu_s)):
            raise ValueError(f"mu_a and mu_s must be finite, got mu_a={self.mu_a}, mu_s={self.mu_s}")
        if self.mu_a < 0.0 or self.mu_s < 0.0:
            raise ValueError(f"mu_a and mu_s must be >= 0, got mu_a={self.mu_a}, mu_s={self.mu_s}")
        if not self.mu_t > 0.0:
            raise ValueError("mu_t = mu_a + mu_s must be > 0")
        # g = ±1 会让 HG 反演除零
        if not -1.0 < self.g < 1.0:
            raise ValueError(f"g must lie strictly inside (-1, 1), got {self.g}")
        return self
