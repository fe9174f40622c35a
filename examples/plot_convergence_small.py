# examples/plot_convergence_small.py
import numpy as np
import matplotlib.pyplot as plt

from slabmc.simulation.driver import SimulationConfig, run_simulation
from slabmc.simulation.run_pass import PassConfig

def main():
    cfg = SimulationConfig(size=64, n_passes=16, seed=7, pass_cfg=PassConfig(n_photons=5000))

    # 每个 pass 之后显示缓冲的中心像素和总和：累计和 / pass 数 应该收敛
    center, totals, rd_tt = [], [], []
    def on_pass(i, res, pixels):
        center.append(float(pixels[cfg.size // 2, cfg.size // 2]))
        totals.append(float(pixels.sum()))
        rd_tt.append(res.Rd + res.Tt)

    run_simulation(cfg, on_pass=on_pass)
    passes = np.arange(1, cfg.n_passes + 1)

    fig, axes = plt.subplots(1, 2, figsize=(11, 4))
    ax = axes[0]
    ax.plot(passes, center, marker='o', label='center pixel')
    ax.plot(passes, totals, marker='s', label='Σ pixels')
    ax.set_xlabel('passes'); ax.set_ylabel('normalized value')
    ax.set_title('Cumulative-sum / pass-count estimate'); ax.legend(); ax.grid(True)

    ax = axes[1]
    ax.plot(passes, rd_tt, marker='o')
    ax.axhline(np.mean(rd_tt), linestyle='--')
    ax.set_xlabel('pass'); ax.set_ylabel('Rd + Tt')
    ax.set_title('Per-pass exit fraction'); ax.grid(True)

    plt.tight_layout()
    plt.show()

if __name__ == "__main__":
    main()
