# examples/visualize_tracks.py
import numpy as np
import matplotlib.pyplot as plt

from slabmc.mc.kernels_cpu import sample_hg_cos_theta
from slabmc.mc.tallies import AccumulationGrid, VizTallies
from slabmc.models.materials import SlabOpticalProps
from slabmc.models.scattering import hg_phase_function
from slabmc.models.slab import Slab
from slabmc.simulation.run_pass import PassConfig, run_pass


def collect_single_pass(props, slab, n_photons=5000, seed=42, max_tracks=60):
    """跑一个 pass，采集步长、uz、轨迹与 Rd/Tt。"""
    viz = VizTallies(track_trajectories=True, max_tracks=max_tracks, max_points=50000)
    grid = AccumulationGrid(128)
    res = run_pass(props, slab, PassConfig(n_photons=n_photons), grid,
                   np.random.default_rng(seed), viz=viz, viz_first_photons=max_tracks)
    return viz, grid, res


def plot_all_in_one(viz, grid, props, slab):
    fig, axes = plt.subplots(2, 2, figsize=(11, 8))

    # 1) Step length distribution
    ax = axes[0, 0]
    s = np.asarray(viz.sampled_steps, dtype=float)
    if s.size == 0:
        ax.text(0.5, 0.5, "no steps collected", ha="center", va="center")
    else:
        ax.hist(s, bins=60, density=True, alpha=0.6, label="sampled (inside slab)")
        xs = np.linspace(0.0, max(1e-6, np.percentile(s, 99.5)), 300)
        ax.plot(xs, props.mu_t * np.exp(-props.mu_t * xs), lw=2, label=r"Exp($\mu_t$)")
        ax.set_xlabel("step s"); ax.set_ylabel("pdf")
        ax.set_title("Step length distribution"); ax.legend()

    # 2) HG sampler vs analytic phase function
    ax = axes[0, 1]
    rng = np.random.default_rng(0)
    cos_t = [sample_hg_cos_theta(props.g, float(rng.random())) for _ in range(100000)]
    ax.hist(cos_t, bins=80, density=True, alpha=0.6, label="sampled")
    c = np.linspace(-1.0, 1.0, 400)
    ax.plot(c, hg_phase_function(c, props.g), lw=2, label="HG p(cosθ)")
    ax.set_yscale("log"); ax.set_xlabel("cosθ"); ax.legend()
    ax.set_title(f"HG sampling (g={props.g})")

    # 3) Photon tracks (x–z)
    ax = axes[1, 0]
    for t in viz.tracks:
        if len(t) > 1:
            x, z = zip(*t)
            ax.plot(x, z, lw=0.7)
    ax.axhline(0.0, color="k", lw=0.8); ax.axhline(slab.d, color="k", lw=0.8)
    ax.invert_yaxis()  # z 向下
    ax.set_xlabel("x"); ax.set_ylabel("z")
    ax.set_title("Sample photon tracks (x–z)")

    # 4) Transmitted weight map
    ax = axes[1, 1]
    half = slab.slab_size / 2.0
    im = ax.imshow(grid.normalized(), extent=(-half, half, half, -half), cmap="viridis")
    fig.colorbar(im, ax=ax)
    ax.set_title("Far-side exit weight")

    plt.tight_layout()
    return fig


if __name__ == "__main__":
    props = SlabOpticalProps(mu_a=1.0, mu_s=2.0, g=0.75)
    slab = Slab(d=0.5, slab_size=2.0)
    viz, grid, res = collect_single_pass(props, slab)
    print(f"Rd={res.Rd:.4f}, Tt={res.Tt:.4f}, absorbed photons={res.n_absorbed}")
    plot_all_in_one(viz, grid, props, slab)
    plt.show()
