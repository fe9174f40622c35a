from slabmc.models.materials import SlabOpticalProps
from slabmc.models.slab import Slab
from slabmc.simulation.driver import SimulationConfig, run_simulation
from slabmc.simulation.run_pass import PassConfig
from slabmc.export.image import save_image

if __name__ == "__main__":
    # 参考场景，光子数缩小以便快速演示
    cfg = SimulationConfig(
        size=128,
        n_passes=4,
        seed=42,
        props=SlabOpticalProps(mu_a=1.0, mu_s=2.0, g=0.75),
        slab=Slab(d=0.5, slab_size=2.0),
        pass_cfg=PassConfig(n_photons=50000),
    )
    result = run_simulation(cfg, progress=True)
    for i, r in enumerate(result.passes, 1):
        print(f"pass {i}: Rd = {r.Rd:.4f}, Tt = {r.Tt:.4f}, Rd+Tt = {r.Rd + r.Tt:.4f}")
    save_image("slab_demo.ppm", result.pixels, cfg.tint)
