"""Command-line driver for the slab Monte Carlo simulation.

Usage:
    slabmc --size 512 --passes 64 --photons 1000000 --output out.ppm
    slabmc --config scenario.json --seed 7 --progress
    python -m slabmc.cli --mu-a 1.0 --mu-s 2.0 --g 0.75 --thickness 0.5
"""

import argparse
import logging
from typing import List, Optional

from slabmc.export.image import save_image
from slabmc.simulation.driver import DEFAULT_TINT, SimulationConfig, run_simulation

logger = logging.getLogger(__name__)

# CLI 参数名 → (配置段, 字段名)
_OVERRIDES = {
    "size": (None, "size"),
    "passes": (None, "n_passes"),
    "seed": (None, "seed"),
    "tint": (None, "tint"),
    "mu_a": ("props", "mu_a"),
    "mu_s": ("props", "mu_s"),
    "g": ("props", "g"),
    "thickness": ("slab", "d"),
    "slab_size": ("slab", "slab_size"),
    "photons": ("pass_cfg", "n_photons"),
    "roulette_m": ("pass_cfg", "rr_m"),
    "threshold": ("pass_cfg", "rr_threshold"),
    "absorption": ("pass_cfg", "absorption"),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slabmc",
        description="Monte Carlo light transport through a homogeneous scattering slab",
    )
    parser.add_argument("--config", help="JSON config file; CLI flags override its values")
    parser.add_argument("--size", type=int, help="output image size in pixels (default 512)")
    parser.add_argument("--passes", type=int, help="number of passes (default 64)")
    parser.add_argument("--photons", type=int, help="photons per pass (default 1000000)")
    parser.add_argument("--seed", type=int, help="random seed")
    parser.add_argument("--mu-a", dest="mu_a", type=float, help="absorption coefficient (default 1.0)")
    parser.add_argument("--mu-s", dest="mu_s", type=float, help="scattering coefficient (default 2.0)")
    parser.add_argument("--g", type=float, help="HG anisotropy in (-1, 1) (default 0.75)")
    parser.add_argument("--thickness", type=float, help="slab thickness d (default 0.5)")
    parser.add_argument("--slab-size", dest="slab_size", type=float,
                        help="lateral extent mapped onto the image (default 2.0)")
    parser.add_argument("--roulette-m", dest="roulette_m", type=int,
                        help="Russian roulette parameter m >= 2 (default 10)")
    parser.add_argument("--threshold", type=float, help="roulette weight threshold (default 0.001)")
    parser.add_argument("--absorption", choices=["subtract", "proportional"],
                        help="absorption bookkeeping (default subtract)")
    parser.add_argument("--tint", type=float, nargs=3, metavar=("R", "G", "B"),
                        help=f"display tint (default {' '.join(map(str, DEFAULT_TINT))})")
    parser.add_argument("--output", "-o", default="out.ppm", help="output image (.ppm or any matplotlib format)")
    parser.add_argument("--progress", action="store_true", help="show a per-pass progress bar")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    cfg = SimulationConfig.from_json(args.config) if args.config else SimulationConfig()
    for arg_name, (section, attr) in _OVERRIDES.items():
        value = getattr(args, arg_name)
        if value is None:
            continue
        if arg_name == "tint":
            value = tuple(value)
        target = cfg if section is None else getattr(cfg, section)
        setattr(target, attr, value)
    return cfg.validate()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        cfg = config_from_args(args)
    except (ValueError, OSError) as e:
        parser.error(str(e))

    logger.info(
        "slab: mu_a=%g mu_s=%g g=%g d=%g slab_size=%g | %d passes x %d photons, %dx%d image",
        cfg.props.mu_a, cfg.props.mu_s, cfg.props.g, cfg.slab.d, cfg.slab.slab_size,
        cfg.n_passes, cfg.pass_cfg.n_photons, cfg.size, cfg.size,
    )
    result = run_simulation(cfg, progress=args.progress)
    path = save_image(args.output, result.pixels, cfg.tint)
    logger.info("Simulation done. Image written to %s", path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
