# src/slabmc/export/image.py
from pathlib import Path

import numpy as np
import matplotlib.image as mpimg


def tint_rgb(pixels, tint) -> np.ndarray:
    """
    归一化缓冲 → (h, w, 3) uint8：每个字节 = floor(255 · tint_c · clamp(p, 0, 1))
    """
    p = np.clip(np.asarray(pixels, dtype=float), 0.0, 1.0)
    if p.ndim != 2:
        raise ValueError(f"pixels must be a 2D buffer, got shape {p.shape}")
    tint = np.asarray(tint, dtype=float).reshape(1, 1, 3)
    return np.floor(255.0 * tint * p[:, :, None]).astype(np.uint8)


def encode_ppm(pixels, tint) -> bytes:
    """二进制 PPM (P6)：头 'P6\\n<w> <h>\\n255\\n'，随后逐行 RGB 三元组"""
    rgb = tint_rgb(pixels, tint)
    h, w = rgb.shape[:2]
    header = f"P6\n{w} {h}\n255\n".encode("ascii")
    return header + rgb.tobytes()


def write_ppm(path, pixels, tint):
    path = Path(path)
    with open(path, "wb") as f:
        f.write(encode_ppm(pixels, tint))
    return path


def save_image(path, pixels, tint):
    """.ppm 走 PPM 编码，其他后缀 (png 等) 交给 matplotlib。"""
    path = Path(path)
    if path.suffix.lower() == ".ppm":
        return write_ppm(path, pixels, tint)
    mpimg.imsave(path, tint_rgb(pixels, tint))
    return path
