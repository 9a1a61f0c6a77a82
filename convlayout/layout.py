"""Tensor layout conversions and raw binary dumps."""

from __future__ import annotations

import os

import numpy as np

__all__ = ["chw2hwc", "oihw2hwio", "save_to_bin"]


def chw2hwc(chw) -> np.ndarray:
    """Reorder a (C, H, W) tensor into (H, W, C)."""
    array = np.asarray(chw, dtype=np.float32)
    if array.ndim != 3:
        raise ValueError(f"expected a 3-D CHW tensor, got {array.ndim} dimensions")
    return np.ascontiguousarray(array.transpose(1, 2, 0))


def oihw2hwio(oihw) -> np.ndarray:
    """Reorder a (O, I, H, W) kernel into (H, W, I, O)."""
    array = np.asarray(oihw, dtype=np.float32)
    if array.ndim != 4:
        raise ValueError(f"expected a 4-D OIHW kernel, got {array.ndim} dimensions")
    return np.ascontiguousarray(array.transpose(2, 3, 1, 0))


def save_to_bin(filename: str | os.PathLike, data) -> int:
    """Write data as raw native float32 values; return the number written.

    Raises OSError when the file cannot be opened or fully written.
    """
    flat = np.ascontiguousarray(np.asarray(data, dtype=np.float32).reshape(-1))
    payload = flat.tobytes()
    with open(filename, "wb") as handle:
        written = handle.write(payload)
    if written != len(payload):
        raise OSError(
            f"wrote {written // flat.itemsize}/{flat.size} elements to {os.fspath(filename)}"
        )
    return flat.size