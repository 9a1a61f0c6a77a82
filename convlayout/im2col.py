"""Lowering of image tensors into column matrices for GEMM-based convolution."""

from __future__ import annotations

import numpy as np

__all__ = ["im2col_nchw", "im2col_nhwc"]


def _check_params(kn_h: int, kn_w: int, padding: int, stride: int, out_h: int, out_w: int) -> None:
    if kn_h < 1 or kn_w < 1:
        raise ValueError(f"kernel size must be positive, got {kn_h}x{kn_w}")
    if stride < 1:
        raise ValueError(f"stride must be positive, got {stride}")
    if padding < 0:
        raise ValueError(f"padding must not be negative, got {padding}")
    if out_h < 0 or out_w < 0:
        raise ValueError(f"output size must not be negative, got {out_h}x{out_w}")


def _as_image(image) -> np.ndarray:
    array = np.asarray(image, dtype=np.float32)
    if array.ndim != 3:
        raise ValueError(f"expected a 3-D image tensor, got {array.ndim} dimensions")
    if 0 in array.shape:
        raise ValueError(f"image tensor must not be empty, got shape {array.shape}")
    return array


def _window_indices(out_size: int, kn_size: int, stride: int, padding: int, limit: int):
    """Return clipped source indices of shape (out_size, kn_size) and their validity mask."""
    index = np.arange(out_size)[:, None] * stride + np.arange(kn_size)[None, :] - padding
    valid = (index >= 0) & (index < limit)
    return np.clip(index, 0, limit - 1), valid


def _gather(image_hw, in_h, in_w, kn_h, kn_w, padding, stride, out_h, out_w):
    """Gather windows; yields array indexed (out_h, kn_h, out_w, kn_w, ...) with zeros outside."""
    ih, vh = _window_indices(out_h, kn_h, stride, padding, in_h)
    iw, vw = _window_indices(out_w, kn_w, stride, padding, in_w)
    mask = vh[:, :, None, None] & vw[None, None, :, :]
    return ih[:, :, None, None], iw[None, None, :, :], mask


def im2col_nchw(image, kn_h, kn_w, padding, stride, out_h, out_w) -> np.ndarray:
    """Lower a (C, H, W) image into a (C*kn_h*kn_w, out_h*out_w) column matrix.

    Positions that fall outside the image read as zero.
    """
    _check_params(kn_h, kn_w, padding, stride, out_h, out_w)
    data = _as_image(image)
    in_c, in_h, in_w = data.shape
    rows, cols, mask = _gather(data, in_h, in_w, kn_h, kn_w, padding, stride, out_h, out_w)
    # (C, out_h, kn_h, out_w, kn_w)
    windows = data[:, rows, cols] * mask[None]
    windows = windows.transpose(0, 2, 4, 1, 3)
    return np.ascontiguousarray(windows.reshape(in_c * kn_h * kn_w, out_h * out_w), dtype=np.float32)


def im2col_nhwc(image, kn_h, kn_w, padding, stride, out_h, out_w) -> np.ndarray:
    """Lower an (H, W, C) image into an (out_h*out_w, kn_h*kn_w*C) column matrix.

    Positions that fall outside the image read as zero.
    """
    _check_params(kn_h, kn_w, padding, stride, out_h, out_w)
    data = _as_image(image)
    in_h, in_w, in_c = data.shape
    rows, cols, mask = _gather(data, in_h, in_w, kn_h, kn_w, padding, stride, out_h, out_w)
    # (out_h, kn_h, out_w, kn_w, C)
    windows = data[rows, cols, :] * mask[..., None]
    windows = windows.transpose(0, 2, 1, 3, 4)
    return np.ascontiguousarray(windows.reshape(out_h * out_w, kn_h * kn_w * in_c), dtype=np.float32)