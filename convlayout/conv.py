"""GEMM-based convolution in NCHW and NHWC layouts, with a timing driver."""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path

import numpy as np

from .im2col import im2col_nchw, im2col_nhwc
from .layout import chw2hwc, oihw2hwio, save_to_bin
from .options import ConvShape, parse_shape

__all__ = ["conv_nchw", "conv_nhwc", "random_tensors", "run", "main"]

DEFAULT_SEED = 15
_DISPLAY_LIMIT = 1024


def _output_extent(size: int, kn_size: int, stride: int, padding: int) -> int:
    span = size - kn_size + 2 * padding
    quotient = abs(span) // stride
    out = (quotient if span >= 0 else -quotient) + 1
    if out < 1:
        raise ValueError(f"kernel {kn_size} does not fit input extent {size}")
    return out


def _check_stride_padding(stride: int, padding: int) -> None:
    if stride < 1:
        raise ValueError(f"stride must be positive, got {stride}")
    if padding < 0:
        raise ValueError(f"padding must not be negative, got {padding}")


def conv_nchw(image, kernel, stride, padding) -> np.ndarray:
    """Convolve a (C, H, W) image with an (O, I, kh, kw) kernel; return (O, out_h, out_w)."""
    _check_stride_padding(stride, padding)
    data = np.asarray(image, dtype=np.float32)
    weights = np.asarray(kernel, dtype=np.float32)
    if data.ndim != 3:
        raise ValueError(f"expected a 3-D CHW image, got {data.ndim} dimensions")
    if weights.ndim != 4:
        raise ValueError(f"expected a 4-D OIHW kernel, got {weights.ndim} dimensions")
    out_c, in_c, kn_h, kn_w = weights.shape
    if in_c != data.shape[0]:
        raise ValueError(f"kernel expects {in_c} input channels, image has {data.shape[0]}")
    out_h = _output_extent(data.shape[1], kn_h, stride, padding)
    out_w = _output_extent(data.shape[2], kn_w, stride, padding)
    columns = im2col_nchw(data, kn_h, kn_w, padding, stride, out_h, out_w)
    result = weights.reshape(out_c, -1) @ columns
    return result.reshape(out_c, out_h, out_w).astype(np.float32, copy=False)


def conv_nhwc(image, kernel, stride, padding) -> np.ndarray:
    """Convolve an (H, W, C) image with a (kh, kw, I, O) kernel; return (out_h, out_w, O)."""
    _check_stride_padding(stride, padding)
    data = np.asarray(image, dtype=np.float32)
    weights = np.asarray(kernel, dtype=np.float32)
    if data.ndim != 3:
        raise ValueError(f"expected a 3-D HWC image, got {data.ndim} dimensions")
    if weights.ndim != 4:
        raise ValueError(f"expected a 4-D HWIO kernel, got {weights.ndim} dimensions")
    kn_h, kn_w, in_c, out_c = weights.shape
    if in_c != data.shape[2]:
        raise ValueError(f"kernel expects {in_c} input channels, image has {data.shape[2]}")
    out_h = _output_extent(data.shape[0], kn_h, stride, padding)
    out_w = _output_extent(data.shape[1], kn_w, stride, padding)
    columns = im2col_nhwc(data, kn_h, kn_w, padding, stride, out_h, out_w)
    result = columns @ weights.reshape(-1, out_c)
    return result.reshape(out_h, out_w, out_c).astype(np.float32, copy=False)


def random_tensors(shape: ConvShape, seed=DEFAULT_SEED) -> tuple[np.ndarray, np.ndarray]:
    """Return a CHW image and an OIHW kernel with values drawn uniformly from [-1, 1)."""
    rng = np.random.default_rng(seed)
    image = rng.uniform(-1.0, 1.0, (shape.in_c, shape.in_h, shape.in_w)).astype(np.float32)
    kernel = rng.uniform(
        -1.0, 1.0, (shape.out_c, shape.in_c, shape.kn_size, shape.kn_size)
    ).astype(np.float32)
    return image, kernel


def _print_channels_first(out: np.ndarray) -> None:
    out_c, out_h, out_w = out.shape
    print(f"nchw_out_buf ({out_c}, {out_h}, {out_w})")
    for plane in out:
        line = "".join("".join(f"{value:<8.3f}" for value in row) + "\t" for row in plane)
        print(line)


def _print_channels_last(out: np.ndarray) -> None:
    out_h, out_w, out_c = out.shape
    print(f"nhwc_out_buf ({out_h}, {out_w}, {out_c})")
    for row in out:
        line = "".join("".join(f"{value:<8.3f}" for value in pixel) + "\t" for pixel in row)
        print(line)


def _save_results(shape: ConvShape, directory: Path, image, kernel, nchw_out, nhwc_out) -> None:
    out_h, out_w = nchw_out.shape[1:]
    try:
        with open(directory / "meta.txt", "w") as handle:
            handle.write(
                f"in_c: {shape.in_c}, in_h: {shape.in_h}, in_w: {shape.in_w}, "
                f"kn_size: {shape.kn_size}, out_c: {shape.out_c}, out_h: {out_h}, "
                f"out_w: {out_w}, stride: {shape.stride}, padding: {shape.padding}\n"
            )
    except OSError:
        print("Failed saving results", file=sys.stderr)
        return
    dumps = {
        "in_buf.bin": image,
        "kn_buf.bin": kernel,
        "nchw_out.bin": nchw_out,
        "nhwc_out.bin": nhwc_out,
    }
    for name, data in dumps.items():
        try:
            save_to_bin(directory / name, data)
        except OSError as exc:
            print(f"Error: {exc}", file=sys.stderr)


def run(shape: ConvShape, directory: str | os.PathLike) -> tuple[np.ndarray, np.ndarray]:
    """Run both layouts on the same random data, print timings and save the results.

    Returns the NCHW output (O, H, W) and the NHWC output (H, W, O).
    """
    shape.conv_output_size()
    image, kernel = random_tensors(shape)

    start = time.perf_counter()
    nchw_out = conv_nchw(image, kernel, shape.stride, shape.padding)
    print(f"Elapsed time for NCHW layout: {(time.perf_counter() - start) * 1000.0:.2f} ms")

    hwc_image = chw2hwc(image)
    hwio_kernel = oihw2hwio(kernel)

    start = time.perf_counter()
    nhwc_out = conv_nhwc(hwc_image, hwio_kernel, shape.stride, shape.padding)
    print(f"Elapsed time for NHWC layout: {(time.perf_counter() - start) * 1000.0:.2f} ms")

    if nchw_out.size < _DISPLAY_LIMIT:
        _print_channels_first(nchw_out)
        _print_channels_last(nhwc_out)

    _save_results(shape, Path(directory), image, kernel, nchw_out, nhwc_out)
    return nchw_out, nhwc_out


def main(argv=None) -> int:
    """Compare NCHW and NHWC convolution; arguments: in_c in_h in_w kn_size out_c stride padding."""
    shape = parse_shape(sys.argv[1:] if argv is None else argv)
    print(shape.describe())
    try:
        run(shape, Path.cwd())
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())