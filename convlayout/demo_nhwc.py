"""Show the column matrix that NHWC lowering builds from a counting tensor."""

from __future__ import annotations

import sys
import time

import numpy as np

from .im2col import im2col_nhwc
from .layout import chw2hwc
from .options import ConvShape, parse_shape

__all__ = ["format_report", "main"]

_DISPLAY_LIMIT = 1024


def _header(shape: ConvShape) -> str:
    return (
        f"in_c: {shape.in_c}, in_h: {shape.in_h}, in_w: {shape.in_w}, "
        f"kn: {shape.kn_size}, stride: {shape.stride}, padding: {shape.padding}"
    )


def _input(shape: ConvShape) -> np.ndarray:
    count = shape.in_c * shape.in_h * shape.in_w
    chw = np.arange(1, count + 1, dtype=np.float32).reshape(shape.in_c, shape.in_h, shape.in_w)
    return chw2hwc(chw)


def _columns(shape: ConvShape, image: np.ndarray) -> np.ndarray:
    out_h, out_w = shape.valid_output_size()
    return im2col_nhwc(
        image, shape.kn_size, shape.kn_size, shape.padding, shape.stride, out_h, out_w
    )


def _row(values) -> str:
    return "".join(f"{value:<4.0f}" for value in values)


def format_report(shape: ConvShape) -> str:
    """Render the HWC input tensor and its column matrix; empty for large inputs."""
    if shape.in_c * shape.in_h * shape.in_w > _DISPLAY_LIMIT:
        return ""
    image = _input(shape)
    columns = _columns(shape, image)
    lines = [f"In NHWC ({shape.in_h}, {shape.in_w}, {shape.in_c})"]
    lines.extend("".join(_row(pixel) + "\t" for pixel in row) for row in image)
    lines.append("")
    lines.append(f"data_col {columns.shape[0]} x {columns.shape[1]}")
    lines.extend(_row(row) for row in columns)
    return "\n".join(lines) + "\n"


def main(argv=None) -> int:
    """Arguments: in_c in_h in_w kn_size out_c stride padding."""
    shape = parse_shape(sys.argv[1:] if argv is None else argv)
    print(_header(shape))
    try:
        image = _input(shape)
        start = time.perf_counter()
        _columns(shape, image)
        elapsed = (time.perf_counter() - start) * 1000.0
        report = format_report(shape)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    print(f"Elapsed time: {elapsed:.2f} ms")
    print(report, end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())