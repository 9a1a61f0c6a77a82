# convlayout

A small study of how tensor memory layout affects convolution computed as
im2col followed by a matrix multiplication. The same convolution is computed
in two layouts:

- **NCHW**: channels first; the image is `(C, H, W)`, the kernel is
  `(out_c, in_c, kh, kw)` and the product is `kernel @ columns`.
- **NHWC**: channels last; the image is `(H, W, C)`, the kernel is
  `(kh, kw, in_c, out_c)` and the product is `columns @ kernel`.

Both give the same numbers, only arranged differently.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Commands

All three commands take the same optional positional arguments, in this order:

```
in_c in_h in_w kn_size out_c stride padding
```

Defaults are `2 4 4 3 2 1 0`. Each argument is read as a leading integer
(`12abc` reads as 12). An argument that is missing, does not start with a
number, or is not greater than zero leaves its default in place, so padding
can only be set to a positive value here. Extra arguments are ignored.
When the kernel does not fit the input, the command prints a message to
standard error and exits with status 1.

### `conv-layers`

Fills an input and a kernel with seeded random values drawn uniformly from
`[-1, 1)`, runs the convolution in both layouts (honouring stride and
padding), and reports the time each took. When the output has fewer than
1024 elements it prints both results. It writes these files to the current
directory:

- `meta.txt`: the shapes, output size, stride and padding used
- `in_buf.bin`, `kn_buf.bin`: the input (CHW) and kernel (OIHW) as raw
  native-endian float32
- `nchw_out.bin`, `nhwc_out.bin`: the two outputs as raw native-endian float32

If a file cannot be written, a message goes to standard error and the
command still finishes.

```
conv-layers 3 32 32 3 16 1 1
```

### `im2col-nchw` and `im2col-nhwc`

Fill an input with `1, 2, 3, ...` (in CHW order; `im2col-nhwc` then reorders
it to HWC), unfold it with im2col in the given layout, report the time, and
print the input and the resulting column matrix, so the arrangement of each
layout can be read off directly. Nothing is printed beyond the timing when
the input has more than 1024 elements.

These two commands always size the output as `in - kn_size + 1` in each
direction; stride and padding are passed to the unfolding but do not change
the output size. `out_c` is accepted and ignored.

```
im2col-nchw
im2col-nhwc 2 5 5 3
```

## Library use

```python
import numpy as np
from convlayout.conv import conv_nchw, conv_nhwc
from convlayout.layout import chw2hwc, oihw2hwio

image = np.random.rand(2, 4, 4).astype(np.float32)       # (C, H, W)
kernel = np.random.rand(3, 2, 3, 3).astype(np.float32)   # (O, I, H, W)

out_nchw = conv_nchw(image, kernel, stride=1, padding=0)              # (O, H, W)
out_nhwc = conv_nhwc(chw2hwc(image), oihw2hwio(kernel), 1, 0)         # (H, W, O)
assert np.allclose(chw2hwc(out_nchw), out_nhwc, atol=1e-5)
```

Modules:

- `convlayout.im2col`: `im2col_nchw(image, kn_h, kn_w, padding, stride, out_h, out_w)`
  returns a `(C*kn_h*kn_w, out_h*out_w)` matrix; `im2col_nhwc(...)` with the
  same arguments returns an `(out_h*out_w, kn_h*kn_w*C)` matrix. Positions
  outside the image read as zero.
- `convlayout.layout`: `chw2hwc`, `oihw2hwio`, and `save_to_bin(filename, data)`,
  which writes raw float32 values and returns how many were written.
- `convlayout.options`: `ConvShape`, a frozen dataclass holding the seven
  settings with `conv_output_size()`, `valid_output_size()` and `describe()`,
  and `parse_shape(argv)`, which reads the command-line arguments into one.
- `convlayout.conv`: `conv_nchw`, `conv_nhwc`, `random_tensors(shape, seed)`,
  `run(shape, directory)` and the `main` behind `conv-layers`.
- `convlayout.demo_nchw`, `convlayout.demo_nhwc`: `format_report(shape)`
  returns the printed report as a string; `main` backs the commands.

Invalid arguments (non-positive kernel size or stride, negative padding,
wrong number of dimensions, mismatched channels, a kernel larger than the
padded input) raise `ValueError`.

## Limits

Only a single image is handled (no batch dimension), kernels passed through
`ConvShape` and the commands are square, and there is no dilation or
grouping. The random values of `conv-layers` come from NumPy's generator, so
they are reproducible for a given seed but are not tied to any other
program's random sequence.