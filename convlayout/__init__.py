"""Convolution via im2col and GEMM in NCHW and NHWC tensor layouts."""

__version__ = "0.1.0"