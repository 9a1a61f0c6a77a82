[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "convlayout"
version = "0.1.0"
description = "Compare NCHW and NHWC tensor layouts for im2col + GEMM convolution"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["convolution", "im2col", "gemm", "nchw", "nhwc", "tensor layout"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
conv-layers = "convlayout.conv:main"
im2col-nchw = "convlayout.demo_nchw:main"
im2col-nhwc = "convlayout.demo_nhwc:main"

[tool.hatch.build.targets.wheel]
packages = ["convlayout"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
