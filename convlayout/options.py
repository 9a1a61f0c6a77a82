"""Convolution shape settings and their command-line parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields, replace
from typing import Iterable

__all__ = ["ConvShape", "parse_shape"]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _trunc_div(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // denominator
    return -quotient if numerator < 0 else quotient


@dataclass(frozen=True)
class ConvShape:
    """Shape of a single square-kernel convolution layer."""

    in_c: int = 2
    in_h: int = 4
    in_w: int = 4
    kn_size: int = 3
    out_c: int = 2
    stride: int = 1
    padding: int = 0

    def __post_init__(self) -> None:
        for field in fields(self):
            value = getattr(self, field.name)
            if field.name == "padding":
                if value < 0:
                    raise ValueError(f"padding must not be negative, got {value}")
            elif value < 1:
                raise ValueError(f"{field.name} must be positive, got {value}")

    def conv_output_size(self) -> tuple[int, int]:
        """Output height and width honouring stride and padding."""
        out_h = _trunc_div(self.in_h - self.kn_size + 2 * self.padding, self.stride) + 1
        out_w = _trunc_div(self.in_w - self.kn_size + 2 * self.padding, self.stride) + 1
        if out_h < 1 or out_w < 1:
            raise ValueError(f"kernel {self.kn_size} does not fit input {self.in_h}x{self.in_w}")
        return out_h, out_w

    def valid_output_size(self) -> tuple[int, int]:
        """Output height and width of an unpadded, unit-stride convolution."""
        out_h = self.in_h - self.kn_size + 1
        out_w = self.in_w - self.kn_size + 1
        if out_h < 1 or out_w < 1:
            raise ValueError(f"kernel {self.kn_size} does not fit input {self.in_h}x{self.in_w}")
        return out_h, out_w

    def describe(self) -> str:
        return (
            f"in_c: {self.in_c}, in_h: {self.in_h}, in_w: {self.in_w}, "
            f"kn_size: {self.kn_size}, out_c: {self.out_c}, "
            f"stride: {self.stride}, padding: {self.padding}"
        )


def _leading_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_shape(argv: Iterable[str]) -> ConvShape:
    """Build a shape from positional arguments.

    Arguments are, in order: in_c in_h in_w kn_size out_c stride padding.
    Each is read as a leading integer; values that are not positive keep
    the default, and extra arguments are ignored.
    """
    names = [field.name for field in fields(ConvShape)]
    overrides = {}
    for name, text in zip(names, argv):
        value = _leading_int(text)
        if value > 0:
            overrides[name] = value
    return replace(ConvShape(), **overrides)