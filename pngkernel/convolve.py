"""3x3 convolution kernels applied to single-channel pixel planes."""

from __future__ import annotations

import math
import struct
from collections.abc import Sequence

from pngkernel.image import Kernel

_F32 = struct.Struct("<f")


def _f32(value: float) -> float:
    """Round ``value`` to the nearest single-precision float."""
    return _F32.unpack(_F32.pack(value))[0]


_KERNEL_WEIGHTS: dict[Kernel, tuple[tuple[float, ...], ...]] = {
    Kernel.SOBEL_X: ((-1, 0, 1), (-2, 0, 2), (-1, 0, 1)),
    Kernel.SOBEL_Y: ((-1, -2, -1), (0, 0, 0), (1, 2, 1)),
    Kernel.GAUSSIAN: (
        (1 / 16, 2 / 16, 1 / 16),
        (2 / 16, 4 / 16, 2 / 16),
        (1 / 16, 2 / 16, 1 / 16),
    ),
    Kernel.BLUR: ((1 / 9,) * 3,) * 3,
    Kernel.LAPLACIAN: ((0, -1, 0), (-1, 4, -1), (0, -1, 0)),
    Kernel.SHARPEN: ((0, -1, 0), (-1, 5, -1), (0, -1, 0)),
}

# Weights held at single precision, as the arithmetic is done in floats.
_WEIGHTS_F32 = {
    kernel: tuple(tuple(_f32(w) for w in row) for row in rows)
    for kernel, rows in _KERNEL_WEIGHTS.items()
}

_OFFSETS = (-1, 0, 1)


def _check_plane(pixels: Sequence[bytes]) -> int:
    if not pixels:
        return 0
    width = len(pixels[0])
    if any(len(row) != width for row in pixels):
        raise ValueError("all rows of a pixel plane must have the same length")
    return width


def _sobel_magnitude(pixels: Sequence[bytes], y: int, x: int) -> int:
    sx = _KERNEL_WEIGHTS[Kernel.SOBEL_X]
    sy = _KERNEL_WEIGHTS[Kernel.SOBEL_Y]
    gx = 0
    gy = 0
    for ky in _OFFSETS:
        row = pixels[y + ky]
        for kx in _OFFSETS:
            pixel = row[x + kx]
            gx = int(gx + pixel * sx[ky + 1][kx + 1])
            gy = int(gy + pixel * sy[ky + 1][kx + 1])
    return min(int(math.sqrt(gx * gx + gy * gy)), 0xFF)


def _weighted_sum(
    pixels: Sequence[bytes], y: int, x: int, weights: tuple[tuple[float, ...], ...]
) -> int:
    total = 0.0
    for ky in _OFFSETS:
        row = pixels[y + ky]
        weight_row = weights[ky + 1]
        for kx in _OFFSETS:
            total = _f32(total + _f32(row[x + kx] * weight_row[kx + 1]))
    total = min(max(total, 0.0), 255.0)
    return int(total)


def apply_convolution(pixels: Sequence[bytes], kernel: int) -> list[bytearray]:
    """Convolve a single-channel plane with ``kernel`` and return a new plane.

    Interior pixels are filtered and clamped to 0..255; the outermost rows and
    columns are copied from the input unchanged. ``Kernel.NONE`` (or any value
    outside the kernel table) returns a copy of the input.
    """
    width = _check_plane(pixels)
    height = len(pixels)
    output = [bytearray(row) for row in pixels]

    try:
        kernel = Kernel(kernel)
    except ValueError:
        return output
    if kernel == Kernel.NONE:
        return output

    for y in range(1, height - 1):
        out_row = output[y]
        for x in range(1, width - 1):
            if kernel == Kernel.SOBEL_COMBINED:
                out_row[x] = _sobel_magnitude(pixels, y, x)
            else:
                out_row[x] = _weighted_sum(pixels, y, x, _WEIGHTS_F32[kernel])
    return output


def apply_kernel_steps(
    pixels: Sequence[bytes], kernel: int, steps: int
) -> list[bytearray]:
    """Apply ``kernel`` to the plane ``steps`` times in succession.

    Each pass works on the result of the previous one. Zero steps return a
    copy of the input.
    """
    if steps < 0:
        raise ValueError(f"steps must not be negative, got {steps}")
    _check_plane(pixels)
    current = [bytearray(row) for row in pixels]
    for _ in range(steps):
        current = apply_convolution(current, kernel)
    return current