"""Decoded image data, PNG scanline unfiltering and colour conversion."""

from __future__ import annotations

import zlib
from dataclasses import dataclass
from enum import IntEnum


class Kernel(IntEnum):
    """Convolution kernels that can be applied to an image."""

    SOBEL_X = 0
    SOBEL_Y = 1
    SOBEL_COMBINED = 2
    GAUSSIAN = 3
    BLUR = 4
    LAPLACIAN = 5
    SHARPEN = 6
    NONE = 7


class FilterType(IntEnum):
    """PNG per-scanline filter types."""

    NONE = 0
    SUB = 1
    UP = 2
    AVG = 3
    PAETH = 4


class ImageDecodeError(ValueError):
    """Raised when image data cannot be decoded."""


@dataclass(frozen=True)
class Ihdr:
    """Contents of a PNG IHDR chunk."""

    width: int
    height: int
    bit_depth: int = 8
    color_type: int = 0
    compression: int = 0
    filter: int = 0
    interlace: int = 0


_PALETTE_COLOR_TYPE = 3
_CHANNELS_BY_COLOR_TYPE = {0: 1, 2: 3, 4: 2, 6: 4}


@dataclass
class Image:
    """An 8-bit image stored as rows of interleaved channel bytes."""

    width: int
    height: int
    channels: int
    pixels: list[bytearray]

    def _check_channel(self, index: int) -> None:
        if not 0 <= index < self.channels:
            raise IndexError(f"channel {index} out of range for {self.channels} channels")

    def channel(self, index: int) -> list[bytearray]:
        """Return one channel as rows of ``width`` bytes."""
        self._check_channel(index)
        return [bytearray(row[index :: self.channels]) for row in self.pixels]

    def with_channel(self, index: int, plane: list[bytes]) -> Image:
        """Return a copy of the image with one channel replaced by ``plane``."""
        self._check_channel(index)
        if len(plane) != self.height or any(len(row) != self.width for row in plane):
            raise ValueError(f"plane must be {self.height} rows of {self.width} bytes")
        rows = []
        for row, plane_row in zip(self.pixels, plane):
            new_row = bytearray(row)
            new_row[index :: self.channels] = bytes(plane_row)
            rows.append(new_row)
        return Image(self.width, self.height, self.channels, rows)


def paeth_predictor(a: int, b: int, c: int) -> int:
    """Return whichever of left, up and upper-left is nearest to ``a + b - c``."""
    p = a + b - c
    pa = abs(p - a)
    pb = abs(p - b)
    pc = abs(p - c)
    if pa <= pb and pa <= pc:
        return a
    if pb <= pc:
        return b
    return c


def unfilter_scanline(
    current: bytes, previous: bytes | None, bpp: int, filter_type: int
) -> bytearray:
    """Reverse a PNG filter on one scanline and return the raw bytes.

    ``previous`` is the already unfiltered line above, or None for the first
    line. Unknown filter types leave the line unchanged.
    """
    line = bytearray(current)
    length = len(line)

    if filter_type == FilterType.SUB:
        for i in range(bpp, length):
            line[i] = (line[i] + line[i - bpp]) & 0xFF
    elif filter_type == FilterType.UP:
        if previous is not None:
            line = bytearray((cur + up) & 0xFF for cur, up in zip(line, previous))
    elif filter_type == FilterType.AVG:
        for i in range(length):
            left = line[i - bpp] if i >= bpp else 0
            up = previous[i] if previous is not None else 0
            line[i] = (line[i] + (left + up) // 2) & 0xFF
    elif filter_type == FilterType.PAETH:
        for i in range(length):
            left = line[i - bpp] if i >= bpp else 0
            up = previous[i] if previous is not None else 0
            up_left = previous[i - bpp] if previous is not None and i >= bpp else 0
            line[i] = (line[i] + paeth_predictor(left, up, up_left)) & 0xFF
    return line


def decode_image(ihdr: Ihdr, idat: bytes) -> Image:
    """Decompress concatenated IDAT data and unfilter it into an Image."""
    if ihdr.color_type == _PALETTE_COLOR_TYPE:
        raise ImageDecodeError("Palette images not supported")
    channels = _CHANNELS_BY_COLOR_TYPE.get(ihdr.color_type, 1)
    stride = ihdr.width * channels
    expected = ihdr.height * (1 + stride)

    try:
        raw = zlib.decompress(idat)
    except zlib.error as exc:
        raise ImageDecodeError(f"Failed to decompress image data: {exc}") from exc
    if len(raw) != expected:
        raise ImageDecodeError(
            f"Decompressed image data is {len(raw)} bytes, expected {expected}"
        )

    rows: list[bytearray] = []
    previous: bytearray | None = None
    for offset in range(0, expected, stride + 1):
        line = unfilter_scanline(
            raw[offset + 1 : offset + 1 + stride], previous, channels, raw[offset]
        )
        rows.append(line)
        previous = line
    return Image(ihdr.width, ihdr.height, channels, rows)


def to_grayscale(image: Image) -> Image:
    """Return a single-channel version of ``image``.

    RGB(A) uses Rec. 601 luma weights; gray+alpha keeps the gray value.
    A single-channel image is returned as is.
    """
    if image.channels == 1:
        return image
    step = image.channels
    rows = []
    for row in image.pixels:
        if step >= 3:
            gray = bytearray(
                int(0.299 * r + 0.587 * g + 0.114 * b)
                for r, g, b in zip(row[0::step], row[1::step], row[2::step])
            )
        elif step == 2:
            gray = bytearray(row[0::2])
        else:
            gray = bytearray(image.width)
        rows.append(gray)
    return Image(image.width, image.height, 1, rows)