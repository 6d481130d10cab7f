"""Reading and writing PNG files chunk by chunk."""

from __future__ import annotations

import struct
import zlib
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import BinaryIO

from pngkernel.image import Ihdr
from pngkernel.utils import crc

PNG_SIGNATURE = bytes([137, 80, 78, 71, 13, 10, 26, 10])

_U32 = struct.Struct(">I")
_IHDR = struct.Struct(">IIBBBBB")

_COLOR_TYPE_NAMES = {
    0: "Grayscale",
    2: "RGB",
    3: "Palette",
    4: "Grayscale + Alpha",
    6: "RGB + Alpha",
}


class PngError(ValueError):
    """Raised when a PNG stream cannot be read or written."""


@dataclass(frozen=True)
class Chunk:
    """One PNG chunk: its four-byte type, payload and stored CRC."""

    type: bytes
    data: bytes
    crc: int

    @property
    def name(self) -> str:
        """The chunk type as text."""
        return self.type.decode("latin-1")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) < size:
        raise PngError(f"Could not read {size} bytes from file: Reached EOF")
    return data


def _chunk_type_bytes(chunk_type: str | bytes) -> bytes:
    raw = chunk_type.encode("latin-1") if isinstance(chunk_type, str) else bytes(chunk_type)
    if len(raw) != 4:
        raise ValueError(f"chunk type must be 4 bytes, got {raw!r}")
    return raw


def _parse_ihdr(data: bytes) -> Ihdr:
    if len(data) < _IHDR.size:
        raise PngError(f"IHDR chunk is {len(data)} bytes, expected {_IHDR.size}")
    return Ihdr(*_IHDR.unpack_from(data))


def read_chunk(stream: BinaryIO) -> Chunk:
    """Read one chunk (length, type, data, CRC) from ``stream``."""
    (length,) = _U32.unpack(_read_exact(stream, 4))
    chunk_type = _read_exact(stream, 4)
    data = _read_exact(stream, length)
    (stored_crc,) = _U32.unpack(_read_exact(stream, 4))
    return Chunk(chunk_type, data, stored_crc)


def iter_chunks(stream: BinaryIO) -> Iterator[Chunk]:
    """Yield chunks from ``stream`` up to and including IEND."""
    while True:
        chunk = read_chunk(stream)
        yield chunk
        if chunk.type == b"IEND":
            return


def check_signature(stream: BinaryIO) -> bytes:
    """Read the eight signature bytes and raise PngError if they are not PNG's."""
    signature = _read_exact(stream, len(PNG_SIGNATURE))
    if signature != PNG_SIGNATURE:
        raise PngError("is not a PNG file")
    return signature


def write_chunk(stream: BinaryIO, chunk_type: str | bytes, data: bytes = b"") -> None:
    """Write one chunk with its length and CRC to ``stream``."""
    type_bytes = _chunk_type_bytes(chunk_type)
    payload = bytes(data)
    stream.write(_U32.pack(len(payload)))
    stream.write(type_bytes)
    stream.write(payload)
    stream.write(_U32.pack(crc(type_bytes + payload)))


def _chunk_bytes(chunk_type: str | bytes, data: bytes = b"") -> bytes:
    type_bytes = _chunk_type_bytes(chunk_type)
    payload = bytes(data)
    return (
        _U32.pack(len(payload))
        + type_bytes
        + payload
        + _U32.pack(crc(type_bytes + payload))
    )


def encode_png(pixels: Sequence[bytes], ihdr: Ihdr, channels: int) -> bytes:
    """Return a complete PNG file holding ``pixels`` with the header ``ihdr``.

    Every scanline is stored with filter type None. Grayscale output
    (colour type 0) uses one byte per pixel whatever ``channels`` says.
    """
    bytes_per_pixel = 1 if ihdr.color_type == 0 else channels
    stride = ihdr.width * bytes_per_pixel
    if len(pixels) < ihdr.height:
        raise ValueError(f"expected {ihdr.height} rows, got {len(pixels)}")

    raw = bytearray()
    for row in pixels[: ihdr.height]:
        if len(row) < stride:
            raise ValueError(f"row is {len(row)} bytes, expected at least {stride}")
        raw.append(0)
        raw += bytes(row[:stride])

    header = _IHDR.pack(
        ihdr.width,
        ihdr.height,
        ihdr.bit_depth,
        ihdr.color_type,
        ihdr.compression,
        ihdr.filter,
        ihdr.interlace,
    )
    return b"".join(
        (
            PNG_SIGNATURE,
            _chunk_bytes("IHDR", header),
            _chunk_bytes("IDAT", zlib.compress(bytes(raw), -1)),
            _chunk_bytes("IEND"),
        )
    )


def save_png(path: str, pixels: Sequence[bytes], ihdr: Ihdr, channels: int) -> None:
    """Encode ``pixels`` as PNG and write the file to ``path``."""
    encoded = encode_png(pixels, ihdr, channels)
    try:
        with open(path, "wb") as file:
            file.write(encoded)
    except OSError as exc:
        raise PngError(f"Could not create output file: {path}") from exc
    print(f"Successfully saved output image to: {path}")


def read_png(stream: BinaryIO) -> tuple[Ihdr, bytes]:
    """Read a PNG stream and return its header and concatenated IDAT data."""
    check_signature(stream)
    ihdr: Ihdr | None = None
    idat = bytearray()
    for chunk in iter_chunks(stream):
        if chunk.type == b"IHDR":
            ihdr = _parse_ihdr(chunk.data)
        elif chunk.type == b"IDAT":
            idat += chunk.data
    if ihdr is None:
        raise PngError("No IHDR chunk found")
    return ihdr, bytes(idat)


def format_bytes(data: bytes) -> str:
    """Return the bytes as space-separated decimal numbers."""
    return " ".join(str(byte) for byte in data)


def _text_line(data: bytes) -> str:
    keyword, _, rest = data.partition(b"\0")
    text = rest.split(b"\0", 1)[0]
    return f"  Text: {keyword.decode('latin-1')} = {text.decode('latin-1')}"


def info_lines(stream: BinaryIO) -> Iterator[str]:
    """Yield a human-readable description of the chunks in a PNG stream."""
    signature = check_signature(stream)
    yield "PNG File Information:"
    yield format_bytes(signature)
    yield "======== INFO ========"
    for chunk in iter_chunks(stream):
        yield f"Chunk: {chunk.name} (size: {len(chunk.data)} B)"
        if chunk.type == b"IHDR":
            ihdr = _parse_ihdr(chunk.data)
            color_name = _COLOR_TYPE_NAMES.get(ihdr.color_type, "Unknown")
            yield f"  Dimensions:  {ihdr.width} x {ihdr.height} pixels"
            yield f"  Bit depth:   {ihdr.bit_depth}"
            yield f"  Color type:  {ihdr.color_type} ({color_name})"
            yield f"  Compression: {ihdr.compression}"
            yield f"  Filter:      {ihdr.filter}"
            yield f"  Interlace:   {ihdr.interlace}"
        elif chunk.type == b"tEXt":
            yield _text_line(chunk.data)


def print_info(stream: BinaryIO) -> None:
    """Print the description produced by :func:`info_lines`."""
    for line in info_lines(stream):
        print(line)