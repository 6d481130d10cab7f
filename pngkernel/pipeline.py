"""Reading a PNG, applying a kernel to it and writing the result."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

from pngkernel.convolve import apply_kernel_steps
from pngkernel.image import Ihdr, Image, Kernel, decode_image, to_grayscale
from pngkernel.png_io import PngError, check_signature, format_bytes, iter_chunks, save_png

DEFAULT_OUTPUT = "out.png"

_EDGE_KERNELS = frozenset(
    {Kernel.SOBEL_X, Kernel.SOBEL_Y, Kernel.SOBEL_COMBINED, Kernel.LAPLACIAN}
)

_KERNEL_NAMES = {
    Kernel.SOBEL_X: "Sobel X",
    Kernel.SOBEL_Y: "Sobel Y",
    Kernel.SOBEL_COMBINED: "Sobel combined",
    Kernel.GAUSSIAN: "Gaussian",
    Kernel.BLUR: "Blur",
    Kernel.LAPLACIAN: "Laplacian",
    Kernel.SHARPEN: "Sharpen",
    Kernel.NONE: "None",
}


@dataclass
class Options:
    """What to read, what to apply and where to write the result."""

    input_file: str
    output_file: str | None = None
    grayscale: bool = False
    kernel: Kernel = Kernel.NONE
    steps: int = 0


def _filter_message(steps: int) -> str:
    suffix = f" ({steps} steps)" if steps > 1 else ""
    return f"Applying filter{suffix}..."


def process_image(image: Image, kernel: int, steps: int, grayscale: bool) -> Image:
    """Return ``image`` with ``kernel`` applied ``steps`` times.

    With ``grayscale`` the image is first reduced to one channel. Otherwise
    the kernel is applied to every channel on its own. ``Kernel.NONE``
    without ``grayscale`` returns the image unchanged.
    """
    kernel = Kernel(kernel)
    if steps < 0:
        raise ValueError(f"steps must not be negative, got {steps}")

    if grayscale:
        gray = to_grayscale(image)
        plane = apply_kernel_steps(gray.pixels, kernel, steps)
        return Image(gray.width, gray.height, 1, plane)

    if kernel == Kernel.NONE:
        return image

    result = image
    for index in range(image.channels):
        plane = apply_kernel_steps(image.channel(index), kernel, steps)
        result = result.with_channel(index, plane)
    return result


def _read_input(path: str) -> tuple[Ihdr | None, bytes]:
    try:
        stream = open(path, "rb")
    except OSError as exc:
        raise PngError(f"Could not open input file {path}") from exc
    with stream:
        try:
            signature_ok = True
            check_signature(stream)
        except PngError:
            signature_ok = False
        if not signature_ok:
            stream.seek(0)
            print(f"SIGNATURE: {format_bytes(stream.read(8))}")
            raise PngError(f"{path} is not a PNG file")
        return _read_chunks(stream, path)


def _read_chunks(stream, path: str) -> tuple[Ihdr | None, bytes]:
    ihdr: Ihdr | None = None
    idat = bytearray()
    first = True
    for chunk in iter_chunks(stream):
        if first:
            first = False
        if chunk.type == b"IHDR":
            if len(chunk.data) < 13:
                raise PngError(f"IHDR chunk in {path} is too short")
            ihdr = Ihdr(
                int.from_bytes(chunk.data[0:4], "big"),
                int.from_bytes(chunk.data[4:8], "big"),
                *chunk.data[8:13],
            )
            print(f"Image dimensions: {ihdr.width} x {ihdr.height} px")
            print(f"Bit depth: {ihdr.bit_depth}, Color type: {ihdr.color_type}")
        elif chunk.type == b"IDAT":
            idat += chunk.data
    return ihdr, bytes(idat)


def run(options: Options) -> str:
    """Process the input file as ``options`` say and return the output path."""
    kernel = Kernel(options.kernel)
    output_file = options.output_file
    if output_file is None:
        print("No output filename was set")
        print(f"Default: {DEFAULT_OUTPUT}")
        output_file = DEFAULT_OUTPUT

    steps = options.steps
    if steps == 0 and kernel != Kernel.NONE:
        steps = 1

    if kernel in _EDGE_KERNELS and not options.grayscale:
        print("Note: Edge detection typically works better on grayscale images.")
        print("Consider adding --gray flag.\n")

    # The signature is checked before anything about the run is reported.
    try:
        probe = open(options.input_file, "rb")
    except OSError as exc:
        raise PngError(f"Could not open input file {options.input_file}") from exc
    with probe:
        signature = probe.read(8)
    try:
        check_signature(_BytesReader(signature))
    except PngError:
        print(f"SIGNATURE: {format_bytes(signature)}")
        raise PngError(f"{options.input_file} is not a PNG file") from None

    print(f"Processing: {options.input_file}")
    kernel_name = _KERNEL_NAMES[kernel]
    if kernel in (Kernel.GAUSSIAN, Kernel.BLUR) and steps > 1:
        kernel_name += f" ({steps} steps)"
    print(f"Kernel: {kernel_name}")
    print(f"Output format: {'Grayscale' if options.grayscale else 'RGB'}\n")

    ihdr, idat = _read_input(options.input_file)
    if not idat:
        raise PngError("No image data found")
    if ihdr is None:
        raise PngError("No IHDR chunk found")

    print("\nProcessing image data...")
    image = decode_image(ihdr, idat)

    if options.grayscale or kernel != Kernel.NONE:
        print(_filter_message(steps))
    processed = process_image(image, kernel, steps, options.grayscale)

    out_header = dataclasses.replace(ihdr, color_type=0) if options.grayscale else ihdr
    save_png(output_file, processed.pixels, out_header, processed.channels)
    print("\nDone!")
    return output_file


class _BytesReader:
    """Minimal binary reader over an in-memory byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def read(self, size: int = -1) -> bytes:
        end = len(self._data) if size < 0 else self._pos + size
        chunk = self._data[self._pos : end]
        self._pos += len(chunk)
        return chunk