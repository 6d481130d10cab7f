"""Command-line interface: parse arguments and run the image pipeline."""

from __future__ import annotations

import re
import sys
from collections.abc import Sequence

from pngkernel.image import ImageDecodeError, Kernel
from pngkernel.pipeline import Options, run
from pngkernel.png_io import PngError, print_info

PROG = "pngkernel"

_KERNEL_FLAGS = {
    "--sobel-x": Kernel.SOBEL_X,
    "--sobel-y": Kernel.SOBEL_Y,
    "--sobel": Kernel.SOBEL_COMBINED,
    "--gaussian": Kernel.GAUSSIAN,
    "--blur": Kernel.BLUR,
    "--laplacian": Kernel.LAPLACIAN,
    "--sharpen": Kernel.SHARPEN,
    "--none": Kernel.NONE,
}

_STEP_KERNEL_FLAGS = frozenset({"--gaussian", "--blur"})

_LEADING_DIGITS = re.compile(r"\d+")


class UsageError(Exception):
    """Raised when the command line cannot be understood."""

    def __init__(self, message: str, show_usage: bool = False) -> None:
        super().__init__(message)
        self.show_usage = show_usage


def usage(prog: str) -> str:
    """Return the help text for the command named ``prog``."""
    return "\n".join(
        [
            f"Usage: {prog} <input.png> -o <output.png> [options]",
            "",
            "Options: ",
            "  -o, --output <file>    Output filename (default=out.png)",
            "  -i, --info <file>      Show information about PNG file",
            "  -g, --gray             Convert to grayscale",
            "  -c, --color            Keep RGB format (default)",
            "  --sobel-x              Apply Sobel X edge detection",
            "  --sobel-y              Apply Sobel Y edge detection",
            "  --sobel                Apply combined Sobel edge detection",
            "  --gaussian [steps]     Apply Gaussian blur (optional: number of iterations, default=1)",
            "  --blur [steps]         Apply box blur (optional: number of iterations, default=1)",
            "  --laplacian            Apply Laplacian edge detection",
            "  --sharpen              Apply sharpening filter",
            "  --none                 No filter (default)",
            "  -h, --help             Show this HELP message",
            "",
            "Examples:",
            f"  {prog} input.png -o edges.png --sobel --gray",
            f"  {prog} photo.png -o blurred.png --gaussian",
        ]
    )


def _parse_steps(text: str) -> int:
    match = _LEADING_DIGITS.match(text)
    # The step count is held in a single byte.
    return int(match.group()) & 0xFF if match else 0


def parse_args(argv: Sequence[str]) -> tuple[str, Options | str | None]:
    """Interpret the arguments (without the program name).

    Returns ``("help", None)``, ``("info", path)`` or ``("run", Options)``.
    Raises UsageError for conflicting or incomplete arguments.
    """
    args = list(argv)
    input_file: str | None = None
    output_file: str | None = None
    grayscale = False
    color_set = False
    kernel_set = False
    kernel = Kernel.NONE
    steps = 0

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in ("-h", "--help") and i == 0:
            return "help", None
        if arg in ("-i", "--info"):
            if len(args) < 2:
                raise UsageError("Invalid number of arguments for --info flag")
            if input_file is None:
                input_file = args[1]
                if ".png" not in input_file:
                    raise UsageError("Input file not provided for --info")
            return "info", input_file
        if arg in ("-o", "--output"):
            if i + 1 >= len(args):
                raise UsageError("-o requires an argument after it")
            i += 1
            output_file = args[i]
        elif arg in ("-g", "--gray", "--rgb"):
            if color_set:
                raise UsageError("RGB and GRAYSCALE both cannot be set")
            color_set = True
            grayscale = arg != "--rgb"
        elif arg in _KERNEL_FLAGS:
            if kernel_set:
                raise UsageError("Two or more kernel chosen")
            kernel_set = True
            kernel = _KERNEL_FLAGS[arg]
            if (
                arg in _STEP_KERNEL_FLAGS
                and i + 1 < len(args)
                and args[i + 1][:1].isdigit()
                and args[i + 1][:1].isascii()
            ):
                i += 1
                steps = _parse_steps(args[i])
        elif ".png" in arg and input_file is None:
            input_file = arg
        i += 1

    if input_file is None:
        raise UsageError("No input file specified", show_usage=True)
    return "run", Options(
        input_file=input_file,
        output_file=output_file,
        grayscale=grayscale,
        kernel=kernel,
        steps=steps,
    )


def _show_info(path: str) -> None:
    try:
        stream = open(path, "rb")
    except OSError as exc:
        raise PngError(f"Could not open input file {path}") from exc
    with stream:
        print_info(stream)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command and return its exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print(usage(PROG))
        return 1

    try:
        mode, payload = parse_args(args)
    except UsageError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        if exc.show_usage:
            print(usage(PROG))
        return 1

    if mode == "help":
        print(usage(PROG))
        return 0

    try:
        if mode == "info":
            _show_info(payload)
        else:
            run(payload)
    except (PngError, ImageDecodeError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())