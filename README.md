# pngkernel

A small command-line tool and library that reads 8-bit PNG images, can
convert them to grayscale, runs a 3x3 convolution kernel over them (edge
detection, blurring, sharpening) and writes the result as a new PNG.

## Installation

```
pip install .
```

## Command line

```
pngkernel <input.png> -o <output.png> [options]
```

| Option | Meaning |
| --- | --- |
| `-o`, `--output <file>` | Output file name (default `out.png`) |
| `-i`, `--info <file>` | Print the signature, chunks and header fields of a PNG file |
| `-g`, `--gray` | Convert to grayscale before filtering |
| `--rgb` | Keep the colour channels (default) |
| `--sobel-x` | Sobel edge detection, horizontal gradient |
| `--sobel-y` | Sobel edge detection, vertical gradient |
| `--sobel` | Combined Sobel gradient magnitude |
| `--gaussian [steps]` | Gaussian blur, optionally repeated `steps` times |
| `--blur [steps]` | Box blur, optionally repeated `steps` times |
| `--laplacian` | Laplacian edge detection |
| `--sharpen` | Sharpening filter |
| `--none` | No filter (default) |
| `-h`, `--help` | Show help (only when it is the first argument) |

The input file is the first argument that contains `.png`. Only one colour
option and one kernel may be given; a second one is an error. A step count
is taken only when the argument after `--gaussian` or `--blur` starts with a
digit, and is kept to a single byte (0-255). With a kernel and no step count
the kernel is applied once. For `--info` the file is the second argument on
the command line, e.g. `pngkernel --info photo.png`.

Without `--gray`, the kernel is applied to every channel separately
(alpha included). With `--gray`, RGB(A) images are reduced to one channel
with Rec. 601 luma weights and gray + alpha images keep their gray value.
The outermost rows and columns are copied unchanged from the input. The
output keeps the input's header fields, except that `--gray` sets the colour
type to grayscale.

Examples:

```
pngkernel input.png -o edges.png --sobel --gray
pngkernel photo.png -o blurred.png --gaussian 3
pngkernel --info photo.png
```

The command exits with status 0 on success and 1 on bad arguments or a file
that cannot be read, decoded or written; the error goes to standard error.

## Library use

```python
import dataclasses

from pngkernel.image import Kernel, decode_image
from pngkernel.pipeline import process_image
from pngkernel.png_io import read_png, save_png

with open("photo.png", "rb") as stream:
    ihdr, idat = read_png(stream)

image = decode_image(ihdr, idat)
edges = process_image(image, Kernel.SOBEL_COMBINED, 1, True)
save_png("edges.png", edges.pixels, dataclasses.replace(ihdr, color_type=0), edges.channels)
```

Modules:

- `pngkernel.image`: `Kernel`, `FilterType`, `Ihdr`, `Image` (with
  `channel` and `with_channel`), `paeth_predictor`, `unfilter_scanline`,
  `decode_image` and `to_grayscale`.
- `pngkernel.convolve`: `apply_convolution` and `apply_kernel_steps` on
  single-channel pixel planes (lists of byte rows).
- `pngkernel.png_io`: `Chunk`, `read_chunk`, `iter_chunks`,
  `check_signature`, `write_chunk`, `encode_png`, `save_png`, `read_png`,
  `format_bytes`, `info_lines` and `print_info`.
- `pngkernel.pipeline`: `Options`, `process_image` and `run`, which reads a
  file, applies the kernel and saves the result.
- `pngkernel.cli`: `usage`, `parse_args`, `main` and `UsageError`.
- `pngkernel.utils`: `crc` and `update_crc`, the CRC-32 used by PNG chunks.

Errors are raised as exceptions: `PngError` for files that cannot be read or
written, `ImageDecodeError` for image data that cannot be decoded, and
`UsageError` for bad command-line arguments.

## Limitations

- Only 8-bit, non-interlaced images are decoded; palette images are
  rejected, and the bit depth and interlace fields are not checked.
- Stored chunk CRCs are read but not verified.
- Output is written with filter type None on every scanline, and only the
  IHDR, IDAT and IEND chunks are written; other chunks of the input are
  dropped.

## Tests

```
pip install .[test]
pytest
```