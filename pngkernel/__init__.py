"""Read 8-bit PNG images, apply 3x3 convolution kernels and write PNG output."""

__version__ = "0.1.0"

__all__ = ["cli", "convolve", "image", "pipeline", "png_io", "utils"]