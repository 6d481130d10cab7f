[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pngkernel"
version = "0.1.0"
description = "Decode 8-bit PNG images, apply 3x3 convolution kernels and write the result as PNG"
requires-python = ">=3.10"
dependencies = []
keywords = ["png", "image", "convolution", "sobel", "gaussian", "blur", "edge-detection"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: Scientific/Engineering :: Image Processing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pngkernel = "pngkernel.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pngkernel"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
