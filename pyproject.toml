[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "srlacodec"
version = "0.1.0"
description = "Building blocks of a lossless audio codec: bit streams, FFT, LPC analysis, Golomb-Rice codes and partition search"
requires-python = ">=3.10"
dependencies = []
keywords = ["audio", "lossless", "codec", "lpc", "parcor", "rice", "golomb", "fft", "bitstream"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
    "Topic :: System :: Archiving :: Compression",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["srlacodec"]

[tool.pytest.ini_options]
addopts = "-ra"
