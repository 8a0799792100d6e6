"""Lossless audio coding primitives: bit streams, FFT, LPC analysis, Golomb-Rice codes and partition search."""

__version__ = "0.1.0"

__all__ = [
    "bitreader",
    "bitwriter",
    "fft",
    "golomb",
    "lpc",
    "lpc_af",
    "lpc_quantize",
    "lpc_svr",
    "partition",
]