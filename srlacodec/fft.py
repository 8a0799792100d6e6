"""Unnormalised radix-4 Stockham FFT over complex and real sequences."""

from __future__ import annotations

import math
from collections.abc import Sequence


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def _check_flag(flag: int) -> None:
    if flag not in (-1, 1):
        raise ValueError(f"flag must be -1 (forward) or 1 (inverse): {flag}")


def _pairs(values: Sequence[float]) -> list[complex]:
    return [complex(values[k], values[k + 1]) for k in range(0, len(values), 2)]


def _flatten(values: Sequence[complex]) -> list[float]:
    return [part for z in values for part in (z.real, z.imag)]


def complex_fft(data: Sequence[complex], flag: int) -> list[complex]:
    """Transform ``data`` (length a power of two); -1 forward, 1 inverse, no normalisation."""
    _check_flag(flag)
    x = [complex(v) for v in data]
    n = len(x)
    if not _is_power_of_two(n):
        raise ValueError(f"FFT length must be a power of two: {n}")
    y = [0j] * n
    stride = 1

    while n > 2:
        n1 = n >> 2
        n2 = n >> 1
        n3 = n1 + n2
        theta0 = 2.0 * math.pi / n
        j = complex(0.0, -flag)
        wdelta = complex(math.cos(theta0), flag * math.sin(theta0))
        w1p = complex(1.0, 0.0)
        for p in range(n1):
            w2p = w1p * w1p
            w3p = w1p * w2p
            for q in range(stride):
                a = x[q + stride * p]
                b = x[q + stride * (p + n1)]
                c = x[q + stride * (p + n2)]
                d = x[q + stride * (p + n3)]
                apc = a + c
                amc = a - c
                bpd = b + d
                jbmd = j * (b - d)
                base = q + stride * (p << 2)
                y[base] = apc + bpd
                y[base + stride] = w1p * (amc - jbmd)
                y[base + 2 * stride] = w2p * (apc - bpd)
                y[base + 3 * stride] = w3p * (amc + jbmd)
            w1p = w1p * wdelta
        n >>= 2
        stride <<= 2
        x, y = y, x

    if n == 2:
        for q in range(stride):
            a = x[q]
            b = x[q + stride]
            y[q] = a + b
            y[q + stride] = a - b
        x, y = y, x

    return x


def real_fft(data: Sequence[float], flag: int) -> list[float]:
    """Transform a real sequence held in packed form; normalisation constant is 2/n.

    The forward result holds the DC component in element 0, the Nyquist
    component in element 1 and interleaved real/imaginary parts after that.
    """
    _check_flag(flag)
    x = [float(v) for v in data]
    n = len(x)
    if n < 2 or not _is_power_of_two(n):
        raise ValueError(f"real FFT length must be a power of two of at least 2: {n}")

    theta = flag * 2.0 * math.pi / n
    wpi = math.sin(theta)
    wpr = math.cos(theta) - 1.0
    c2 = flag * 0.5

    if flag == -1:
        x = _flatten(complex_fft(_pairs(x), -1))

    wr = 1.0 + wpr
    wi = wpi
    for i in range(1, (n >> 2) + 1):
        i1 = i << 1
        i2 = i1 + 1
        i3 = n - i1
        i4 = i3 + 1
        h1r = 0.5 * (x[i1] + x[i3])
        h1i = 0.5 * (x[i2] - x[i4])
        h2r = -c2 * (x[i2] + x[i4])
        h2i = c2 * (x[i1] - x[i3])
        x[i1] = h1r + (wr * h2r) - (wi * h2i)
        x[i2] = h1i + (wr * h2i) + (wi * h2r)
        x[i3] = h1r - (wr * h2r) + (wi * h2i)
        x[i4] = -h1i + (wr * h2i) + (wi * h2r)
        wtmp = wr
        wr += wtmp * wpr - wi * wpi
        wi += wi * wpr + wtmp * wpi

    h1r = x[0]
    if flag == -1:
        x[0] = h1r + x[1]
        x[1] = h1r - x[1]
    else:
        x[0] = 0.5 * (h1r + x[1])
        x[1] = 0.5 * (h1r - x[1])
        x = _flatten(complex_fft(_pairs(x), 1))
    return x