"""Conversion and integer quantisation of LPC coefficients, prediction and synthesis."""

from __future__ import annotations

import math
from collections.abc import Sequence


def _round(d: float) -> int:
    """Round half away from zero."""
    return int(math.floor(d + 0.5)) if d >= 0.0 else -int(math.floor(-d + 0.5))


def _clip(value: int, qmax: int) -> int:
    if value >= qmax:
        return qmax - 1
    if value < -qmax:
        return -qmax
    return value


def lpc_to_parcor(lpc_coef: Sequence[float]) -> list[float]:
    """Convert LPC coefficients (without the leading one) to PARCOR coefficients."""
    tmp = [float(v) for v in lpc_coef]
    order = len(tmp)
    parcor = [0.0] * order
    for i in range(order - 1, -1, -1):
        gamma = tmp[i]
        if not abs(gamma) < 1.0:
            raise ValueError(
                f"coefficients do not describe a stable filter (|{gamma}| >= 1 at order {i + 1})"
            )
        parcor[i] = -gamma
        prev = tmp[:i]
        denominator = 1.0 - gamma * gamma
        for k in range(i):
            tmp[k] = (prev[k] - gamma * prev[i - k - 1]) / denominator
    return parcor


def quantize_coefficients_as_parcor(
    lpc_coef: Sequence[float], nbits_precision: int
) -> list[int]:
    """Convert LPC coefficients to PARCOR form and quantise them to signed integers."""
    if nbits_precision <= 0:
        raise ValueError(f"precision must be at least one bit: {nbits_precision}")
    qmax = 1 << (nbits_precision - 1)
    scale = 2.0 ** (nbits_precision - 1)
    return [_clip(_round(p * scale), qmax) for p in lpc_to_parcor(lpc_coef)]


def quantize_coefficients(
    coef: Sequence[float], nbits_precision: int, max_bits: int
) -> tuple[list[int], int]:
    """Quantise coefficients to ``nbits_precision``-bit integers.

    Returns ``(int_coef, rshift)`` where ``int_coef / 2**rshift`` approximates
    ``coef``. The rounding error is carried from the last coefficient towards
    the first, and ``rshift`` is kept below ``max_bits``.
    """
    if nbits_precision <= 0:
        raise ValueError(f"precision must be at least one bit: {nbits_precision}")
    if max_bits <= 0:
        raise ValueError(f"maximum shift bits must be positive: {max_bits}")
    values = [float(v) for v in coef]
    qmax = 1 << (nbits_precision - 1)

    largest = max((abs(v) for v in values), default=0.0)
    # Too small to be represented with the given precision: all zero.
    if largest <= 2.0 ** -(nbits_precision - 1):
        return [0] * len(values), nbits_precision

    _, ndigit = math.frexp(largest)
    magnitude_bits = nbits_precision - 1
    if magnitude_bits < ndigit:
        raise ValueError(
            f"coefficient magnitude {largest} does not fit in {nbits_precision} bits"
        )
    rshift = magnitude_bits - ndigit
    if rshift >= max_bits:
        rshift = max_bits - 1

    scale = 2.0 ** rshift
    int_coef = [0] * len(values)
    qerror = 0.0
    for index in range(len(values) - 1, -1, -1):
        qerror += values[index] * scale
        q = _clip(_round(qerror), qmax)
        qerror -= q
        int_coef[index] = q
    return int_coef, rshift


def _check_shift(coef_rshift: int) -> None:
    if coef_rshift <= 0:
        raise ValueError(f"coefficient shift must be positive: {coef_rshift}")


def predict(data: Sequence[int], coef: Sequence[int], coef_rshift: int) -> list[int]:
    """Return the prediction residual of ``data`` under the integer filter ``coef``."""
    _check_shift(coef_rshift)
    samples = [int(v) for v in data]
    taps = [int(c) for c in coef]
    half = 1 << (coef_rshift - 1)
    residual = list(samples)
    for smpl in range(1, len(samples)):
        width = min(smpl, len(taps))
        acc = half + sum(taps[o] * samples[smpl - o - 1] for o in range(width))
        residual[smpl] += acc >> coef_rshift
    return residual


def synthesize(data: Sequence[int], coef: Sequence[int], coef_rshift: int) -> list[int]:
    """Rebuild the signal from a residual produced by :func:`predict`."""
    _check_shift(coef_rshift)
    output = [int(v) for v in data]
    taps = [int(c) for c in coef]
    half = 1 << (coef_rshift - 1)
    for smpl in range(1, len(output)):
        width = min(smpl, len(taps))
        acc = half + sum(taps[o] * output[smpl - o - 1] for o in range(width))
        output[smpl] -= acc >> coef_rshift
    return output