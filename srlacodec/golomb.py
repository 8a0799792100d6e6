"""Gamma, Rice and recursive Rice codes with parameter estimation."""

from __future__ import annotations

import math
from collections.abc import Iterable

from .bitreader import BitReader
from .bitwriter import BitWriter

# Root of (x - 1)^2 + ln(2) x ln(x) = 0.
_OPTX = 0.5127629514437670454896078808815218508243560791015625
# -ln(OPTX)
_MLNOPTX = 0.66794162356


def sint_to_uint(value: int) -> int:
    """Map a signed integer onto a non-negative one (0, -1, 1, -2, ... order)."""
    return (value << 1) ^ -1 if value < 0 else value << 1


def uint_to_sint(value: int) -> int:
    """Inverse of :func:`sint_to_uint`."""
    return (value >> 1) ^ -(value & 1)


def _log2ceil(x: int) -> int:
    return (x - 1).bit_length()


def _log2floor(x: int) -> int:
    return x.bit_length() - 1


def _round(d: float) -> float:
    return math.floor(d + 0.5) if d >= 0.0 else -math.floor(-d + 0.5)


def put_gamma(writer: BitWriter, value: int) -> None:
    """Write ``value`` as an Elias gamma code of ``value + 1``."""
    if value < 0:
        raise ValueError(f"gamma code needs a non-negative value: {value}")
    if value == 0:
        writer.put_bits(1, 1)
        return
    ndigit = _log2ceil(value + 2)
    writer.put_bits(0, ndigit - 1)
    writer.put_bits(value + 1, ndigit)


def get_gamma(reader: BitReader) -> int:
    """Read a value written by :func:`put_gamma`."""
    ndigit = reader.get_zero_run_length() + 1
    if ndigit == 1:
        return 0
    bits = reader.get_bits(ndigit - 1)
    return (1 << (ndigit - 1)) + bits - 1


def put_rice(writer: BitWriter, k: int, uval: int) -> None:
    """Write ``uval`` as a Rice code with parameter ``k``."""
    writer.put_zero_run(uval >> k)
    writer.put_bits(uval, k)


def get_rice(reader: BitReader, k: int) -> int:
    """Read a Rice code with parameter ``k``."""
    quot = reader.get_zero_run_length()
    rem = reader.get_bits(k)
    return (quot << k) + rem


def put_recursive_rice(writer: BitWriter, k1: int, k2: int, uval: int) -> None:
    """Write ``uval`` as a two-stage recursive Rice code."""
    k1pow = 1 << k1
    if uval < k1pow:
        writer.put_bits(k1pow | uval, k1 + 1)
    else:
        rest = uval - k1pow
        writer.put_zero_run(1 + (rest >> k2))
        writer.put_bits(rest, k2)


def get_recursive_rice(reader: BitReader, k2: int) -> int:
    """Read a recursive Rice code whose first parameter is ``k2 + 1``."""
    quot = reader.get_zero_run_length()
    uval = reader.get_bits(k2 + (1 if quot == 0 else 0))
    return uval | ((quot + (1 if quot else 0)) << k2)


def rice_code_length(k: int, uval: int) -> int:
    """Return the length in bits of the Rice code of ``uval``."""
    return 1 + k + (uval >> k)


def recursive_rice_code_length(values: Iterable[int], k1: int, k2: int) -> int:
    """Return the total bits of the recursive Rice codes of ``values``."""
    if k1 != k2 + 1:
        raise ValueError(f"k1 must equal k2 + 1: k1={k1}, k2={k2}")
    k1pow = 1 << k1
    count = 0
    extra = 0
    for uval in values:
        count += 1
        extra += max(0, uval - k1pow) >> k2
    return (k1 + 1) * count + extra


def optimal_rice_parameter(mean: float) -> tuple[int, float]:
    """Return the best Rice parameter for a geometric source and its bits per sample."""
    rho = 1.0 / (1.0 + mean)
    base = 1.0 - rho
    if base <= 0.0:
        k = 0
    else:
        k = int(max(0.0, _round(math.log2(math.log(_OPTX) / math.log(base)))))
    fk = base ** (1 << k)
    return k, k + 1.0 / (1.0 - fk)


def mean_code_length(rho: float, k1: int, k2: int) -> float:
    """Return the mean recursive Rice code length for geometric parameter ``rho``."""
    fk1 = (1.0 - rho) ** (1 << k1)
    fk2 = (1.0 - rho) ** (1 << k2)
    return (1.0 + k1) * (1.0 - fk1) + (1.0 + k2 + 1.0 / (1.0 - fk2)) * fk1


def optimal_recursive_rice_parameter(mean: float) -> tuple[int, int, float]:
    """Return ``(k1, k2, bits_per_sample)`` for a geometric source of the given mean."""
    rho = 1.0 / (1.0 + mean)
    golomb_param = int(max(1.0, _MLNOPTX * (1.0 + mean)))
    k2 = _log2floor(golomb_param)
    k1 = k2 + 1
    return k1, k2, mean_code_length(rho, k1, k2)