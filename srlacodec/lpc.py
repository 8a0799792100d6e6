"""Linear prediction analysis: windowing, autocorrelation and Levinson-Durbin."""

from __future__ import annotations

import enum
import math
from collections.abc import Sequence

from .fft import real_fft

_FLT_EPSILON = 1.1920928955078125e-07
_FLT_MIN = 1.1754943508222875e-38
_INV_LOGE2 = 1.4426950408889634
# sqrt(2 * e * e): entropy offset of a Laplace source, in bits.
_BETA_CONST_FOR_LAPLACE_DIST = 1.9426950408889634


class LPCError(Exception):
    """Base class of the errors raised by the LPC calculator."""


class ExceedMaxOrderError(LPCError):
    """Raised when a coefficient order exceeds the calculator's maximum."""


class ExceedMaxNumSamplesError(LPCError):
    """Raised when more samples are given than the calculator accepts."""


class WindowType(enum.IntEnum):
    """Window applied to the samples before the autocorrelation."""

    RECTANGULAR = 0
    SIN = 1
    WELCH = 2


def _log(x: float) -> float:
    if x > 0.0:
        return math.log(x)
    if x == 0.0:
        return -math.inf
    return math.nan


def _log2(x: float) -> float:
    return _log(x) * _INV_LOGE2


def _ieee_div(numerator: float, denominator: float) -> float:
    if denominator != 0.0:
        return numerator / denominator
    if numerator == 0.0 or math.isnan(numerator):
        return math.nan
    sign = math.copysign(1.0, numerator) * math.copysign(1.0, denominator)
    return math.copysign(math.inf, sign)


def apply_window(window_type: WindowType | int, data: Sequence[float]) -> list[float]:
    """Return ``data`` multiplied by the given window."""
    window_type = WindowType(window_type)
    samples = [float(v) for v in data]
    n = len(samples)
    if window_type is WindowType.RECTANGULAR:
        return samples
    if window_type is WindowType.SIN:
        if n == 1:
            return [math.nan]
        return [s * math.sin((math.pi * i) / (n - 1)) for i, s in enumerate(samples)]
    # Welch: the middle sample of an odd length keeps its weight of one.
    output = list(samples)
    if n > 1:
        divisor = 4.0 * (n - 1) ** -2.0
        for i in range(n >> 1):
            weight = divisor * i * (n - 1 - i)
            output[i] = samples[i] * weight
            output[n - 1 - i] = samples[n - 1 - i] * weight
    return output


def _window_inverse_squared_sum(window_type: WindowType, num_samples: int) -> float:
    if window_type is WindowType.WELCH:
        n = float(num_samples - 1)
        numerator = 15.0 * (n - 1.0) * (n - 1.0) * (n - 1.0)
        denominator = 8.0 * n * (n - 2.0) * (n * n - 2.0 * n + 2.0)
        return _ieee_div(numerator, denominator)
    # Rectangular windows need no correction; no correction is known for the sine window.
    return 1.0


def auto_correlation(data: Sequence[float], order: int) -> list[float]:
    """Return the sample autocorrelation of ``data`` for lags ``0 .. order - 1``."""
    samples = [float(v) for v in data]
    if not 0 <= order <= len(samples):
        raise ValueError(f"order must be in 0..{len(samples)}: {order}")
    return [sum(a * b for a, b in zip(samples, samples[lag:])) for lag in range(order)]


def auto_correlation_by_fft(data: Sequence[float], order: int) -> list[float]:
    """Autocorrelation for lags ``0 .. order - 1`` through a zero-padded real FFT.

    The sequence is padded only to the next power of two, so the result is
    the circular autocorrelation of the padded sequence.
    """
    samples = [float(v) for v in data]
    n = len(samples)
    if n == 0:
        raise ValueError("autocorrelation needs at least one sample")
    if not 0 <= order <= n:
        raise ValueError(f"order must be in 0..{n}: {order}")
    fft_size = max(2, 1 << (n - 1).bit_length())
    spectrum = real_fft(samples + [0.0] * (fft_size - n), -1)
    power = [spectrum[0] * spectrum[0], spectrum[1] * spectrum[1]]
    for real, imag in zip(spectrum[2::2], spectrum[3::2]):
        power.append(real * real + imag * imag)
        power.append(0.0)
    correlation = real_fft(power, 1)
    norm_factor = 2.0 / n
    return [v * norm_factor for v in correlation[:order]]


def levinson_durbin(
    auto_corr: Sequence[float], coef_order: int
) -> tuple[list[list[float]], list[float], list[float]]:
    """Solve the normal equations recursively.

    Returns ``(a_vecs, parcor_coef, error_vars)``: ``a_vecs[k]`` holds the
    prediction filter of order ``k + 1`` with its leading one, ``parcor_coef``
    has ``coef_order + 1`` entries (the last one zero) and ``error_vars`` the
    residual variance for orders ``0 .. coef_order``.
    """
    if coef_order < 1:
        raise ValueError(f"coefficient order must be at least 1: {coef_order}")
    if len(auto_corr) < coef_order + 1:
        raise ValueError(f"need {coef_order + 1} autocorrelation values, got {len(auto_corr)}")
    r = [float(v) for v in auto_corr]
    a_vecs = [[0.0] * (coef_order + 2) for _ in range(coef_order)]
    parcor = [0.0] * (coef_order + 1)

    # Almost no signal power: predict a silent system.
    if abs(r[0]) < _FLT_EPSILON:
        return a_vecs, parcor, [r[0]] * (coef_order + 1)

    error_vars = [0.0] * (coef_order + 1)
    first = a_vecs[0]
    first[0] = 1.0
    first[1] = -r[1] / r[0]
    error_vars[0] = r[0]
    parcor[0] = r[1] / error_vars[0]
    error_vars[1] = error_vars[0] + r[1] * first[1]

    for k in range(1, coef_order):
        prev = a_vecs[k - 1]
        gamma = sum(prev[i] * r[k + 1 - i] for i in range(k + 1))
        gamma = _ieee_div(gamma, -error_vars[k])
        error_vars[k + 1] = error_vars[k] * (1.0 - gamma * gamma)
        current = a_vecs[k]
        for i in range(k + 2):
            current[i] = prev[i] + gamma * prev[k + 1 - i]
        parcor[k] = -gamma

    return a_vecs, parcor, error_vars


class LPCCalculator:
    """Computes LPC coefficients for blocks of at most ``max_num_samples`` samples.

    After each analysis the attributes ``auto_corr``, ``a_vecs``,
    ``parcor_coef`` and ``error_vars`` hold the intermediate results.
    """

    def __init__(self, max_order: int, max_num_samples: int) -> None:
        if max_order <= 0:
            raise ValueError(f"maximum order must be positive: {max_order}")
        if max_num_samples <= 0:
            raise ValueError(f"maximum number of samples must be positive: {max_num_samples}")
        self.max_order = max_order
        self.max_num_samples = max_num_samples
        self.auto_corr: list[float] = []
        self.a_vecs: list[list[float]] = []
        self.parcor_coef: list[float] = []
        self.error_vars: list[float] = []

    def _check(self, num_samples: int, coef_order: int) -> None:
        if coef_order < 1:
            raise ValueError(f"coefficient order must be at least 1: {coef_order}")
        if coef_order > self.max_order:
            raise ExceedMaxOrderError(f"order {coef_order} exceeds maximum {self.max_order}")
        if num_samples > self.max_num_samples:
            raise ExceedMaxNumSamplesError(
                f"{num_samples} samples exceed maximum {self.max_num_samples}"
            )
        if num_samples == 0:
            raise ValueError("analysis needs at least one sample")

    def _analyze(
        self,
        data: Sequence[float],
        coef_order: int,
        window_type: WindowType | int,
        regular_term: float,
    ) -> None:
        window_type = WindowType(window_type)
        self._check(len(data), coef_order)
        windowed = apply_window(window_type, data)
        n = len(windowed)
        nlags = min(coef_order + 1, n)
        auto_corr = auto_correlation_by_fft(windowed, nlags)
        auto_corr.extend([0.0] * (coef_order + 1 - nlags))
        self.auto_corr = auto_corr

        # Too few samples make the coefficients diverge: treat as silence.
        if n < coef_order:
            self.a_vecs = [[0.0] * (coef_order + 2) for _ in range(coef_order)]
            self.parcor_coef = [0.0] * (coef_order + 1)
            self.error_vars = [auto_corr[0]] * (coef_order + 1)
            return

        # Ridge regularisation: emphasise the zeroth lag.
        auto_corr[0] *= 1.0 + regular_term
        a_vecs, parcor, error_vars = levinson_durbin(auto_corr, coef_order)
        factor = _window_inverse_squared_sum(window_type, n)
        self.a_vecs = a_vecs
        self.parcor_coef = parcor
        self.error_vars = [v * factor for v in error_vars]

    def calculate_coefficients(
        self,
        data: Sequence[float],
        coef_order: int,
        window_type: WindowType | int = WindowType.RECTANGULAR,
        regular_term: float = 0.0,
    ) -> list[float]:
        """Return the ``coef_order`` LPC coefficients of ``data``."""
        self._analyze(data, coef_order, window_type, regular_term)
        return list(self.a_vecs[coef_order - 1][1:coef_order + 1])

    def calculate_multiple_coefficients(
        self,
        data: Sequence[float],
        max_coef_order: int,
        window_type: WindowType | int = WindowType.RECTANGULAR,
        regular_term: float = 0.0,
    ) -> tuple[list[list[float]], list[float]]:
        """Return the coefficients of every order up to ``max_coef_order`` and the error variances.

        Row ``k`` holds the order ``k + 1`` filter padded with zeros to
        ``max_coef_order`` entries; the variances cover orders ``0 .. max_coef_order``.
        """
        self._analyze(data, max_coef_order, window_type, regular_term)
        rows = [list(vec[1:max_coef_order + 1]) for vec in self.a_vecs]
        return rows, list(self.error_vars)

    def estimate_code_length(
        self,
        data: Sequence[float],
        bits_per_sample: int,
        coef_order: int,
        window_type: WindowType | int = WindowType.RECTANGULAR,
    ) -> float:
        """Estimate the bits per sample needed to code the prediction residual."""
        self._analyze(data, coef_order, window_type, 0.0)
        power = self.auto_corr[0] * 2.0 ** (2.0 * (bits_per_sample - 1))
        if abs(power) <= _FLT_MIN:
            return 0.0
        log2_mean_power = _log2(power) - _log2(float(len(data)))
        log2_var_ratio = sum(
            _log2(1.0 - p * p) for p in self.parcor_coef[:coef_order]
        )
        length = _BETA_CONST_FOR_LAPLACE_DIST + 0.5 * (log2_mean_power + log2_var_ratio)
        # Very quiet input: expect one bit per sample.
        if length <= 0:
            return 1.0
        return length

    def calculate_mdl(
        self,
        data: Sequence[float],
        coef_order: int,
        window_type: WindowType | int = WindowType.RECTANGULAR,
    ) -> float:
        """Return the minimum description length criterion for ``coef_order``."""
        self._analyze(data, coef_order, window_type, 0.0)
        num_samples = len(data)
        total = sum(
            _log(1.0 - p * p) for p in self.parcor_coef[1:coef_order + 1]
        )
        total *= num_samples
        total += coef_order * _log(float(num_samples))
        return total