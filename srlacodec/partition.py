"""Choice of entropy code and partitioning for a block of signed samples."""

from __future__ import annotations

import enum
import math
from collections.abc import Sequence
from dataclasses import dataclass

from .golomb import (
    optimal_recursive_rice_parameter,
    optimal_rice_parameter,
    recursive_rice_code_length,
    rice_code_length,
    sint_to_uint,
)

LOG2_MAX_NUM_PARTITIONS = 10
MAX_NUM_PARTITIONS = 1 << LOG2_MAX_NUM_PARTITIONS
RICE_PARAMETER_BITS = 5
CODE_TYPE_BITS = 2


class CodeType(enum.IntEnum):
    """Entropy code used for a block, as stored in its 2-bit header."""

    RICE = 0
    RECURSIVE_RICE = 1
    ALLZERO = 2


@dataclass(frozen=True)
class PartitionChoice:
    """Result of the partition search for one block.

    ``uvals`` are the samples mapped to non-negative integers and
    ``part_means[p]`` the mean of each of the ``2**p`` partitions.
    """

    code_type: CodeType
    partition_order: int
    code_length: int
    uvals: tuple[int, ...]
    part_means: tuple[tuple[float, ...], ...]


def max_partition_order(num_samples: int) -> int:
    """Return the largest partition order that divides ``num_samples`` evenly (at most 10)."""
    if num_samples <= 0:
        raise ValueError(f"number of samples must be positive: {num_samples}")
    porder = 1
    while num_samples % (1 << porder) == 0:
        porder += 1
    return min(porder - 1, LOG2_MAX_NUM_PARTITIONS)


def partition_means(uvals: Sequence[int], max_porder: int) -> list[list[float]]:
    """Return the partition means for every order ``0 .. max_porder``."""
    num_partitions = 1 << max_porder
    if len(uvals) == 0 or len(uvals) % num_partitions != 0:
        raise ValueError(
            f"{len(uvals)} samples cannot be split into {num_partitions} partitions"
        )
    nsmpl = len(uvals) // num_partitions
    finest = [
        float(sum(uvals[part * nsmpl:(part + 1) * nsmpl])) / nsmpl
        for part in range(num_partitions)
    ]
    levels = [finest]
    for _ in range(max_porder):
        finer = levels[0]
        levels.insert(0, [(finer[2 * p] + finer[2 * p + 1]) / 2.0 for p in range(len(finer) // 2)])
    return levels


def _rice_bits(uvals: Sequence[int], means: Sequence[float], porder: int, limit: float) -> float:
    nsmpl = len(uvals) >> porder
    bits = LOG2_MAX_NUM_PARTITIONS
    prevk = 0
    for part in range(1 << porder):
        k, _ = optimal_rice_parameter(means[part])
        bits += sum(rice_code_length(k, u) for u in uvals[part * nsmpl:(part + 1) * nsmpl])
        if part == 0:
            bits += RICE_PARAMETER_BITS
        else:
            bits += sint_to_uint(k - prevk) + 1
        prevk = k
        if bits >= limit:
            break
    return bits


def _recursive_rice_bits(
    uvals: Sequence[int], means: Sequence[float], porder: int, limit: float
) -> float:
    nsmpl = len(uvals) >> porder
    bits = LOG2_MAX_NUM_PARTITIONS
    prevk2 = 0
    for part in range(1 << porder):
        k1, k2, _ = optimal_recursive_rice_parameter(means[part])
        bits += recursive_rice_code_length(uvals[part * nsmpl:(part + 1) * nsmpl], k1, k2)
        if part == 0:
            bits += RICE_PARAMETER_BITS
        else:
            bits += sint_to_uint(k2 - prevk2) + 1
        prevk2 = k2
        if bits >= limit:
            break
    return bits


def search_best_partition(data: Sequence[int]) -> PartitionChoice:
    """Choose the code and partition order that give the shortest block.

    The returned code length includes the 2-bit code type field.
    """
    max_porder = max_partition_order(len(data))
    uvals = tuple(sint_to_uint(int(v)) for v in data)
    means = partition_means(uvals, max_porder)

    if max(uvals) == 0:
        code_type = CodeType.ALLZERO
    elif means[0][0] < 2:
        code_type = CodeType.RICE
    else:
        code_type = CodeType.RECURSIVE_RICE

    if code_type is CodeType.ALLZERO:
        best_porder, min_bits = 0, 0
    else:
        cost = _rice_bits if code_type is CodeType.RICE else _recursive_rice_bits
        best_porder = -1
        min_bits: float = math.inf
        for porder in range(max_porder + 1):
            bits = cost(uvals, means[porder], porder, min_bits)
            if bits < min_bits:
                min_bits = bits
                best_porder = porder

    return PartitionChoice(
        code_type=code_type,
        partition_order=best_porder,
        code_length=int(min_bits) + CODE_TYPE_BITS,
        uvals=uvals,
        part_means=tuple(tuple(level) for level in means),
    )