# srlacodec

Pure-Python building blocks for lossless audio coding based on linear
prediction and Golomb-Rice entropy codes. Only the standard library is used.

## Modules

- `srlacodec.bitwriter`
  - `BitWriter(size)` writes bit fields, most significant bit first, into a
    buffer of `size` bytes.
  - Its methods are `put_bits`, `put_zero_run`, `flush`, `seek`, `tell`,
    `getvalue` and `close`.
  - `SeekOrigin` (`SET`, `CUR`, `END`) selects the seek reference. `END`
    refers to the last byte.
  - Running past the buffer, seeking out of range or using a closed stream
    raises `BitStreamError`.
- `srlacodec.bitreader`
  - `BitReader(data)` reads bit fields back.
  - Its methods are `get_bits`, `get_zero_run_length`, `flush`, `seek`,
    `tell` and `close`.
  - `nlz(x)` counts the leading zero bits of a 32-bit value.
  - Both stream classes work as context managers.
- `srlacodec.fft`
  - `complex_fft(data, flag)` is an unnormalised radix-4 Stockham FFT over a
    power-of-two list of complex numbers. Pass `-1` for forward and `1` for
    inverse.
  - `real_fft(data, flag)` transforms a real sequence in packed form and
    returns a packed result:
    - element 0 holds the DC component;
    - element 1 holds the Nyquist component;
    - the remaining elements are interleaved real and imaginary parts.
  - The normalisation constant is `2/n`.
- `srlacodec.lpc`
  - `apply_window`, `auto_correlation`, `auto_correlation_by_fft` and
    `levinson_durbin` are standalone functions.
  - `LPCCalculator(max_order, max_num_samples)` provides
    `calculate_coefficients`, `calculate_multiple_coefficients`,
    `estimate_code_length` and `calculate_mdl`.
  - `WindowType` selects a rectangular, sine or Welch window.
  - Errors derive from `LPCError`, including `ExceedMaxOrderError` and
    `ExceedMaxNumSamplesError`.
- `srlacodec.lpc_af`
  - `calculate_coefficients_af` refines coefficients by iteratively
    reweighted least squares, minimising the mean absolute residual.
  - `calculate_coefficients_burg` estimates coefficients with Burg's method.
  - `cholesky_decomposition` and `solve_by_cholesky` are the underlying
    helpers. A matrix that is not positive definite raises
    `SingularMatrixError`.
- `srlacodec.lpc_svr`
  - `calculate_coefficients_svr` refines coefficients by soft-thresholded
    regression over a list of margins. It keeps the coefficients with the
    shortest estimated code length (`rgr_mean_code_length`).
  - `covariance_matrix` is also provided.
- `srlacodec.lpc_quantize`
  - `lpc_to_parcor` converts LPC coefficients to PARCOR coefficients.
  - `quantize_coefficients_as_parcor` quantises them as PARCOR coefficients.
  - `quantize_coefficients` turns coefficients into integers plus a right
    shift.
  - `predict` and `synthesize` apply an integer prediction filter.
- `srlacodec.golomb`
  - `sint_to_uint` and `uint_to_sint` map between signed and non-negative
    integers.
  - Codes:
    - gamma: `put_gamma` / `get_gamma`;
    - Rice: `put_rice` / `get_rice`;
    - recursive Rice: `put_recursive_rice` / `get_recursive_rice`.
  - Code lengths: `rice_code_length`, `recursive_rice_code_length` and
    `mean_code_length`.
  - Parameter choice: `optimal_rice_parameter` and
    `optimal_recursive_rice_parameter`.
- `srlacodec.partition`
  - `search_best_partition(data)` picks a `CodeType` (`RICE`,
    `RECURSIVE_RICE`, `ALLZERO`) and a partition order for a block of signed
    samples.
  - It returns a `PartitionChoice`. The `code_length` field includes the
    2-bit code type field.
  - `max_partition_order` and `partition_means` are also provided.

## Examples

Recursive Rice coding of a few signed samples:

```python
from srlacodec.bitreader import BitReader
from srlacodec.bitwriter import BitWriter
from srlacodec.golomb import (
    get_recursive_rice,
    optimal_recursive_rice_parameter,
    put_recursive_rice,
    sint_to_uint,
    uint_to_sint,
)

samples = [0, 3, -2, 5, -7, 1, 0, -1]
uvals = [sint_to_uint(s) for s in samples]
k1, k2, _ = optimal_recursive_rice_parameter(sum(uvals) / len(uvals))

with BitWriter(64) as writer:
    for u in uvals:
        put_recursive_rice(writer, k1, k2, u)
    writer.flush()
    encoded = writer.getvalue()

with BitReader(encoded) as reader:
    decoded = [uint_to_sint(get_recursive_rice(reader, k2)) for _ in samples]
assert decoded == samples
```

Prediction residuals round-trip through the integer LPC filter:

```python
from srlacodec.lpc_quantize import predict, synthesize

coef, rshift = [-3, 1], 2
residual = predict([10, 12, 15, 13], coef, rshift)
assert synthesize(residual, coef, rshift) == [10, 12, 15, 13]
```

## What the package does not do

There is no single call that encodes or decodes a whole block of samples.
`search_best_partition` chooses the code type, partition order and means.
The caller must then write those fields and the per-partition parameters with
the `golomb` and bit stream functions, and read them back the same way.

The package also has no:

- file or container format;
- headers or checksums;
- WAV reading or writing;
- command-line program.

## Tests

The tests use pytest, which the `test` extra installs. Run `pytest` from the
project directory.