"""Big-endian bit writer over a fixed-size byte buffer."""

from __future__ import annotations

import enum

_WORD_BITS = 32
_WORD_MASK = 0xFFFFFFFF


class BitStreamError(Exception):
    """Raised when a bit stream runs past its buffer or is used after closing."""


class SeekOrigin(enum.IntEnum):
    """Reference point for seeking, in the manner of ``fseek``."""

    SET = 0
    CUR = 1
    END = 2


def _lower_bits(value: int, nbits: int) -> int:
    return value & ((1 << nbits) - 1)


class BitWriter:
    """Writes bit fields, most significant bit first, into a buffer of ``size`` bytes.

    Bits are gathered in a 32-bit word and stored once the word is full;
    :meth:`flush` stores the pending bits up to the next byte boundary.
    """

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"buffer size must not be negative: {size}")
        self._memory = bytearray(size)
        self._pos = 0
        self._end = 0
        self._buffer = 0
        self._free = _WORD_BITS
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise BitStreamError("bit stream is closed")

    def _emit(self, nbytes: int) -> None:
        if self._pos + nbytes > len(self._memory):
            raise BitStreamError("bit stream buffer exhausted")
        word = self._buffer.to_bytes(4, "big")
        self._memory[self._pos:self._pos + nbytes] = word[:nbytes]
        self._pos += nbytes
        self._end = max(self._end, self._pos)

    def put_bits(self, value: int, nbits: int) -> None:
        """Write the lowest ``nbits`` bits of ``value`` (at most 32)."""
        self._check_open()
        if not 0 <= nbits <= _WORD_BITS:
            raise ValueError(f"nbits must be in 0..32: {nbits}")
        if nbits == 0:
            return
        value &= _WORD_MASK
        if nbits >= self._free:
            nbits -= self._free
            self._buffer |= _lower_bits(value >> nbits, self._free)
            self._emit(4)
            self._buffer = 0
            self._free = _WORD_BITS
        self._free -= nbits
        self._buffer |= _lower_bits(value, nbits) << self._free

    def put_zero_run(self, runlength: int) -> None:
        """Write ``runlength`` zero bits followed by a terminating one bit."""
        self._check_open()
        if runlength < 0:
            raise ValueError(f"run length must not be negative: {runlength}")
        run = runlength + 1
        while run > 31:
            self.put_bits(0, 31)
            run -= 31
        self.put_bits(1, run)

    def flush(self) -> None:
        """Store pending bits, padding with zeros to the next byte boundary."""
        self._check_open()
        if self._free < _WORD_BITS:
            used = _WORD_BITS - self._free
            self._emit((used + 7) // 8)
            self._buffer = 0
            self._free = _WORD_BITS

    def seek(self, offset: int, origin: SeekOrigin | int) -> None:
        """Flush, then move the byte position; ``END`` refers to the last byte."""
        self._check_open()
        try:
            origin = SeekOrigin(origin)
        except ValueError:
            raise ValueError(f"unknown seek origin: {origin!r}") from None
        self.flush()
        if origin is SeekOrigin.SET:
            base = 0
        elif origin is SeekOrigin.CUR:
            base = self._pos
        else:
            base = len(self._memory) - 1
        position = base + offset
        if not 0 <= position < len(self._memory):
            raise BitStreamError(f"seek position out of range: {position}")
        self._pos = position

    def tell(self) -> int:
        """Return the current byte offset (pending bits are not counted)."""
        self._check_open()
        return self._pos

    def getvalue(self) -> bytes:
        """Return the bytes stored so far, up to the furthest position reached."""
        return bytes(self._memory[:self._end])

    def close(self) -> None:
        """Flush pending bits and refuse further writing."""
        if self._closed:
            return
        self.flush()
        self._buffer = 0
        self._closed = True

    def __enter__(self) -> BitWriter:
        return self

    def __exit__(self, *args) -> None:
        self.close()