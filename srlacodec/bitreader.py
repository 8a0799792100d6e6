"""Big-endian bit reader over a byte buffer."""

from __future__ import annotations

from .bitwriter import BitStreamError, SeekOrigin

_WORD_BITS = 32
_WORD_MASK = 0xFFFFFFFF

# Number of leading zero bits in each byte value, counted from the top bit.
_ZERO_RUN_TABLE = tuple(8 - byte.bit_length() for byte in range(256))


def nlz(x: int) -> int:
    """Return the number of leading zero bits of a 32-bit value (32 for zero)."""
    return _WORD_BITS - (x & _WORD_MASK).bit_length()


def _lower_bits(value: int, nbits: int) -> int:
    return value & ((1 << nbits) - 1)


class BitReader:
    """Reads bit fields, most significant bit first, from a byte buffer.

    Bits are fetched a 32-bit word at a time; bytes past the end of the
    buffer read as zero, but fetching a word that starts past the end fails.
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._memory = bytes(data)
        self._pos = 0
        self._buffer = 0
        self._count = 0
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise BitStreamError("bit stream is closed")

    def _check_readable(self) -> None:
        if not 0 <= self._pos < len(self._memory):
            raise BitStreamError("bit stream exhausted")

    def _load_word(self) -> None:
        self._check_readable()
        chunk = self._memory[self._pos:self._pos + 4]
        self._buffer = int.from_bytes(chunk.ljust(4, b"\x00"), "big")
        self._pos += 4
        self._count = _WORD_BITS

    def get_bits(self, nbits: int) -> int:
        """Read ``nbits`` bits (at most 32) and return them right-aligned."""
        self._check_open()
        if not 0 <= nbits <= _WORD_BITS:
            raise ValueError(f"nbits must be in 0..32: {nbits}")
        if nbits <= self._count:
            self._count -= nbits
            return _lower_bits(self._buffer >> self._count, nbits)
        rest = nbits - self._count
        high = _lower_bits(self._buffer, self._count) << rest
        self._load_word()
        self._count -= rest
        return high | _lower_bits(self._buffer >> self._count, rest)

    def get_zero_run_length(self) -> int:
        """Read up to and including the next one bit; return the zeros before it."""
        self._check_open()
        run = nlz(_lower_bits(self._buffer, self._count)) + self._count - _WORD_BITS
        self._count -= run
        while self._count == 0:
            self._check_readable()
            byte = self._memory[self._pos]
            self._pos += 1
            self._buffer = byte
            byte_run = _ZERO_RUN_TABLE[byte]
            self._count = 8 - byte_run
            run += byte_run
        self._count -= 1
        return run

    def flush(self) -> None:
        """Drop buffered bits, stepping back over whole unread bytes."""
        self._check_open()
        self._pos -= self._count >> 3
        self._buffer = 0
        self._count = 0

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
        """Return the current byte offset of the fetch position."""
        self._check_open()
        return self._pos

    def close(self) -> None:
        """Flush and refuse further reading."""
        if self._closed:
            return
        self.flush()
        self._closed = True

    def __enter__(self) -> BitReader:
        return self

    def __exit__(self, *args) -> None:
        self.close()