import pytest

from srlacodec.bitwriter import BitStreamError, BitWriter, SeekOrigin


def _expected_bytes(fields):
    """Concatenate (value, nbits) fields and pad with zeros to a byte boundary."""
    bits = "".join(format(value, f"0{nbits}b") if nbits else "" for value, nbits in fields)
    bits = bits.ljust(-(-len(bits) // 8) * 8, "0")
    return bytes(int(bits[i:i + 8], 2) for i in range(0, len(bits), 8))


def test_full_word_is_big_endian():
    writer = BitWriter(8)
    writer.put_bits(0x12345678, 32)
    assert writer.tell() == 4
    assert writer.getvalue() == (0x12345678).to_bytes(4, "big")


def test_pending_bits_not_stored_until_flush():
    writer = BitWriter(4)
    writer.put_bits(0b101, 3)
    assert writer.getvalue() == b""
    assert writer.tell() == 0
    writer.flush()
    assert writer.getvalue() == _expected_bytes([(0b101, 3)])
    assert writer.tell() == 1


@pytest.mark.parametrize(
    "fields",
    [
        [(1, 1), (0, 2), (0x7F, 7), (0xABCD, 16), (5, 3)],
        [(0xFFFFFFFF, 32), (0, 1), (0x1234, 13)],
        [(3, 2)] * 20,
        [(0xDEADBEEF, 32), (0xCAFEBABE, 32)],
    ],
)
def test_bit_fields_concatenate(fields):
    writer = BitWriter(64)
    for value, nbits in fields:
        writer.put_bits(value, nbits)
    writer.flush()
    assert writer.getvalue() == _expected_bytes(fields)


def test_value_is_masked_to_nbits():
    writer = BitWriter(4)
    writer.put_bits(0xFFFF, 4)
    writer.flush()
    assert writer.getvalue() == _expected_bytes([(0xF, 4)])


def test_zero_bits_is_noop():
    writer = BitWriter(4)
    writer.put_bits(0xFF, 0)
    writer.flush()
    assert writer.getvalue() == b""
    assert writer.tell() == 0


@pytest.mark.parametrize("runlength", [0, 5, 30, 31, 40, 100])
def test_zero_run(runlength):
    writer = BitWriter(32)
    writer.put_zero_run(runlength)
    writer.flush()
    assert writer.getvalue() == _expected_bytes([(0, runlength), (1, 1)])


@pytest.mark.parametrize("nbits", [33, -1])
def test_invalid_nbits(nbits):
    writer = BitWriter(8)
    with pytest.raises(ValueError):
        writer.put_bits(0, nbits)


def test_word_overflow_raises():
    writer = BitWriter(3)
    with pytest.raises(BitStreamError):
        writer.put_bits(0, 32)


def test_flush_overflow_raises():
    writer = BitWriter(2)
    for _ in range(3):
        writer.put_bits(0xAA, 8)
    with pytest.raises(BitStreamError):
        writer.flush()


def test_seek_and_tell():
    writer = BitWriter(8)
    writer.put_bits(0xAABBCCDD, 32)
    writer.seek(0, SeekOrigin.SET)
    assert writer.tell() == 0
    writer.seek(2, SeekOrigin.CUR)
    assert writer.tell() == 2
    writer.seek(0, SeekOrigin.END)
    assert writer.tell() == 7
    writer.seek(-7, SeekOrigin.END)
    assert writer.tell() == 0


def test_seek_flushes_pending_bits():
    writer = BitWriter(8)
    writer.put_bits(0b11, 2)
    writer.seek(0, SeekOrigin.CUR)
    assert writer.tell() == 1
    assert writer.getvalue() == _expected_bytes([(0b11, 2)])


def test_seek_out_of_range():
    writer = BitWriter(4)
    with pytest.raises(BitStreamError):
        writer.seek(4, SeekOrigin.SET)
    with pytest.raises(BitStreamError):
        writer.seek(-1, SeekOrigin.SET)
    with pytest.raises(BitStreamError):
        writer.seek(1, SeekOrigin.END)


def test_seek_invalid_origin():
    writer = BitWriter(4)
    with pytest.raises(ValueError):
        writer.seek(0, 7)


def test_overwrite_after_seek_keeps_length():
    writer = BitWriter(4)
    writer.put_bits(0xAABBCCDD, 32)
    writer.seek(1, SeekOrigin.SET)
    writer.put_bits(0x11, 8)
    writer.flush()
    assert writer.tell() == 2
    assert writer.getvalue() == bytes([0xAA, 0x11, 0xCC, 0xDD])


def test_context_manager_flushes_and_closes():
    with BitWriter(4) as writer:
        writer.put_bits(0b1, 1)
    assert writer.getvalue() == _expected_bytes([(1, 1)])
    with pytest.raises(BitStreamError):
        writer.put_bits(0, 1)
    with pytest.raises(BitStreamError):
        writer.tell()