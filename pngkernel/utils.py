"""CRC-32 checksum used by PNG chunks."""

from collections.abc import Iterable

_CRC_POLYNOMIAL = 0xEDB88320
_CRC_MASK = 0xFFFFFFFF


def _make_crc_table() -> tuple[int, ...]:
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            c = _CRC_POLYNOMIAL ^ (c >> 1) if c & 1 else c >> 1
        table.append(c)
    return tuple(table)


_CRC_TABLE = _make_crc_table()


def update_crc(crc_value: int, data: Iterable[int]) -> int:
    """Feed ``data`` into a running (non-inverted) CRC register and return it."""
    c = crc_value
    for byte in data:
        c = _CRC_TABLE[(c ^ byte) & 0xFF] ^ (c >> 8)
    return c


def crc(data: Iterable[int]) -> int:
    """Return the CRC-32 of ``data`` as defined for PNG chunks."""
    return update_crc(_CRC_MASK, data) ^ _CRC_MASK