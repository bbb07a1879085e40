"""
Little-endian primitive reads over an in-memory buffer.

:class:`ByteReader` is a forward-only cursor.  Every read first checks
that enough bytes remain and raises :class:`IncompleteError` carrying the
exact shortfall otherwise, so callers never see a :mod:`struct` error.
"""

from __future__ import annotations

import struct

from execview.core.errors import IncompleteError

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")


class ByteReader:
    """Sequential reader of little-endian fields.

    Usage::

        reader = ByteReader(data, offset=0x40)
        reader.require(56)
        p_type = reader.u32()
    """

    __slots__ = ("_data", "_offset")

    def __init__(self, data: bytes | bytearray | memoryview, offset: int = 0) -> None:
        if offset < 0:
            raise ValueError(f"negative offset {offset}")
        self._data = data
        self._offset = offset

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return max(len(self._data) - self._offset, 0)

    def require(self, size: int) -> None:
        """Raise :class:`IncompleteError` unless *size* bytes are available."""
        shortfall = self._offset + size - len(self._data)
        if shortfall > 0:
            raise IncompleteError(shortfall)

    def _unpack(self, codec: struct.Struct) -> int:
        self.require(codec.size)
        (value,) = codec.unpack_from(self._data, self._offset)
        self._offset += codec.size
        return value

    def u8(self) -> int:
        return self._unpack(_U8)

    def u16(self) -> int:
        return self._unpack(_U16)

    def u32(self) -> int:
        return self._unpack(_U32)

    def u64(self) -> int:
        return self._unpack(_U64)

    def uint(self, size: int) -> int:
        """Read an unsigned integer of *size* bytes (2, 4 or 8)."""
        if size == 2:
            return self.u16()
        if size == 4:
            return self.u32()
        if size == 8:
            return self.u64()
        raise ValueError(f"unsupported integer width {size}")

    def take(self, size: int) -> bytes:
        """Read a fixed-size byte array."""
        self.require(size)
        chunk = bytes(self._data[self._offset:self._offset + size])
        self._offset += size
        return chunk
