"""
Bounds-checked little-endian reader over a PDB buffer, plus the DeviceSQL
string decoder.

Nothing in here raises on bad input: out-of-range reads give 0 (or b"")
and undecodable strings give "". The files come from third-party
software and may be truncated or from a format revision we have not seen.
"""

import struct

U8 = struct.Struct('<B')
U16 = struct.Struct('<H')
U32 = struct.Struct('<I')

# DeviceSQL string tags
LONG_ASCII = 0x40
LONG_UTF16 = 0x90
SHORT_ASCII_MASK = 0x3f
MAX_FALLBACK_LENGTH = 127


class ByteCursor:
    """Read position over one immutable buffer."""

    def __init__(self, data: bytes):
        self.data = data
        self.length = len(data)
        self.position = 0

    def seek(self, pos: int):
        self.position = pos

    def fits(self, offset: int, size: int) -> bool:
        return offset >= 0 and offset + size <= self.length

    def _read(self, fmt: struct.Struct) -> int:
        pos = self.position
        self.position += fmt.size
        if not self.fits(pos, fmt.size):
            return 0
        return fmt.unpack_from(self.data, pos)[0]

    def read_u8(self) -> int:
        return self._read(U8)

    def read_u16(self) -> int:
        return self._read(U16)

    def read_u32(self) -> int:
        return self._read(U32)

    def read_bytes(self, n: int) -> bytes:
        pos = self.position
        self.position += max(n, 0)
        if n < 0 or not self.fits(pos, n):
            return b''
        return bytes(self.data[pos:pos + n])

    def u8_at(self, offset: int) -> int:
        self.seek(offset)
        return self.read_u8()

    def u16_at(self, offset: int) -> int:
        self.seek(offset)
        return self.read_u16()

    def u32_at(self, offset: int) -> int:
        self.seek(offset)
        return self.read_u32()

    def _slice(self, offset: int, size: int):
        """Raw bytes or None when the range leaves the buffer"""
        if size < 0 or not self.fits(offset, size):
            return None
        return bytes(self.data[offset:offset + size])

    def read_device_sql_string(self, base_offset: int, relative_offset: int) -> str:
        """
        Decode the DeviceSQL string at base_offset + relative_offset.

        A relative offset of 0 is the null string. The first byte is a tag:

            0x40        long ASCII, u8 length, then the characters
            0x90        long UTF-16, u16 byte length, then UTF-16LE units
            <= 0x3f     short ASCII, tag // 2 characters, NUL padded
            other       short form of (tag - 1) // 2 - 1 characters
        """
        if not relative_offset:
            return ''
        start = base_offset + relative_offset
        if start < 0 or start >= self.length:
            return ''

        tag = self.data[start]

        if tag == LONG_ASCII:
            if not self.fits(start + 1, 1):
                return ''
            body = self._slice(start + 2, self.data[start + 1])
            return body.decode('latin-1') if body is not None else ''

        if tag == LONG_UTF16:
            if not self.fits(start + 1, 2):
                return ''
            length = U16.unpack_from(self.data, start + 1)[0]
            body = self._slice(start + 3, length)
            if body is None:
                return ''
            try:
                return body.decode('utf-16-le')
            except UnicodeDecodeError:
                return ''

        if tag & SHORT_ASCII_MASK == tag:
            body = self._slice(start + 1, tag // 2)
            if body is None:
                return ''
            return body.decode('latin-1').rstrip('\x00')

        # Inferred from exported files; only trusted inside the guard
        length = (tag - 1) // 2 - 1
        if length <= 0 or length > MAX_FALLBACK_LENGTH:
            return ''
        body = self._slice(start + 1, length)
        return body.decode('latin-1') if body is not None else ''


def read_device_sql_string(data: bytes, base_offset: int, relative_offset: int) -> str:
    return ByteCursor(data).read_device_sql_string(base_offset, relative_offset)


def write_u32(buffer: bytearray, offset: int, value: int) -> bool:
    """Overwrite a little-endian u32 in place. False if it does not fit."""
    if offset < 0 or offset + U32.size > len(buffer):
        return False
    U32.pack_into(buffer, offset, value & 0xffffffff)
    return True
