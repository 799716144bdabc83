"""UTF-8 and UTF-16 conversion helpers used by the Text record codec.

UTF-16 text is handled in two forms: a list of 16-bit code units and a
byte string in either byte order. Text record payloads may carry a
byte order mark, and are big endian when they don't.
"""

import struct
import sys
from enum import Enum

BOM = 0xfeff
BOM_SWAPPED = 0xfffe
BOM_BE = b'\xfe\xff'
BOM_LE = b'\xff\xfe'


class Endian(Enum):
    BIG = 'big'
    LITTLE = 'little'


_codec_name = {Endian.BIG: 'utf-16-be', Endian.LITTLE: 'utf-16-le'}
_struct_order = {Endian.BIG: '>', Endian.LITTLE: '<'}


def system_endianness():
    return Endian(sys.byteorder)


def _units_to_str(units):
    units = list(units)
    if units[:1] == [BOM_SWAPPED]:
        units = [((u >> 8) | (u << 8)) & 0xffff for u in units]
    if units[:1] == [BOM]:
        units = units[1:]
    octets = struct.pack('>{}H'.format(len(units)), *units)
    return octets.decode('utf-16-be')


def _as_str(src):
    if isinstance(src, str):
        return src
    if isinstance(src, (bytes, bytearray)):
        return bytes(src).decode('utf-8')
    if isinstance(src, (list, tuple)):
        return _units_to_str(src)
    errstr = "expected str, UTF-8 bytes or UTF-16 code units, but not {}"
    raise TypeError(errstr.format(type(src).__name__))


def to_utf8(src):
    """Return src as UTF-8 encoded bytes.

    src may be a str, UTF-8 bytes (returned unchanged) or a sequence of
    UTF-16 code units. A leading BOM in code units is honored and removed.
    """
    if isinstance(src, (bytes, bytearray)):
        return bytes(src)
    return _as_str(src).encode('utf-8')


def to_utf16(src):
    """Return src as a list of UTF-16 code units.

    Characters outside the basic multilingual plane become surrogate pairs.
    """
    if isinstance(src, (list, tuple)):
        return list(src)
    octets = _as_str(src).encode('utf-16-be')
    return list(struct.unpack('>{}H'.format(len(octets) // 2), octets))


def to_utf16_bytes(src, endian=Endian.LITTLE):
    """Serialize src as UTF-16 in the given byte order. A code unit
    sequence is packed as is, a BOM in it is kept.
    """
    endian = Endian(endian)
    if isinstance(src, (list, tuple)):
        fmt = '{}{}H'.format(_struct_order[endian], len(src))
        return struct.pack(fmt, *src)
    return _as_str(src).encode(_codec_name[endian])


def to_utf16le_bytes(src):
    return to_utf16_bytes(src, Endian.LITTLE)


def to_utf16be_bytes(src):
    return to_utf16_bytes(src, Endian.BIG)


def from_utf16_bytes(data, endian=None):
    """Decode UTF-16 bytes into a str.

    A leading byte order mark selects the byte order and is removed. With
    no BOM the explicit endian argument is used, or big endian if that is
    None as well.
    """
    data = bytes(data)
    if data[:2] == BOM_BE:
        endian, data = Endian.BIG, data[2:]
    elif data[:2] == BOM_LE:
        endian, data = Endian.LITTLE, data[2:]
    elif endian is None:
        endian = Endian.BIG
    return data.decode(_codec_name[Endian(endian)])


def has_bom(value):
    """Check for a UTF-16 byte order mark at the start of value, which may
    be bytes, a str or a sequence of code units.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value[:2]) in (BOM_BE, BOM_LE)
    if isinstance(value, str):
        return value[:1] in ('\ufeff', '\ufffe')
    return len(value) > 0 and value[0] in (BOM, BOM_SWAPPED)


def swap_bytes(data):
    """Swap every pair of octets, converting UTF-16 bytes between big and
    little endian.
    """
    data = bytes(data)
    if len(data) % 2:
        raise ValueError("can not swap an odd number of octets")
    swapped = bytearray(len(data))
    swapped[0::2] = data[1::2]
    swapped[1::2] = data[0::2]
    return bytes(swapped)
