# -*- coding: utf-8 -*-
"""Payload codec for the NFC Forum Text record type (well known type "T").

Payload layout::

    +---------+---------------------+------------------+
    | status  | language code       | text             |
    | 1 octet | status & 0x1F octet | UTF-8 or UTF-16  |
    +---------+---------------------+------------------+

Bit 7 of the status octet selects UTF-16 text, bits 4..0 give the length
of the IANA language code that follows.
"""

import logging
from enum import IntEnum

from . import encoding
from .record import DecodeError, Record, RecordType, TruncatedError

log = logging.getLogger(__name__)

MAX_LOCALE_LENGTH = 5
LOCALE_LENGTH_MASK = 0x1f


class TextCodec(IntEnum):
    UTF8 = 0x00
    UTF16 = 0x80


def create_text_record(text, locale="en", codec=TextCodec.UTF8):
    """Create a Text record. The locale is cut to its first five
    characters. UTF-16 text is written big endian without a BOM.
    """
    codec = TextCodec(codec)
    try:
        LANG = locale[:MAX_LOCALE_LENGTH].encode('ascii')
    except UnicodeEncodeError:
        raise ValueError("language code must be US-ASCII")
    if codec == TextCodec.UTF16:
        TEXT = encoding.to_utf16be_bytes(text)
    else:
        TEXT = encoding.to_utf8(text)
    FLAG = codec | (len(LANG) & LOCALE_LENGTH_MASK)
    return Record(RecordType.text(), bytes([FLAG]) + LANG + TEXT)


def _split(payload):
    payload = bytes(payload)
    if len(payload) < 1:
        raise TruncatedError("text status", 1, 0)
    FLAG = payload[0]
    length = FLAG & LOCALE_LENGTH_MASK
    if len(payload) - 1 < length:
        raise TruncatedError("text locale", length, len(payload) - 1)
    return FLAG, payload[1:1 + length], payload[1 + length:]


def get_text_codec(payload):
    FLAG, _, _ = _split(payload)
    return TextCodec(FLAG & TextCodec.UTF16)


def get_text_locale(payload):
    _, LANG, _ = _split(payload)
    try:
        return LANG.decode('ascii')
    except UnicodeDecodeError:
        raise DecodeError("language code must be US-ASCII")


def _is_utf8_text(TEXT):
    # UTF-16 text of any script below U+0100 carries zero octets
    if not TEXT or b'\x00' in TEXT or encoding.has_bom(TEXT):
        return False
    try:
        TEXT.decode('utf-8')
    except UnicodeDecodeError:
        return False
    return True


def get_text(payload):
    """Return the text of a Text record payload as str.

    UTF-16 text is read in the order given by its BOM, or big endian. Some
    writers set the UTF-16 bit on UTF-8 text, so a body without BOM and
    zero octets that is valid UTF-8 is read as UTF-8.
    """
    FLAG, _, TEXT = _split(payload)
    try:
        if not FLAG & TextCodec.UTF16:
            return TEXT.decode('utf-8')
        if not _is_utf8_text(TEXT):
            return encoding.from_utf16_bytes(TEXT)
        log.warning("UTF-16 flagged text of %d octets is valid UTF-8, "
                    "reading as UTF-8", len(TEXT))
        return TEXT.decode('utf-8')
    except UnicodeDecodeError as error:
        raise DecodeError("text can't be decoded: {}".format(error))
