# -*- coding: utf-8 -*-
"""Payload codec for the NFC Forum URI record type (well known type "U").

The first payload octet abbreviates a well known URI prefix, the rest
is the UTF-8 encoded remainder of the URI.
"""

from .record import DecodeError, Record, RecordType, TruncatedError

# Identifier codes 0x24..0xFF are reserved and read as 0x00
URI_PREFIXES = (
    "", "http://www.", "https://www.", "http://", "https://", "tel:",
    "mailto:", "ftp://anonymous:anonymous@", "ftp://ftp.", "ftps://",
    "sftp://", "smb://", "nfs://", "ftp://", "dav://", "news:",
    "telnet://", "imap:", "rtsp://", "urn:", "pop:", "sip:", "sips:",
    "tftp:", "btspp://", "btl2cap://", "btgoep://", "tcpobex://",
    "irdaobex://", "file://", "urn:epc:id:", "urn:epc:tag:",
    "urn:epc:pat:", "urn:epc:raw:", "urn:epc:", "urn:nfc:")


def create_uri_record(uri):
    """Create a URI record, abbreviating the first prefix of the table
    that uri starts with. The table order decides, not the prefix length.
    """
    if isinstance(uri, (bytes, bytearray)):
        uri = bytes(uri).decode('utf-8')
    for index, prefix in enumerate(URI_PREFIXES):
        if prefix and uri.startswith(prefix):
            payload = bytes([index]) + uri[len(prefix):].encode('utf-8')
            break
    else:
        payload = b'\x00' + uri.encode('utf-8')
    return Record(RecordType.uri(), payload)


def _code(payload):
    if len(payload) < 1:
        raise TruncatedError("URI identifier code", 1, 0)
    code = payload[0]
    return code if code < len(URI_PREFIXES) else 0


def get_uri_protocol(payload):
    return URI_PREFIXES[_code(payload)]


def get_uri(payload):
    """Return the URI without the abbreviated prefix."""
    _code(payload)
    try:
        return bytes(payload[1:]).decode('utf-8')
    except UnicodeDecodeError as error:
        raise DecodeError("URI can not be decoded: {}".format(error))


def get_full_uri(payload):
    return get_uri_protocol(payload) + get_uri(payload)
