# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""Byte-level codecs for the primitive ID3v2 field types."""

import abc

from abc import abstractmethod

from id3core.errors import *

LATIN1 = 0
UCS2 = 1

def decode_uint(data, bits=8):
    """Decode a big-endian unsigned integer carrying `bits` bits per byte.

    With bits < 8, the unused high bits of each byte are reserved and
    must be zero.
    """
    mask = (1 << bits) - 1
    value = 0
    for b in data:
        if b & ~mask:
            raise InvalidSize("Invalid {0}-bit integer byte: 0x{1:02X}"
                              .format(bits, b))
        value <<= bits
        value |= b
    return value

def encode_uint(value, *, width, bits=8):
    "Encode a nonnegative integer into exactly width bytes of bits bits each."
    if value < 0:
        raise InvalidSize("Nonnegative integer expected")
    if value >> (width * bits):
        raise InvalidSize("Integer {0} does not fit in {1} bytes of {2} bits"
                          .format(value, width, bits))
    mask = (1 << bits) - 1
    data = bytearray(width)
    for i in reversed(range(width)):
        data[i] = value & mask
        value >>= bits
    return bytes(data)

class Syncsafe:
    """Conversion to/from syncsafe integers.
    Syncsafe integers are big-endian 7-bit byte sequences.
    """
    @staticmethod
    def decode(data):
        return decode_uint(data, bits=7)

    @staticmethod
    def encode(i, *, width=4):
        return encode_uint(i, width=width, bits=7)

class Int8:
    """Conversion to/from binary integer values of any length."""
    @staticmethod
    def decode(data):
        return decode_uint(data, bits=8)

    @staticmethod
    def encode(i, *, width):
        return encode_uint(i, width=width, bits=8)


class StringCodec(metaclass=abc.ABCMeta):
    """Base class for the two ID3v2.2/2.3 character codecs.

    Strings are stored as a (possibly empty) byte order mark followed by
    fixed-width code units.
    """
    name = None
    bom = b""
    unit = 1

    @abstractmethod
    def decode(self, data):
        "Decode a string occupying all of data."

    @abstractmethod
    def encode(self, value): pass

    @abstractmethod
    def terminator_bytes(self, terminator, bom=b""):
        "Return the code unit for terminator in the byte order given by bom."

    def decode_terminated(self, data, terminator="\x00"):
        """Decode a terminated string from the start of data.
        Returns (value, rest); the terminator is consumed but not returned."""
        prefix = bytes(data[:len(self.bom)])
        if len(prefix) < len(self.bom):
            raise TruncatedStream("Missing byte order mark")
        term = self.terminator_bytes(terminator, prefix)
        for i in range(len(prefix), len(data) - self.unit + 1, self.unit):
            if data[i:i + self.unit] == term:
                return self.decode(data[:i]), data[i + self.unit:]
        raise TruncatedStream("Unterminated {0} string".format(self.name))

    def encode_terminated(self, value, terminator="\x00"):
        return self.encode(value + terminator)

    def encoded_length(self, value, terminated=False):
        "Return the number of bytes encode() would produce for value."
        chars = len(value) + (1 if terminated else 0)
        return len(self.bom) + chars * self.unit

    def __repr__(self):
        return "<{0} codec>".format(self.name)

class Latin1Codec(StringCodec):
    "ISO-8859-1: each byte is a code point."
    name = "ISO-8859-1"

    def decode(self, data):
        return bytes(data).decode("iso-8859-1")

    def encode(self, value):
        try:
            return value.encode("iso-8859-1")
        except UnicodeEncodeError as e:
            raise UnsupportedCharacter(
                "Character U+{0:04X} is not representable in ISO-8859-1"
                .format(ord(value[e.start]))) from e

    def terminator_bytes(self, terminator, bom=b""):
        return self.encode(terminator)

class UCS2Codec(StringCodec):
    """UCS-2 with a leading byte order mark.
    Strings are always written big-endian."""
    name = "UCS-2"
    bom = b"\xFE\xFF"
    unit = 2

    @staticmethod
    def byteorder(bom):
        if bom == b"\xFE\xFF":
            return "big"
        if bom == b"\xFF\xFE":
            return "little"
        raise InvalidEncodingByte("Invalid byte order mark: {0!r}".format(bytes(bom)))

    def decode(self, data):
        if len(data) < 2:
            raise InvalidSize("UCS-2 string is missing its byte order mark")
        if len(data) & 1:
            raise InvalidSize("UCS-2 string has odd length {0}".format(len(data)))
        order = self.byteorder(bytes(data[:2]))
        chars = []
        for i in range(2, len(data), 2):
            cp = int.from_bytes(data[i:i + 2], order)
            if 0xD800 <= cp <= 0xDFFF:
                raise UnsupportedCharacter("Surrogate code unit 0x{0:04X} in UCS-2 string"
                                           .format(cp))
            chars.append(chr(cp))
        return "".join(chars)

    def encode(self, value):
        data = bytearray(self.bom)
        for c in value:
            cp = ord(c)
            if cp > 0xFFFF or 0xD800 <= cp <= 0xDFFF:
                raise UnsupportedCharacter(
                    "Character U+{0:04X} is not representable in UCS-2".format(cp))
            data.extend(cp.to_bytes(2, "big"))
        return bytes(data)

    def terminator_bytes(self, terminator, bom=b"\xFE\xFF"):
        return ord(terminator).to_bytes(2, self.byteorder(bom))

string_codecs = (Latin1Codec(), UCS2Codec())

def string_codec(encoding):
    "Return the string codec selected by an encoding byte."
    if encoding not in (LATIN1, UCS2):
        raise InvalidEncodingByte("Invalid text encoding: {0!r}".format(encoding))
    return string_codecs[encoding]
