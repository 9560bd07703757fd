# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

import abc

from abc import abstractmethod

from id3core.conversion import *
from id3core.errors import *

# The idea for the Spec system comes from Mutagen.

class Spec(metaclass=abc.ABCMeta):
    """A single field of a frame body.

    read() consumes the field from the start of the frame's content bytes
    and returns (value, rest); write() returns the encoded field.
    """
    def __init__(self, name):
        self.name = name

    @abstractmethod
    def read(self, frame, data): pass

    @abstractmethod
    def write(self, frame, value): pass

    def validate(self, frame, value):
        if value is not None:
            self.write(frame, value)
        return value

    def to_str(self, value):
        return "{0}={1}".format(self.name, repr(value))

class ByteSpec(Spec):
    def read(self, frame, data):
        if len(data) < 1:
            raise TruncatedStream("Missing {0} byte".format(self.name))
        return data[0], data[1:]
    def write(self, frame, value):
        return bytes([value])
    def validate(self, frame, value):
        if value is None:
            return value
        if not isinstance(value, int):
            raise TypeError("Not a byte")
        if value not in range(256):
            raise ValueError("Invalid byte value")
        return value

class EncodingSpec(ByteSpec):
    "EncodingSpec must be the first spec."
    def read(self, frame, data):
        enc, data = super().read(frame, data)
        string_codec(enc)
        return enc, data
    def validate(self, frame, value):
        value = super().validate(frame, value)
        if value is not None:
            string_codec(value)
        return value
    def to_str(self, value):
        return string_codec(value).name if value is not None else "<undef>"

class BinaryDataSpec(Spec):
    def read(self, frame, data):
        return bytes(data), bytes()
    def write(self, frame, value):
        return bytes(value)
    def validate(self, frame, value):
        if value is None:
            return value
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError("Not a byte sequence")
        return bytes(value)
    def to_str(self, value):
        return '{0}={1}{2}'.format(self.name, value[0:16], "..." if len(value) > 16 else "")

class SimpleStringSpec(Spec):
    "A fixed-length ISO-8859-1 string, independent of the frame encoding."
    def __init__(self, name, length):
        super().__init__(name)
        self.length = length
    def read(self, frame, data):
        if len(data) < self.length:
            raise TruncatedStream("{0} needs {1} bytes".format(self.name, self.length))
        return string_codecs[LATIN1].decode(data[:self.length]), data[self.length:]
    def write(self, frame, value):
        data = string_codecs[LATIN1].encode(value)
        if len(data) != self.length:
            raise ValueError("String length mismatch")
        return data
    def validate(self, frame, value):
        if value is None:
            return value
        if not isinstance(value, str):
            raise TypeError("Not a string")
        return super().validate(frame, value)

class LanguageSpec(SimpleStringSpec):
    def __init__(self, name):
        super().__init__(name, 3)

class EncodedStringSpec(Spec):
    "A null-terminated string in the frame's encoding."
    def read(self, frame, data):
        return string_codec(frame.encoding).decode_terminated(data)

    def write(self, frame, value):
        return string_codec(frame.encoding).encode_terminated(value)

    def validate(self, frame, value):
        if value is None:
            return value
        if not isinstance(value, str):
            raise TypeError("Not a string")
        if frame.encoding is not None:
            self.write(frame, value)
        return value

class EncodedFullTextSpec(EncodedStringSpec):
    "A string in the frame's encoding that spans the rest of the frame."
    def read(self, frame, data):
        return string_codec(frame.encoding).decode(data), bytes()

    def write(self, frame, value):
        return string_codec(frame.encoding).encode(value)
