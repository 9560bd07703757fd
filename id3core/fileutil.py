# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""File access utilities."""

from contextlib import contextmanager

from id3core.errors import *
from id3core.conversion import decode_uint, string_codec

def xread(file, length):
    "Read exactly length bytes from file; raise TruncatedStream if file ends sooner."
    data = file.read(length)
    if len(data) != length:
        raise TruncatedStream("Expected {0} bytes, got {1}".format(length, len(data)))
    return data

@contextmanager
def opened(filename, mode):
    "Open filename, or do nothing if filename is already an open file object"
    if isinstance(filename, str):
        file = open(filename, mode)
        try:
            yield file
        finally:
            if not file.closed:
                file.close()
    else:
        yield filename

class ByteReader:
    """Sequential reader over a binary file with one byte of lookahead.

    peek() returns the next byte without consuming it; the byte is kept
    in a pushback buffer so it works on any file object, including
    unbuffered streams and BytesIO.
    """
    def __init__(self, file):
        self.file = file
        self._pushback = b""

    def peek(self):
        "Return the next byte as an integer, or None at end of file."
        if not self._pushback:
            self._pushback = self.file.read(1)
        return self._pushback[0] if self._pushback else None

    def read(self, length):
        "Read exactly length bytes."
        if length < 0:
            raise InvalidSize("Negative read length {0}".format(length))
        data = self._pushback[:length]
        self._pushback = self._pushback[len(data):]
        if len(data) < length:
            data += xread(self.file, length - len(data))
        return bytes(data)

    def read_uint(self, width, bits=8):
        return decode_uint(self.read(width), bits)

    def read_string(self, length, encoding):
        "Read a string of length bytes in the given encoding."
        return string_codec(encoding).decode(self.read(length))

    def read_terminated_string(self, terminator, encoding):
        "Read a string up to and including terminator; return it without the terminator."
        codec = string_codec(encoding)
        bom = self.read(len(codec.bom))
        end = codec.terminator_bytes(terminator, bom)
        data = bytearray(bom)
        while True:
            unit = self.read(codec.unit)
            if unit == end:
                break
            data.extend(unit)
        return codec.decode(data)
