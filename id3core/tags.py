# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

import abc
import io

from abc import abstractmethod
from warnings import warn

from id3core.errors import *
from id3core.conversion import *

import id3core.frames as Frames
import id3core.fileutil as fileutil

_TAG_UNSYNCHRONISED = 0x80

_TAG22_COMPRESSED = 0x40

_TAG23_EXTENDED_HEADER = 0x40

_EXT23_CRC_PRESENT = 0x8000

def read_tag(filename):
    """Read an ID3v2.2 or ID3v2.3 tag from the start of filename.
    filename may also be an open binary file positioned at the tag."""
    with fileutil.opened(filename, "rb") as file:
        reader = fileutil.ByteReader(file)
        (version, revision, flags, size) = _read_header(reader)
        return _tag_class(version)._read(reader, revision, flags, size)

def decode_tag(data):
    return read_tag(io.BytesIO(data))

def encode_tag(tag):
    return tag.encode()

def detect_tag(filename):
    """Return type and position of ID3v2 tag in filename.
    Returns (tag_class, offset, length), where tag_class
    is either Tag22 or Tag23, and (offset, length)
    is the position of the tag in the file.
    The file position is left unchanged.
    """
    with fileutil.opened(filename, "rb") as file:
        offset = file.tell()
        try:
            reader = fileutil.ByteReader(file)
            (version, revision, flags, size) = _read_header(reader)
        finally:
            file.seek(offset)
        return (_tag_class(version), offset, size + 10)

def _read_header(reader):
    "Read the 10-byte tag header; return (version, revision, flags, size)."
    if reader.read(3) != b"ID3":
        raise MalformedHeader("ID3v2 tag not found")
    version = reader.read_uint(1)
    revision = reader.read_uint(1)
    flags = reader.read_uint(1)
    size = reader.read_uint(4, bits=7)
    return (version, revision, flags, size)

def _tag_class(version):
    try:
        return _tag_versions[version]
    except KeyError:
        raise UnsupportedRevision("Unsupported ID3 version: 2.{0}".format(version)) from None

def read_frames(reader, budget, header_class):
    """Read frames until budget bytes are consumed.

    A zero byte where a frame id would start means the rest of the budget
    is padding. Returns (frames, padding).
    """
    frames = []
    while budget > 0:
        first = reader.peek()
        if first is None:
            raise TruncatedStream("Tag ends {0} bytes early".format(budget))
        if first == 0:
            padding = reader.read(budget)
            if any(padding):
                warn("Non-zero bytes in tag padding", PaddingWarning)
            return (frames, budget)
        if budget < header_class.header_size:
            raise TruncatedStream("Only {0} bytes left for a frame header".format(budget))
        header = header_class.read(reader, budget)
        data = reader.read(header.content_size)
        frames.append(Frames.decode_frame(header, data))
        budget -= header.total_size
    return (frames, 0)


class Tag(metaclass=abc.ABCMeta):
    """An ID3v2 tag: a header, the frames in file order, and the
    number of padding bytes after them.

    Tags are values; build a new one instead of changing frames in place.
    """
    version = None
    header_class = None

    padding_default = 0

    def __init__(self, frames=(), *, padding=None, flags=0, revision=0):
        self.frames = tuple(frames)
        for frame in self.frames:
            if frame.header.version != self.version:
                raise ValueError("Frame {0} is not an ID3v2.{1} frame"
                                 .format(frame.frameid, self.version))
        self.padding = self.padding_default if padding is None else padding
        self.flags = flags
        self.revision = revision

    @property
    def size(self):
        "The declared size: everything after the 10-byte header."
        return (self._extended_header_size()
                + sum(frame.header.total_size for frame in self.frames)
                + self.padding)

    def _extended_header_size(self):
        return 0

    def __iter__(self):
        return iter(self.frames)

    def __len__(self):
        return len(self.frames)

    def __eq__(self, other):
        return (type(self) is type(other)
                and self._header_fields() == other._header_fields()
                and self.frames == other.frames)

    def _header_fields(self):
        return (self.revision, self.flags, self.padding)

    def find(self, *frameids):
        "Return the first frame with one of the given ids, or None."
        for frame in self.frames:
            if frame.frameid in frameids:
                return frame
        return None

    def findall(self, *frameids):
        return [frame for frame in self.frames if frame.frameid in frameids]

    def __repr__(self):
        return "<{0}: ID3v2.{1} tag with {2} frames, {3} bytes of padding>".format(
            type(self).__name__, self.version, len(self.frames), self.padding)

    @classmethod
    @abstractmethod
    def _read(cls, reader, revision, flags, size): pass

    @classmethod
    def read(cls, filename):
        tag = read_tag(filename)
        if not isinstance(tag, cls):
            raise UnsupportedRevision("Expected an ID3v2.{0} tag, found ID3v2.{1}"
                                      .format(cls.version, tag.version))
        return tag

    @classmethod
    def decode(cls, data):
        return cls.read(io.BytesIO(data))

    def _encode_extended_header(self):
        return bytes()

    def encode(self):
        data = bytearray()
        data.extend(b"ID3")
        data.append(self.version)
        data.append(self.revision)
        data.append(self.flags)
        data.extend(Syncsafe.encode(self.size, width=4))
        data.extend(self._encode_extended_header())
        for frame in self.frames:
            data.extend(frame.encode())
        data.extend(b"\x00" * self.padding)
        if len(data) != self.size + 10:
            raise EncodeError("Tag encodes to {0} bytes, expected {1}"
                              .format(len(data), self.size + 10))
        return bytes(data)

class Tag22(Tag):
    version = 2
    header_class = Frames.FrameHeader22

    @classmethod
    def _read(cls, reader, revision, flags, size):
        if flags & _TAG_UNSYNCHRONISED:
            raise UnsupportedTagTransform("Unsynchronised ID3v2.2 tags are not supported")
        if flags & _TAG22_COMPRESSED: # Compression bit is ill-defined in standard
            raise UnsupportedTagTransform("ID3v2.2 tag compression is not supported")
        (frames, padding) = read_frames(reader, size, cls.header_class)
        return cls(frames, padding=padding, flags=flags, revision=revision)

class Tag23(Tag):
    version = 3
    header_class = Frames.FrameHeader23

    def __init__(self, frames=(), *, padding=None, flags=0, revision=0,
                 ext_size=None, ext_flags=0, padding_size=0, crc=None):
        super().__init__(frames, padding=padding, flags=flags, revision=revision)
        if crc is not None:
            ext_flags |= _EXT23_CRC_PRESENT
        self.ext_flags = ext_flags
        self.padding_size = padding_size
        self.crc = crc
        if self.crc_present and crc is None:
            raise ValueError("Extended header flags require a CRC")
        if ext_size is None and self.extended_header:
            # The size field does not count itself.
            ext_size = self._extended_header_size() - 4
        self.ext_size = ext_size

    @property
    def extended_header(self):
        return bool(self.flags & _TAG23_EXTENDED_HEADER)

    @property
    def crc_present(self):
        return self.extended_header and bool(self.ext_flags & _EXT23_CRC_PRESENT)

    def _extended_header_size(self):
        if not self.extended_header:
            return 0
        return 14 if self.crc_present else 10

    def _header_fields(self):
        fields = super()._header_fields()
        if self.extended_header:
            fields += (self.ext_size, self.ext_flags, self.padding_size, self.crc)
        return fields

    @classmethod
    def _read(cls, reader, revision, flags, size):
        if flags & _TAG_UNSYNCHRONISED:
            raise UnsupportedTagTransform("Unsynchronised ID3v2.3 tags are not supported")
        ext = {}
        budget = size
        if flags & _TAG23_EXTENDED_HEADER:
            if budget < 10:
                raise TruncatedStream("Tag too short for its extended header")
            ext["ext_size"] = reader.read_uint(4)
            ext["ext_flags"] = reader.read_uint(2)
            ext["padding_size"] = reader.read_uint(4)
            budget -= 10
            if ext["ext_flags"] & _EXT23_CRC_PRESENT:
                if budget < 4:
                    raise TruncatedStream("Tag too short for its extended header")
                ext["crc"] = reader.read_uint(4)
                budget -= 4
            if ext["ext_size"] != size - budget - 4:
                warn("Unexpected size of ID3v2.3 extended header: {0}"
                     .format(ext["ext_size"]), ExtendedHeaderWarning)
        (frames, padding) = read_frames(reader, budget, cls.header_class)
        if "padding_size" in ext and ext["padding_size"] != padding:
            warn("Extended header declares {0} bytes of padding, found {1}"
                 .format(ext["padding_size"], padding), ExtendedHeaderWarning)
        return cls(frames, padding=padding, flags=flags, revision=revision, **ext)

    def _encode_extended_header(self):
        if not self.extended_header:
            return bytes()
        data = bytearray()
        data.extend(Int8.encode(self.ext_size, width=4))
        data.extend(Int8.encode(self.ext_flags, width=2))
        data.extend(Int8.encode(self.padding_size, width=4))
        if self.crc_present:
            data.extend(Int8.encode(self.crc, width=4))
        return bytes(data)


_tag_versions = {
    2: Tag22,
    3: Tag23,
    }
