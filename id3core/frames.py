# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""Frame headers and frame body variants for ID3v2.2 and ID3v2.3."""

import abc
import re
from abc import abstractmethod
from warnings import warn

from id3core.errors import *
from id3core.specs import *
from id3core.conversion import Int8

_FRAME23_FORMAT_COMPRESSED = 0x0080
_FRAME23_FORMAT_ENCRYPTED = 0x0040
_FRAME23_FORMAT_GROUP = 0x0020

_FRAME_ID_PATTERN = re.compile("^[A-Z][A-Z0-9]{2}[A-Z0-9 ]?$")

def is_frame_id(frameid):
    # Allow a single space at end of four-character ids
    # Some programs (e.g. iTunes 8.2) generate such frames when converting
    # from 2.2 to 2.3/2.4 tags.
    return _FRAME_ID_PATTERN.match(frameid) is not None


class FrameHeader(metaclass=abc.ABCMeta):
    """Common interface of the per-revision frame headers.

    size is the declared body size: it excludes the header itself but
    includes any optional fields that follow the header.
    """
    version = None
    header_size = None

    def __init__(self, frameid, size):
        self.frameid = frameid
        self.size = size

    @property
    def info_size(self):
        "Number of bytes taken by optional fields after the fixed header."
        return 0

    @property
    def content_size(self):
        "Number of bytes left for the frame body decoder."
        return self.size - self.info_size

    @property
    def total_size(self):
        return self.header_size + self.size

    def transform_error(self):
        "Return an UnsupportedFrameTransform if the body can't be decoded, else None."
        return None

    @classmethod
    @abstractmethod
    def read(cls, reader, budget): pass

    @abstractmethod
    def encode(self): pass

    @classmethod
    def _read_id(cls, reader, length):
        frameid = reader.read_string(length, LATIN1)
        if not is_frame_id(frameid):
            warn("Invalid frame id {0!r}".format(frameid), InvalidFrameIdWarning)
        return frameid

    @classmethod
    def _check_budget(cls, frameid, size, budget):
        if cls.header_size + size > budget:
            raise TruncatedStream("Frame {0} claims {1} bytes, only {2} left in tag"
                                  .format(frameid, cls.header_size + size, budget))

    def _fields(self):
        return (self.frameid, self.size)

    def __eq__(self, other):
        return type(self) is type(other) and self._fields() == other._fields()

    def __repr__(self):
        return "{0}({1})".format(type(self).__name__,
                                 ", ".join(repr(f) for f in self._fields()))

class FrameHeader22(FrameHeader):
    version = 2
    header_size = 6
    id_length = 3

    @classmethod
    def read(cls, reader, budget):
        frameid = cls._read_id(reader, cls.id_length)
        size = reader.read_uint(3)
        cls._check_budget(frameid, size, budget)
        return cls(frameid, size)

    def encode(self):
        data = bytearray()
        if len(self.frameid) != self.id_length:
            raise EncodeError("Invalid ID3v2.2 frame id {0!r}".format(self.frameid))
        data.extend(string_codecs[LATIN1].encode(self.frameid))
        data.extend(Int8.encode(self.size, width=3))
        assert len(data) == self.header_size
        return bytes(data)

class FrameHeader23(FrameHeader):
    version = 3
    header_size = 10
    id_length = 4

    def __init__(self, frameid, size, flags=0, decompressed_size=None,
                 encryption_scheme=None, group_id=None):
        super().__init__(frameid, size)
        self.flags = flags
        self.decompressed_size = decompressed_size
        self.encryption_scheme = encryption_scheme
        self.group_id = group_id

    @property
    def compressed(self):
        return bool(self.flags & _FRAME23_FORMAT_COMPRESSED)

    @property
    def encrypted(self):
        return bool(self.flags & _FRAME23_FORMAT_ENCRYPTED)

    @property
    def grouped(self):
        return bool(self.flags & _FRAME23_FORMAT_GROUP)

    @staticmethod
    def _info_size(flags):
        return ((4 if flags & _FRAME23_FORMAT_COMPRESSED else 0)
                + (1 if flags & _FRAME23_FORMAT_ENCRYPTED else 0)
                + (1 if flags & _FRAME23_FORMAT_GROUP else 0))

    @property
    def info_size(self):
        return self._info_size(self.flags)

    def transform_error(self):
        if self.compressed:
            return UnsupportedFrameTransform("Frame {0} is compressed".format(self.frameid))
        if self.encrypted:
            return UnsupportedFrameTransform("Frame {0} is encrypted".format(self.frameid))
        return None

    @classmethod
    def read(cls, reader, budget):
        frameid = cls._read_id(reader, cls.id_length)
        size = reader.read_uint(4)
        flags = reader.read_uint(2)
        cls._check_budget(frameid, size, budget)
        if cls._info_size(flags) > size:
            raise InvalidSize("Frame {0} is too short for its flags 0x{1:04X}"
                              .format(frameid, flags))
        header = cls(frameid, size, flags)
        # Optional fields appear in the order of their flag bits.
        if header.compressed:
            header.decompressed_size = reader.read_uint(4)
        if header.encrypted:
            header.encryption_scheme = reader.read_uint(1)
        if header.grouped:
            header.group_id = reader.read_uint(1)
        return header

    def encode(self):
        data = bytearray()
        if len(self.frameid) != self.id_length:
            raise EncodeError("Invalid ID3v2.3 frame id {0!r}".format(self.frameid))
        data.extend(string_codecs[LATIN1].encode(self.frameid))
        data.extend(Int8.encode(self.size, width=4))
        data.extend(Int8.encode(self.flags, width=2))
        assert len(data) == self.header_size
        try:
            if self.compressed:
                data.extend(Int8.encode(self.decompressed_size, width=4))
            if self.encrypted:
                data.extend(Int8.encode(self.encryption_scheme, width=1))
            if self.grouped:
                data.extend(Int8.encode(self.group_id, width=1))
        except TypeError as e:
            raise EncodeError("Frame {0} is missing an optional field required by its flags"
                              .format(self.frameid)) from e
        return bytes(data)

    def _fields(self):
        return (self.frameid, self.size, self.flags, self.decompressed_size,
                self.encryption_scheme, self.group_id)

header_classes = {
    2: FrameHeader22,
    3: FrameHeader23,
    }


class Frame(metaclass=abc.ABCMeta):
    _framespec = tuple()

    def __init__(self, header, **kwargs):
        self.header = header
        assert len(self._framespec) > 0
        for spec in self._framespec:
            val = kwargs.get(spec.name, None)
            setattr(self, spec.name, val)

    def __setattr__(self, name, value):
        # Automatic validation on assignment
        for spec in self._framespec:
            if name == spec.name:
                value = spec.validate(self, value)
                break
        super().__setattr__(name, value)

    @property
    def frameid(self):
        return self.header.frameid

    def __eq__(self, other):
        return (isinstance(other, type(self))
                and self.header == other.header
                and all(getattr(self, spec.name, None) ==
                        getattr(other, spec.name, None)
                        for spec in self._framespec))

    @classmethod
    def _from_data(cls, header, data):
        frame = cls(header)
        for spec in frame._framespec:
            val, data = spec.read(frame, data)
            setattr(frame, spec.name, val)
        return frame

    @classmethod
    def create(cls, frameid, version=3, **fields):
        """Create a frame with a header whose declared size matches
        the encoded fields."""
        header_class = header_classes[version]
        frame = cls(header_class(frameid, 0), **fields)
        frame.header = header_class(frameid, len(frame._to_data()))
        return frame

    def _to_data(self):
        data = bytearray()
        for spec in self._framespec:
            value = getattr(self, spec.name)
            if value is None:
                raise EncodeError("Frame {0} has no value for {1}"
                                  .format(self.frameid, spec.name))
            data.extend(spec.write(self, value))
        return bytes(data)

    def encode(self):
        "Return the frame header and body as bytes."
        data = self._to_data()
        if len(data) != self.header.content_size:
            raise EncodeError("Frame {0} encodes to {1} bytes, but its header declares {2}"
                              .format(self.frameid, len(data), self.header.content_size))
        return self.header.encode() + data

    def __repr__(self):
        args = ["{0!r}".format(self.header)]
        for spec in self._framespec:
            if isinstance(spec, BinaryDataSpec):
                data = getattr(self, spec.name)
                args.append("{0}=<{1} bytes of binary data {2!r}{3}>".format(
                        spec.name, len(data),
                        data[:20], "..." if len(data) > 20 else ""))
            else:
                args.append("{0}={1!r}".format(spec.name, getattr(self, spec.name)))
        return "{0}({1})".format(type(self).__name__, ", ".join(args))

    def _str_fields(self):
        fields = []
        for spec in self._framespec:
            fields.append(spec.to_str(getattr(self, spec.name, None)))
        return ", ".join(fields)

    def __str__(self):
        return "{0}({1})".format(self.frameid, self._str_fields())

class GenericFrame(Frame):
    """A frame kept as raw bytes.

    Opaque frames are compressed or encrypted; error holds the
    UnsupportedFrameTransform explaining why they weren't decoded.
    """
    _framespec = (BinaryDataSpec("data"),)

    def __init__(self, header, data=None, error=None):
        super().__init__(header, data=data)
        self.error = error

    @property
    def opaque(self):
        return self.error is not None

    def __str__(self):
        return "{0}{1}({2})".format("!" if self.opaque else "", self.frameid,
                                    self._str_fields())

class TextFrame(Frame):
    _framespec = (EncodingSpec("encoding"),
                  EncodedFullTextSpec("text"))

    def _str_fields(self):
        return "{0} {1!r}".format(string_codecs[self.encoding].name
                                  if self.encoding is not None else "<undef>",
                                  self.text)

class CommentFrame(Frame):
    _framespec = (EncodingSpec("encoding"),
                  LanguageSpec("lang"),
                  EncodedStringSpec("desc"),
                  EncodedFullTextSpec("text"))


def frame_class(frameid):
    "Return the frame class that decodes frames with the given id."
    if frameid.startswith("T") and frameid not in ("TXX", "TXXX"):
        return TextFrame
    if frameid in ("COM", "COMM"):
        return CommentFrame
    return GenericFrame

def decode_frame(header, data):
    """Decode a frame body of header.content_size bytes.
    Frames with an unsupported transform are returned as opaque GenericFrames."""
    error = header.transform_error()
    if error is not None:
        warn(str(error), OpaqueFrameWarning)
        return GenericFrame(header, data, error=error)
    return frame_class(header.frameid)._from_data(header, data)
