# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

import unittest
import io
import os
import struct
import tempfile
import warnings

import id3core
from id3core.conversion import Syncsafe
from id3core.errors import *
from id3core.frames import *

def frame22(frameid, body):
    return frameid + struct.pack(">I", len(body))[1:] + body

def frame23(frameid, body, flags=0, info=b""):
    return struct.pack(">4sIH", frameid, len(info) + len(body), flags) + info + body

def tag_data(version, frames, padding=0, flags=0, ext=b""):
    body = ext + b"".join(frames) + b"\x00" * padding
    return (b"ID3" + bytes([version, 0, flags]) + Syncsafe.encode(len(body), width=4)
            + body)

class TagTestCase(unittest.TestCase):
    def testEndToEnd(self):
        # One TIT2 frame (10 + 6 bytes) followed by 7 bytes of padding
        data = (b"ID3\x03\x00\x00\x00\x00\x00\x17"
                b"TIT2\x00\x00\x00\x06\x00\x00"
                b"\x00Ok\x00\x00\x00"
                + b"\x00" * 7
                + b"AUDIO")
        file = io.BytesIO(data)
        tag = id3core.read_tag(file)
        self.assertIsInstance(tag, id3core.Tag23)
        self.assertEqual(len(tag), 1)
        self.assertEqual(tag.size, 23)
        self.assertEqual(tag.padding, 7)
        self.assertEqual(id3core.friendly.title(tag), "Ok")
        # Exactly the tag was consumed
        self.assertEqual(file.tell(), 10 + 23)
        self.assertEqual(file.read(), b"AUDIO")
        self.assertEqual(tag.encode(), data[:-5])

    def testRoundTrip23(self):
        data = tag_data(3, [
            frame23(b"TIT2", b"\x00Title"),
            frame23(b"TPE1", b"\x01\xFE\xFF\x00A\x00r\x00t"),
            frame23(b"COMM", b"\x00engdesc\x00Comment text"),
            frame23(b"TXXX", b"\x00key\x00value"),
            frame23(b"ZZZZ", b"\x00\x01\x02\x03"),
            frame23(b"TALB", b"\x00Album", flags=0x0020, info=b"\x2A"),
            ])
        tag = id3core.decode_tag(data)
        self.assertEqual(len(tag), 6)
        self.assertEqual([type(f) for f in tag],
                         [TextFrame, TextFrame, CommentFrame,
                          GenericFrame, GenericFrame, TextFrame])
        self.assertEqual(tag.padding, 0)
        self.assertEqual(tag.find("TALB").header.group_id, 0x2A)
        self.assertEqual(tag.find("TALB").text, "Album")
        self.assertEqual(tag.encode(), data)
        self.assertEqual(id3core.encode_tag(tag), data)

    def testRoundTrip22(self):
        data = tag_data(2, [
            frame22(b"TT2", b"\x00Title"),
            frame22(b"TP1", b"\x00Artist"),
            frame22(b"COM", b"\x01eng\xFE\xFF\x00\x00\xFE\xFF\x00h\x00i"),
            frame22(b"TCO", b"\x00(2)"),
            frame22(b"XYZ", b"raw"),
            ])
        tag = id3core.decode_tag(data)
        self.assertIsInstance(tag, id3core.Tag22)
        self.assertEqual([f.frameid for f in tag], ["TT2", "TP1", "COM", "TCO", "XYZ"])
        self.assertEqual(tag.find("COM").text, "hi")
        self.assertEqual(tag.encode(), data)

    def testRoundTripWithPadding(self):
        for version, frame in ((2, frame22(b"TT2", b"\x00x")),
                               (3, frame23(b"TIT2", b"\x00x"))):
            data = tag_data(version, [frame], padding=100)
            tag = id3core.decode_tag(data)
            self.assertEqual(tag.padding, 100)
            self.assertEqual(tag.encode(), data)

    def testSizeAccounting(self):
        data = tag_data(3, [frame23(b"TIT2", b"\x00Title"),
                            frame23(b"TPE1", b"\x00Someone", flags=0x0020, info=b"\x01")],
                        padding=33)
        tag = id3core.decode_tag(data)
        self.assertEqual(sum(f.header.total_size for f in tag) + tag.padding, tag.size)
        self.assertEqual(tag.size, len(data) - 10)

    def testOnlyPadding(self):
        tag = id3core.decode_tag(tag_data(3, [], padding=64))
        self.assertEqual(len(tag), 0)
        self.assertEqual(tag.padding, 64)

    def testEmptyTag(self):
        tag = id3core.decode_tag(tag_data(2, []))
        self.assertEqual(len(tag), 0)
        self.assertEqual(tag.padding, 0)

    def testZeroInsideFrameId(self):
        # Only a zero in the first byte of a frame id starts the padding.
        data = tag_data(3, [frame23(b"Z\x00\x00\x00", b"\x00\x00")], padding=5)
        with self.assertWarns(InvalidFrameIdWarning):
            tag = id3core.decode_tag(data)
        self.assertEqual(len(tag), 1)
        self.assertEqual(tag.frames[0].frameid, "Z\x00\x00\x00")
        self.assertEqual(tag.frames[0].data, b"\x00\x00")
        self.assertEqual(tag.padding, 5)

    def testUnknownFrame(self):
        tag = id3core.decode_tag(tag_data(3, [frame23(b"ZZZZ", b"opaque bytes")]))
        self.assertIsInstance(tag.frames[0], GenericFrame)
        self.assertEqual(tag.frames[0].data, b"opaque bytes")
        self.assertFalse(tag.frames[0].opaque)

    def testCompressedFrame(self):
        data = tag_data(3, [frame23(b"TIT2", b"x\x9c...", flags=0x0080,
                                    info=b"\x00\x00\x00\x10"),
                            frame23(b"TPE1", b"\x00Artist")])
        with self.assertWarns(OpaqueFrameWarning):
            tag = id3core.decode_tag(data)
        self.assertEqual(len(tag), 2)
        self.assertTrue(tag.frames[0].opaque)
        self.assertEqual(tag.frames[0].data, b"x\x9c...")
        self.assertEqual(tag.frames[0].header.decompressed_size, 16)
        self.assertEqual(tag.frames[1].text, "Artist")
        self.assertEqual(tag.encode(), data)

    def testEncryptedFrame(self):
        data = tag_data(3, [frame23(b"TIT2", b"secret", flags=0x0040, info=b"\x80")])
        with self.assertWarns(OpaqueFrameWarning):
            tag = id3core.decode_tag(data)
        self.assertEqual(tag.frames[0].header.encryption_scheme, 0x80)
        self.assertIsInstance(tag.frames[0].error, UnsupportedFrameTransform)
        self.assertEqual(tag.encode(), data)

    def testExtendedHeader(self):
        ext = b"\x00\x00\x00\x06" + b"\x00\x00" + b"\x00\x00\x00\x04"
        data = tag_data(3, [frame23(b"TIT2", b"\x00x")], padding=4, flags=0x40, ext=ext)
        tag = id3core.decode_tag(data)
        self.assertTrue(tag.extended_header)
        self.assertFalse(tag.crc_present)
        self.assertEqual(tag.ext_size, 6)
        self.assertEqual(tag.padding_size, 4)
        self.assertEqual(tag.padding, 4)
        self.assertEqual(len(tag), 1)
        self.assertEqual(tag.size, 10 + 12 + 4)
        self.assertEqual(tag.encode(), data)

    def testExtendedHeaderCRC(self):
        ext = (b"\x00\x00\x00\x0A" + b"\x80\x00" + b"\x00\x00\x00\x00"
               + b"\xDE\xAD\xBE\xEF")
        data = tag_data(3, [frame23(b"TIT2", b"\x00x")], flags=0x40, ext=ext)
        tag = id3core.decode_tag(data)
        self.assertTrue(tag.crc_present)
        self.assertEqual(tag.crc, 0xDEADBEEF)
        self.assertEqual(len(tag), 1)
        self.assertEqual(tag.encode(), data)

    def testExtendedHeaderSizeMismatch(self):
        ext = b"\x00\x00\x00\x09" + b"\x00\x00" + b"\x00\x00\x00\x00"
        data = tag_data(3, [frame23(b"TIT2", b"\x00x")], flags=0x40, ext=ext)
        with self.assertWarns(ExtendedHeaderWarning):
            tag = id3core.decode_tag(data)
        self.assertEqual(tag.encode(), data)

    def testNonZeroPadding(self):
        data = tag_data(3, [frame23(b"TIT2", b"\x00x")])
        data = data[:6] + Syncsafe.encode(12 + 4, width=4) + data[10:] + b"\x00ab\x00"
        with self.assertWarns(PaddingWarning):
            tag = id3core.decode_tag(data)
        self.assertEqual(tag.padding, 4)

    def testMalformedHeader(self):
        self.assertRaises(MalformedHeader, id3core.decode_tag, b"TAG\x03\x00\x00\x00\x00\x00\x00")
        self.assertRaises(TruncatedStream, id3core.decode_tag, b"")

    def testUnsupportedRevision(self):
        for version in (0, 1, 4, 5):
            data = b"ID3" + bytes([version]) + b"\x00\x00\x00\x00\x00\x00"
            self.assertRaises(UnsupportedRevision, id3core.decode_tag, data)

    def testInvalidSize(self):
        self.assertRaises(InvalidSize, id3core.decode_tag,
                          b"ID3\x03\x00\x00\x00\x00\x00\x80")

    def testUnsynchronisedTag(self):
        for version in (2, 3):
            data = tag_data(version, [], padding=10, flags=0x80)
            self.assertRaises(UnsupportedTagTransform, id3core.decode_tag, data)
        data = tag_data(2, [], padding=10, flags=0x40)
        self.assertRaises(UnsupportedTagTransform, id3core.decode_tag, data)

    def testTruncated(self):
        data = tag_data(3, [frame23(b"TIT2", b"\x00Title")], padding=10)
        self.assertRaises(TruncatedStream, id3core.decode_tag, data[:-1])
        self.assertRaises(TruncatedStream, id3core.decode_tag, data[:20])

    def testFrameLargerThanTag(self):
        frame = frame23(b"TIT2", b"\x00Title")
        data = b"ID3\x03\x00\x00" + Syncsafe.encode(len(frame) - 1, width=4) + frame
        self.assertRaises(TruncatedStream, id3core.decode_tag, data)

    def testFrameHeaderLargerThanTag(self):
        data = b"ID3\x03\x00\x00\x00\x00\x00\x05TIT2\x00"
        self.assertRaises(TruncatedStream, id3core.decode_tag, data)

    def testInvalidEncodingAbortsTag(self):
        data = tag_data(3, [frame23(b"TIT2", b"\x05Title")])
        self.assertRaises(InvalidEncodingByte, id3core.decode_tag, data)

    def testUCS2TextWithoutByteOrderMark(self):
        data = b"ID3\x03\x00\x00\x00\x00\x00\x0bTIT2\x00\x00\x00\x01\x00\x00\x01"
        self.assertRaises(InvalidSize, id3core.decode_tag, data)

    def testFind(self):
        data = tag_data(3, [frame23(b"TIT2", b"\x00One"),
                            frame23(b"TPE1", b"\x00Artist"),
                            frame23(b"TIT2", b"\x00Two")])
        tag = id3core.decode_tag(data)
        self.assertEqual(tag.find("TIT2").text, "One")
        self.assertEqual(tag.find("TALB", "TPE1").text, "Artist")
        self.assertIsNone(tag.find("TALB"))
        self.assertEqual([f.text for f in tag.findall("TIT2")], ["One", "Two"])
        self.assertEqual([f.frameid for f in tag.findall("TPE1", "TIT2")],
                         ["TIT2", "TPE1", "TIT2"])
        self.assertEqual(tag.findall("TALB"), [])

    def testBuildTag(self):
        tag = id3core.Tag23([TextFrame.create("TIT2", encoding=0, text="New"),
                             CommentFrame.create("COMM", encoding=1, lang="eng",
                                                 desc="", text="c")],
                            padding=16)
        data = tag.encode()
        self.assertEqual(len(data), 10 + tag.size)
        tag2 = id3core.decode_tag(data)
        self.assertEqual(tag, tag2)
        self.assertEqual(id3core.friendly.comment(tag2), "c")

    def testBuildTagWithExtendedHeader(self):
        tag = id3core.Tag23([TextFrame.create("TIT2", encoding=0, text="x")],
                            flags=0x40, crc=0x01020304)
        self.assertEqual(tag.ext_size, 10)
        self.assertEqual(id3core.decode_tag(tag.encode()), tag)

    def testPaddingDefault(self):
        class PaddedTag(id3core.Tag22):
            padding_default = 128
        tag = PaddedTag([TextFrame.create("TT2", 2, encoding=0, text="x")])
        self.assertEqual(tag.padding, 128)
        self.assertEqual(id3core.decode_tag(tag.encode()).padding, 128)

    def testMixedVersions(self):
        frame = TextFrame.create("TIT2", encoding=0, text="x")
        self.assertRaises(ValueError, id3core.Tag22, [frame])

    def testEncodeSizeMismatch(self):
        frame = TextFrame(FrameHeader23("TIT2", 10), encoding=0, text="x")
        self.assertRaises(EncodeError, id3core.Tag23([frame]).encode)

    def testDetectTag(self):
        data = tag_data(3, [frame23(b"TIT2", b"\x00x")], padding=5) + b"audio"
        file = io.BytesIO(data)
        self.assertEqual(id3core.detect_tag(file), (id3core.Tag23, 0, len(data) - 5))
        self.assertEqual(file.tell(), 0)
        self.assertRaises(MalformedHeader, id3core.detect_tag, io.BytesIO(b"RIFF" * 4))

    def testClassRead(self):
        data = tag_data(2, [frame22(b"TT2", b"\x00x")])
        self.assertIsInstance(id3core.Tag22.decode(data), id3core.Tag22)
        self.assertRaises(UnsupportedRevision, id3core.Tag23.decode, data)

    def testReadFile(self):
        data = tag_data(3, [frame23(b"TIT2", b"\x00File")], padding=8) + b"audio data"
        file = tempfile.NamedTemporaryFile(prefix="id3coretest-", suffix=".mp3", delete=False)
        try:
            file.write(data)
            file.close()
            tag = id3core.read_tag(file.name)
            self.assertEqual(id3core.friendly.title(tag), "File")
        finally:
            os.unlink(file.name)

suite = unittest.TestLoader().loadTestsFromTestCase(TagTestCase)

if __name__ == "__main__":
    warnings.simplefilter("always", id3core.Warning)
    unittest.main(defaultTest="suite")
