# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

import id3core
from id3core.conversion import Syncsafe

def check_tag_data(data):
    "Raise a ValueError if DATA doesn't seem to be a well-formed ID3 tag."
    if len(data) < 10:
        raise ValueError("Tag too short")
    if data[0:3] != b"ID3":
        raise ValueError("Missing ID3 identifier")
    if data[3] not in (2, 3):
        raise ValueError("Unknown ID3 version")
    length = Syncsafe.decode(data[6:10]) + 10
    if len(data) != length:
        raise ValueError("Tag size mismatch")

def is_tagged(filename):
    "Return true if FILENAME starts with an ID3v2.2 or ID3v2.3 tag header."
    try:
        id3core.tags.detect_tag(filename)
    except (id3core.MalformedHeader, id3core.UnsupportedRevision,
            id3core.InvalidSize, id3core.TruncatedStream):
        return False
    return True

def get_raw_tag_data(filename):
    "Return the ID3 tag in FILENAME as a raw byte string."
    with open(filename, "rb") as file:
        try:
            (cls, offset, length) = id3core.tags.detect_tag(file)
        except id3core.MalformedHeader:
            return bytes()
        file.seek(offset)
        return id3core.fileutil.xread(file, length)

def frame_ids(tags):
    "Return the sorted list of frame ids used in an iterable of tags."
    ids = set()
    for tag in tags:
        ids.update(frame.frameid for frame in tag.frames)
    return sorted(ids)
