# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

"""Revision-independent access to the common text fields of a tag.

Each accessor returns the field's text, or None when the tag has no
readable frame for it.
"""

import re

from id3core.id3 import genres

# Candidate frame ids, ID3v2.2 first
_frameids = {
    "title": ("TT2", "TIT2"),
    "artist": ("TP1", "TPE1"),
    "album_artist": ("TP2", "TPE2"),
    "album": ("TAL", "TALB"),
    "composer": ("TCM", "TCOM"),
    "track": ("TRK", "TRCK"),
    "disc": ("TPA", "TPOS"),
    "year": ("TYE", "TYER"),
    "genre": ("TCO", "TCON"),
    "comment": ("COM", "COMM"),
    }

fields = tuple(_frameids)

_genre_ref = re.compile(r"\(([0-9]+)\)")

def get(tag, field):
    """Return the text of the first frame in tag that carries field.
    Anything from the first NUL character on is dropped."""
    frameids = _frameids[field]
    for frame in tag.frames:
        if frame.frameid not in frameids:
            continue
        # Opaque frames have no text
        text = getattr(frame, "text", None)
        if text is not None:
            return text.partition("\x00")[0]
    return None

def title(tag): return get(tag, "title")
def artist(tag): return get(tag, "artist")
def album_artist(tag): return get(tag, "album_artist")
def album(tag): return get(tag, "album")
def composer(tag): return get(tag, "composer")
def track(tag): return get(tag, "track")
def disc(tag): return get(tag, "disc")
def year(tag): return get(tag, "year")
def comment(tag): return get(tag, "comment")

def genre(tag):
    """Return the genre, resolving ID3v1 genre references like "(17)".
    References outside the genre table are returned unchanged."""
    value = get(tag, "genre")
    if value is None:
        return None
    match = _genre_ref.match(value)
    if match and int(match.group(1)) < len(genres):
        return genres[int(match.group(1))]
    return value
