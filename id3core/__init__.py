# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

import id3core.frames
import id3core.tags
import id3core.friendly
import id3core.util

from id3core.errors import *
from id3core.frames import Frame, GenericFrame, TextFrame, CommentFrame
from id3core.tags import read_tag, decode_tag, encode_tag, detect_tag, Tag22, Tag23

version = (0, 1, 0)
versionstr = ".".join((str(v) for v in version))
