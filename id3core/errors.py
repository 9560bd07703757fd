# Copyright (c) 2009, Karoly Lorentey  <karoly@lorentey.hu>

class Error(Exception): pass

class Warning(Error, UserWarning): pass

class FrameWarning(Warning): pass
class OpaqueFrameWarning(FrameWarning): pass
class InvalidFrameIdWarning(FrameWarning): pass

class TagWarning(Warning): pass
class PaddingWarning(TagWarning): pass
class ExtendedHeaderWarning(TagWarning): pass

class DecodeError(Error, ValueError): pass
class EncodeError(Error, ValueError): pass

class MalformedHeader(DecodeError): pass
class UnsupportedRevision(DecodeError): pass
class InvalidEncodingByte(DecodeError): pass
class TruncatedStream(DecodeError, EOFError): pass
class UnsupportedFrameTransform(DecodeError): pass
class UnsupportedTagTransform(DecodeError): pass

# Raised in both directions
class InvalidSize(DecodeError, EncodeError): pass
class UnsupportedCharacter(DecodeError, EncodeError): pass
