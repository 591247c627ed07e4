class PcapError(Exception):
    """Base class for every pcapscope error."""


# Reader-level errors are fatal to the reader instance
class CaptureError(PcapError):
    pass


class FormatError(CaptureError, ValueError):
    """The stream is not a pcap capture (unrecognized magic number)."""

    def __init__(self, message: str, magic: int | None = None):
        super().__init__(message)
        self.magic = magic


class RecordTooLargeError(FormatError):
    def __init__(self, incl_len: int, limit: int):
        super().__init__(f"Record of {incl_len} bytes exceeds the limit of {limit} bytes")
        self.incl_len = incl_len
        self.limit = limit


class TruncatedDataError(CaptureError, EOFError):
    """The stream ended in the middle of a header or a record body."""

    def __init__(self, what: str, expected: int, got: int):
        super().__init__(f"Truncated {what}: expected {expected} bytes, got {got}")
        self.what = what
        self.expected = expected
        self.got = got


class CaptureIOError(CaptureError, OSError):
    pass


class ReaderStateError(CaptureError, RuntimeError):
    pass


# Decoder-level errors: recoverable, the caller skips the record
class DecodeError(PcapError, ValueError):
    pass


class FrameTooShortError(DecodeError):
    pass


class DatagramTooShortError(DecodeError):
    pass


class ProtocolMismatchError(DecodeError):
    pass


class LengthMismatchError(DecodeError):
    pass
