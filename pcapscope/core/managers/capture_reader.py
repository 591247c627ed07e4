# pcapscope/core/managers/capture_reader.py
import logging
import struct

from pcapscope.core.enums.enums import ByteOrder, LinkType, ReaderState
from pcapscope.core.enums.formats import PcapHeaderFormat, PcapRecordFormat
from pcapscope.core.errors import (
    CaptureError, CaptureIOError, FormatError, ReaderStateError,
    RecordTooLargeError, TruncatedDataError
)
from pcapscope.core.schemas.capture_schemas import CaptureGlobalHeader, Record, RecordHeader
from pcapscope.prepare.config import get_max_record_len


class CaptureReader:
    """
    Forward-only, single-pass reader of a pcap capture.

    Use it inside a 'with' block; the file is released on every exit path.
    One reader per task: calls to next_record() must not overlap.
    """
    def __init__(self, path: str, *, max_record_len: int | None = None):
        self.path = path
        self.max_record_len = max_record_len if max_record_len is not None else get_max_record_len()
        self._file = None
        self._header: CaptureGlobalHeader | None = None
        self._byte_order: ByteOrder | None = None
        self._record_fmt: str | None = None
        self._state = ReaderState.UNOPENED
        self._count = 0

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __iter__(self):
        while True:
            record = self.next_record()
            if record is None:
                return
            yield record

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def header(self) -> CaptureGlobalHeader:
        if self._header is None:
            raise ReaderStateError("The capture is not open. Use this class inside a 'with' block.")
        return self._header

    @property
    def byte_order(self) -> ByteOrder:
        return self.header.byte_order

    @property
    def records_read(self) -> int:
        return self._count

    def open(self) -> "CaptureReader":
        if self._state is not ReaderState.UNOPENED:
            raise ReaderStateError(f"Reader already used (state={self._state.name})")
        try:
            self._file = open(self.path, "rb")
            self._header = self._read_global_header()
        except CaptureError:
            self._fail()
            raise
        except OSError as e:
            logging.error(f"[Reader] Could not open capture '{self.path}': {e}")
            self._fail()
            raise CaptureIOError(e.errno, e.strerror or str(e), self.path) from e

        self._state = ReaderState.HEADER_PARSED
        header = self._header
        logging.info(
            f"[Reader] Opened '{self.path}': version {header.version} "
            f"order={header.byte_order.name} snaplen={header.snaplen} link_type={header.network}"
        )
        if header.link_type is not LinkType.ETHERNET:
            logging.warning(f"[Reader] Unsupported link type {header.network}; records will not decode as Ethernet")
        return self

    def close(self):
        if self._file:
            self._file.close()
            logging.debug(f"[Reader] Closed '{self.path}' after {self._count} records.")
        self._file = None
        if self._state is not ReaderState.FAILED:
            self._state = ReaderState.CLOSED

    def _fail(self):
        self._state = ReaderState.FAILED
        if self._file:
            self._file.close()
        self._file = None

    def _check_readable(self):
        if self._state not in (ReaderState.HEADER_PARSED, ReaderState.STREAMING, ReaderState.EXHAUSTED):
            raise ReaderStateError(f"Cannot read from a reader in state {self._state.name}")

    def _read(self, size: int) -> bytes:
        # read() may return short on pipes; loop until size or EOF
        chunks = []
        remaining = size
        while remaining > 0:
            chunk = self._file.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _read_global_header(self) -> CaptureGlobalHeader:
        magic_buf = self._read(PcapHeaderFormat.MAGIC_LEN)
        if len(magic_buf) < PcapHeaderFormat.MAGIC_LEN:
            raise TruncatedDataError("magic number", PcapHeaderFormat.MAGIC_LEN, len(magic_buf))

        (magic,) = struct.unpack(PcapHeaderFormat.MAGIC_FORMAT, magic_buf)
        if magic == PcapHeaderFormat.MAGIC_NATIVE:
            byte_order = ByteOrder.LITTLE
        elif magic == PcapHeaderFormat.MAGIC_SWAPPED:
            byte_order = ByteOrder.BIG
        else:
            raise FormatError(f"Invalid pcap magic number: 0x{magic:08x}", magic=magic)

        header_buf = self._read(PcapHeaderFormat.get_len())
        if len(header_buf) < PcapHeaderFormat.get_len():
            raise TruncatedDataError("global header", PcapHeaderFormat.get_len(), len(header_buf))

        version_major, version_minor, sigfigs, snaplen, network = struct.unpack(
            PcapHeaderFormat.get_format(byte_order), header_buf
        )
        # thiszone stays little-endian in both orders, for compatibility with existing captures
        (thiszone,) = struct.unpack_from(
            PcapHeaderFormat.THISZONE_FORMAT, header_buf, PcapHeaderFormat.THISZONE_OFFSET
        )

        self._byte_order = byte_order
        self._record_fmt = PcapRecordFormat.get_format(byte_order)
        return CaptureGlobalHeader(
            magic_number=magic,
            version_major=version_major,
            version_minor=version_minor,
            thiszone=thiszone,
            sigfigs=sigfigs,
            snaplen=snaplen,
            network=network,
            byte_order=byte_order,
        )

    def next_record(self) -> Record | None:
        """Returns the next record, or None at a clean end of capture."""
        self._check_readable()
        if self._state is ReaderState.EXHAUSTED:
            return None

        try:
            record = self._read_record()
        except CaptureError:
            self._fail()
            raise
        except OSError as e:
            logging.error(f"[Reader] I/O error on '{self.path}': {e}")
            self._fail()
            raise CaptureIOError(e.errno, e.strerror or str(e), self.path) from e

        if record is None:
            self._state = ReaderState.EXHAUSTED
            logging.debug(f"[Reader] End of capture after {self._count} records.")
        else:
            self._state = ReaderState.STREAMING
        return record

    def _read_record(self) -> Record | None:
        rec_len = PcapRecordFormat.get_len()
        header_buf = self._read(rec_len)
        if not header_buf:
            return None
        if len(header_buf) < rec_len:
            raise TruncatedDataError("record header", rec_len, len(header_buf))

        ts_sec, ts_usec, incl_len, orig_len = struct.unpack(self._record_fmt, header_buf)
        if incl_len > self.max_record_len:
            raise RecordTooLargeError(incl_len, self.max_record_len)

        data = self._read(incl_len)
        if len(data) < incl_len:
            raise TruncatedDataError("record body", incl_len, len(data))

        self._count += 1
        return Record(
            header=RecordHeader(ts_sec=ts_sec, ts_usec=ts_usec, incl_len=incl_len, orig_len=orig_len),
            data=data,
            index=self._count,
        )


def open_capture(path: str, **kwargs) -> CaptureReader:
    return CaptureReader(path, **kwargs).open()
