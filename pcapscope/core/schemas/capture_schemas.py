from dataclasses import dataclass

from pcapscope.core.enums.enums import ByteOrder, LinkType


@dataclass(frozen=True)
class CaptureGlobalHeader:
    magic_number: int
    version_major: int
    version_minor: int
    thiszone: int        # always decoded little-endian
    sigfigs: int
    snaplen: int
    network: int         # link-layer type id
    byte_order: ByteOrder

    @property
    def link_type(self) -> LinkType | None:
        try:
            return LinkType(self.network)
        except ValueError:
            return None

    @property
    def version(self) -> str:
        return f"{self.version_major}.{self.version_minor}"


@dataclass(frozen=True)
class RecordHeader:
    ts_sec: int
    ts_usec: int
    incl_len: int        # bytes stored in the capture
    orig_len: int        # bytes on the wire

    @property
    def timestamp(self) -> float:
        return self.ts_sec + self.ts_usec / 1_000_000

    @property
    def truncated(self) -> bool:
        return self.incl_len < self.orig_len


@dataclass(frozen=True)
class Record:
    header: RecordHeader
    data: bytes
    index: int = 0       # 1-based position inside the capture
