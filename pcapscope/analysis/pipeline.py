import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from pcapscope.analysis.events import emit_row, emit_skip
from pcapscope.core.enums.enums import EtherType
from pcapscope.core.errors import DecodeError
from pcapscope.core.helpers.datagram_decoder import decode_ipv4_datagram
from pcapscope.core.helpers.frame_decoder import decode_ethernet_frame
from pcapscope.core.managers.capture_reader import CaptureReader
from pcapscope.core.schemas.capture_schemas import CaptureGlobalHeader, Record
from pcapscope.prepare.config import get_strict


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.capitalize() for p in rest)


@dataclass
class PacketRow:
    index: int
    eth_type: str
    source: str
    target: str
    ts_sec: int
    ts_usec: int
    captured_len: int
    original_len: int
    src_ip: Optional[str] = None
    dst_ip: Optional[str] = None
    protocol: Optional[int] = None
    ttl: Optional[int] = None
    checksum_ok: Optional[bool] = None

    def to_dict(self) -> dict:
        """
        camelCase keys, IP fields only when the record carried IPv4.
        ethType of an unknown type reads Unknown(<decimal value>), e.g. Unknown(34997).
        """
        return {_camel(k): v for k, v in asdict(self).items() if v is not None}


@dataclass
class AnalysisResult:
    header: CaptureGlobalHeader
    rows: List[PacketRow] = field(default_factory=list)
    skipped: Dict[str, int] = field(default_factory=dict)
    # IPv4 failures on rows that were kept
    ip_decode_failures: Dict[str, int] = field(default_factory=dict)
    total_records: int = 0

    def ether_type_counts(self) -> Counter:
        return Counter(row.eth_type for row in self.rows)

    @property
    def skipped_total(self) -> int:
        return sum(self.skipped.values())

    @property
    def checksum_failures(self) -> int:
        return sum(1 for row in self.rows if row.checksum_ok is False)


def _skip(result: AnalysisResult, record: Record, layer: str, err: DecodeError):
    name = type(err).__name__
    counts = result.skipped if layer == "ethernet" else result.ip_decode_failures
    counts[name] = counts.get(name, 0) + 1
    logging.debug(f"[Pipeline] Record {record.index} failed at {layer}: {err}")
    emit_skip(index=record.index, layer=layer, error=name, reason=str(err))


def build_row(record: Record, result: AnalysisResult, *, decode_ipv4: bool = True,
              strict: bool = False) -> Optional[PacketRow]:
    try:
        frame = decode_ethernet_frame(record.data)
    except DecodeError as e:
        if strict:
            raise
        _skip(result, record, "ethernet", e)
        return None

    row = PacketRow(
        index=record.index,
        eth_type=frame.ether_type.display_name,
        source=str(frame.src_mac),
        target=str(frame.dst_mac),
        ts_sec=record.header.ts_sec,
        ts_usec=record.header.ts_usec,
        captured_len=record.header.incl_len,
        original_len=record.header.orig_len,
    )

    if decode_ipv4 and frame.ether_type is EtherType.IPV4:
        try:
            datagram = decode_ipv4_datagram(frame.payload)
        except DecodeError as e:
            if strict:
                raise
            # the Ethernet row survives without IP fields
            _skip(result, record, "ipv4", e)
        else:
            row.src_ip = datagram.src_ip
            row.dst_ip = datagram.dst_ip
            row.protocol = datagram.protocol
            row.ttl = datagram.ttl
            row.checksum_ok = datagram.validate_checksum()

    return row


def analyze_capture(path: str, *, decode_ipv4: bool = True, strict: bool | None = None,
                    max_record_len: int | None = None, limit: int | None = None) -> AnalysisResult:
    """
    Decodes every record of a capture into PacketRow objects.

    Records that fail to decode are counted and skipped unless strict is set.
    Reader errors (format, truncation, I/O) propagate to the caller.
    """
    if strict is None:
        strict = get_strict()

    with CaptureReader(path, max_record_len=max_record_len) as reader:
        result = AnalysisResult(header=reader.header)
        while limit is None or len(result.rows) < limit:
            record = reader.next_record()
            if record is None:
                break
            result.total_records += 1
            row = build_row(record, result, decode_ipv4=decode_ipv4, strict=strict)
            if row is not None:
                result.rows.append(row)
                emit_row(row.to_dict())

    logging.info(
        f"[Pipeline] '{path}': {result.total_records} records, "
        f"{len(result.rows)} rows, {result.skipped_total} skipped, "
        f"{sum(result.ip_decode_failures.values())} IPv4 decode failures"
    )
    return result
