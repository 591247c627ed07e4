import ipaddress
import struct
from typing import Iterable, Tuple, Union

from pcapscope.core.enums.enums import ByteOrder, EtherTypeTag, LinkType, ether_type_to_u16
from pcapscope.core.enums.formats import (
    EtherHeaderFormat, IPv4HeaderFormat, PcapHeaderFormat, PcapRecordFormat
)
from pcapscope.core.helpers.checksum import internet_checksum
from pcapscope.core.schemas.capture_schemas import RecordHeader
from pcapscope.core.schemas.frame_schemas import EthernetFrameSchema, MacAddress

# (header, data) pairs or bare payloads (timestamps default to 0)
RecordInput = Union[Tuple[RecordHeader, bytes], bytes]


def _mac_bytes(mac: Union[MacAddress, str, bytes]) -> bytes:
    if isinstance(mac, MacAddress):
        return mac.raw
    if isinstance(mac, str):
        return MacAddress.from_string(mac).raw
    return bytes(mac)


def create_ethernet_frame(frame_data: EthernetFrameSchema) -> bytes:
    ether_header = struct.pack(
        EtherHeaderFormat.get_format(),
        _mac_bytes(frame_data.dst_mac),
        _mac_bytes(frame_data.src_mac),
        ether_type_to_u16(frame_data.ether_type),
    )
    return ether_header + frame_data.payload


def create_raw_ethernet_frame(dst_mac, src_mac, ether_type: Union[EtherTypeTag, int], payload: bytes = b"") -> bytes:
    value = ether_type if isinstance(ether_type, int) else ether_type_to_u16(ether_type)
    return struct.pack(
        EtherHeaderFormat.get_format(), _mac_bytes(dst_mac), _mac_bytes(src_mac), value
    ) + payload


def create_ipv4_header(*, src: str, dst: str, payload_len: int = 0, protocol: int = 6,
                       ttl: int = 64, identification: int = 0, flags: int = 0b010,
                       fragment_offset: int = 0, tos: int = 0, options: bytes = b"",
                       total_length: int | None = None, checksum: int | None = None) -> bytes:
    """
    Packs an IPv4 header. The checksum is computed unless one is given.
    options must be a multiple of 4 bytes.
    """
    if len(options) % 4:
        raise ValueError("IPv4 options must be padded to a multiple of 4 bytes")

    ihl = 5 + len(options) // 4
    if total_length is None:
        total_length = ihl * 4 + payload_len

    def _pack(csum: int) -> bytes:
        return struct.pack(
            IPv4HeaderFormat.get_format(),
            (4 << 4) | ihl,
            tos,
            total_length,
            identification,
            (flags << IPv4HeaderFormat.FLAGS_SHIFT) | (fragment_offset & IPv4HeaderFormat.FRAGMENT_OFFSET_MASK),
            ttl,
            protocol,
            csum,
            ipaddress.IPv4Address(src).packed,
            ipaddress.IPv4Address(dst).packed,
        ) + options

    if checksum is None:
        checksum = internet_checksum(_pack(0))
    return _pack(checksum)


def create_capture(records: Iterable[RecordInput], *, byte_order: ByteOrder = ByteOrder.LITTLE,
                   version: Tuple[int, int] = (2, 4), thiszone: int = 0, sigfigs: int = 0,
                   snaplen: int = 65535, network: int = LinkType.ETHERNET.value) -> bytes:
    """Builds the bytes of a pcap capture; thiszone is always written little-endian."""
    magic = PcapHeaderFormat.MAGIC_NATIVE if byte_order is ByteOrder.LITTLE else PcapHeaderFormat.MAGIC_SWAPPED
    out = bytearray(struct.pack(PcapHeaderFormat.MAGIC_FORMAT, magic))

    body = bytearray(struct.pack(PcapHeaderFormat.get_format(byte_order), version[0], version[1],
                                 sigfigs, snaplen, network))
    off = PcapHeaderFormat.THISZONE_OFFSET
    body[off:off + 4] = struct.pack(PcapHeaderFormat.THISZONE_FORMAT, thiszone)
    out += body

    rec_fmt = PcapRecordFormat.get_format(byte_order)
    for item in records:
        if isinstance(item, tuple):
            header, data = item
        else:
            data = bytes(item)
            header = RecordHeader(ts_sec=0, ts_usec=0, incl_len=len(data), orig_len=len(data))
        out += struct.pack(rec_fmt, header.ts_sec, header.ts_usec, header.incl_len, header.orig_len)
        out += data

    return bytes(out)


def write_capture(path, records: Iterable[RecordInput], **kwargs) -> None:
    with open(path, "wb") as f:
        f.write(create_capture(records, **kwargs))
