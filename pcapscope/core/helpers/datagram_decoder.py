import struct

from pcapscope.core.enums.formats import IPv4HeaderFormat
from pcapscope.core.errors import (
    DatagramTooShortError, LengthMismatchError, ProtocolMismatchError
)
from pcapscope.core.schemas.frame_schemas import IPv4DatagramSchema


def decode_ipv4_datagram(data: bytes) -> IPv4DatagramSchema:
    """
    Decodes an IPv4 datagram from the payload of an Ethernet frame.

    ihl is not checked against the minimum of 5 words. The payload runs from
    ihl*4 to the end of the input, so trailing link-layer padding past
    total_length is kept; use exact_payload to drop it.
    """
    hdr_len = IPv4HeaderFormat.get_len()
    if len(data) < hdr_len:
        raise DatagramTooShortError(
            f"Data too short for IPv4 datagram: {len(data)} < {hdr_len} bytes"
        )

    (ver_ihl, tos, total_length, identification, flags_frag,
     ttl, protocol, checksum, src, dst) = struct.unpack(
        IPv4HeaderFormat.get_format(), data[:hdr_len]
    )

    version = ver_ihl >> 4
    ihl = ver_ihl & 0x0F
    if version != 4:
        raise ProtocolMismatchError(f"Not an IPv4 datagram: version {version}")

    if len(data) < total_length:
        raise LengthMismatchError(
            f"Total length {total_length} exceeds the {len(data)} bytes available"
        )

    header_end = ihl * 4
    return IPv4DatagramSchema(
        version=version,
        ihl=ihl,
        tos=tos,
        total_length=total_length,
        identification=identification,
        flags=flags_frag >> IPv4HeaderFormat.FLAGS_SHIFT,
        fragment_offset=flags_frag & IPv4HeaderFormat.FRAGMENT_OFFSET_MASK,
        ttl=ttl,
        protocol=protocol,
        header_checksum=checksum,
        src_addr=src,
        dst_addr=dst,
        # options included when ihl > 5, never less than the fixed header
        header=bytes(data[:max(hdr_len, header_end)]),
        payload=bytes(data[header_end:]),
    )
