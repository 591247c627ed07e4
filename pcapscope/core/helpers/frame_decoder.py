import struct

from pcapscope.core.enums.enums import ether_type_from_u16
from pcapscope.core.enums.formats import EtherHeaderFormat
from pcapscope.core.errors import FrameTooShortError
from pcapscope.core.schemas.frame_schemas import EthernetFrameSchema, MacAddress


def decode_ethernet_frame(frame: bytes) -> EthernetFrameSchema:
    eth_header_len = EtherHeaderFormat.get_len()
    if len(frame) < eth_header_len:
        raise FrameTooShortError(
            f"Data too short for Ethernet frame: {len(frame)} < {eth_header_len} bytes"
        )

    dst_mac_bytes, src_mac_bytes, ethertype = struct.unpack(
        EtherHeaderFormat.get_format(), frame[:eth_header_len]
    )

    # no FCS: link-layer captures strip the trailer
    return EthernetFrameSchema(
        dst_mac=MacAddress(dst_mac_bytes),
        src_mac=MacAddress(src_mac_bytes),
        ether_type=ether_type_from_u16(ethertype),
        payload=bytes(frame[eth_header_len:]),
    )
