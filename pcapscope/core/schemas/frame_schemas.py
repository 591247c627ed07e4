import ipaddress
from dataclasses import dataclass

from pcapscope.core.enums.enums import EtherTypeTag
from pcapscope.core.enums.formats import IPv4HeaderFormat
from pcapscope.core.helpers.checksum import internet_checksum


@dataclass(frozen=True)
class MacAddress:
    raw: bytes

    def __post_init__(self):
        if len(self.raw) != 6:
            raise ValueError(f"A MAC address has 6 bytes, got {len(self.raw)}")
        object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def from_string(cls, text: str) -> "MacAddress":
        parts = text.strip().replace("-", ":").split(":")
        if len(parts) != 6 or any(len(p) != 2 for p in parts):
            raise ValueError(f"Invalid MAC address: {text!r}")
        return cls(bytes.fromhex("".join(parts)))

    def __str__(self) -> str:
        return ':'.join(f'{b:02X}' for b in self.raw)

    def __bytes__(self) -> bytes:
        return self.raw


@dataclass(frozen=True)
class EthernetFrameSchema:
    dst_mac: MacAddress
    src_mac: MacAddress
    ether_type: EtherTypeTag
    payload: bytes


@dataclass(frozen=True)
class IPv4DatagramSchema:
    version: int
    ihl: int
    tos: int
    total_length: int
    identification: int
    flags: int
    fragment_offset: int
    ttl: int
    protocol: int
    header_checksum: int
    src_addr: bytes
    dst_addr: bytes
    header: bytes        # header bytes covered by the checksum
    payload: bytes       # everything after ihl*4, link padding included

    @property
    def header_length(self) -> int:
        return self.ihl * 4

    @property
    def src_ip(self) -> str:
        return str(ipaddress.IPv4Address(self.src_addr))

    @property
    def dst_ip(self) -> str:
        return str(ipaddress.IPv4Address(self.dst_addr))

    @property
    def dont_fragment(self) -> bool:
        return bool(self.flags & 0b010)

    @property
    def more_fragments(self) -> bool:
        return bool(self.flags & 0b001)

    @property
    def exact_payload(self) -> bytes:
        """Payload clipped to total_length, without trailing link padding."""
        return self.payload[:max(0, self.total_length - self.header_length)]

    def validate_checksum(self) -> bool:
        off = IPv4HeaderFormat.CHECKSUM_OFFSET
        zeroed = self.header[:off] + b"\x00\x00" + self.header[off + 2:]
        return internet_checksum(zeroed) == self.header_checksum
