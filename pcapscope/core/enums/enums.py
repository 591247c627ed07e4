from dataclasses import dataclass
from enum import Enum, auto
from typing import Union


class EtherType(Enum):
    IPV4 = 0x0800
    ARP  = 0x0806
    IPV6 = 0x86DD

    @property
    def display_name(self) -> str:
        return _ETHER_TYPE_NAMES[self]

    def __str__(self) -> str:
        return self.display_name


_ETHER_TYPE_NAMES = {
    EtherType.IPV4: "IPv4",
    EtherType.ARP: "ARP",
    EtherType.IPV6: "IPv6",
}


@dataclass(frozen=True)
class UnknownEtherType:
    """EtherType outside the known set; keeps the raw 16-bit wire value."""
    value: int

    def __post_init__(self):
        if not 0 <= self.value <= 0xFFFF:
            raise ValueError(f"EtherType out of range: {self.value:#x}")

    @property
    def display_name(self) -> str:
        return f"Unknown({self.value})"

    def __str__(self) -> str:
        return self.display_name


EtherTypeTag = Union[EtherType, UnknownEtherType]


def ether_type_from_u16(value: int) -> EtherTypeTag:
    try:
        return EtherType(value)
    except ValueError:
        return UnknownEtherType(value)


def ether_type_to_u16(ether_type: EtherTypeTag) -> int:
    return ether_type.value


class LinkType(Enum):
    NULL     = 0  # BSD loopback encapsulation
    ETHERNET = 1  # IEEE 802.3 Ethernet


class ByteOrder(Enum):
    LITTLE = "<"
    BIG    = ">"

    @property
    def prefix(self) -> str:
        return self.value


class ReaderState(Enum):
    UNOPENED      = auto()
    HEADER_PARSED = auto()
    STREAMING     = auto()
    EXHAUSTED     = auto()
    FAILED        = auto()
    CLOSED        = auto()
