from enum import Enum

import struct

from pcapscope.core.enums.enums import ByteOrder


class PcapHeaderFormat:
    """
    Global header of a pcap capture (24 bytes):
    magic (I), version_major (H), version_minor (H), thiszone (i),
    sigfigs (I), snaplen (I), network (I)
    """
    MAGIC_FORMAT = "<I"
    MAGIC_LEN = 4

    # thiszone is read little-endian whatever the detected byte order
    THISZONE_FORMAT = "<i"
    THISZONE_OFFSET = 4

    MAGIC_NATIVE = 0xA1B2C3D4
    MAGIC_SWAPPED = 0xD4C3B2A1

    @staticmethod
    def get_format(byte_order: ByteOrder) -> str:
        # version_major (H), version_minor (H), thiszone (4x), sigfigs (I), snaplen (I), network (I)
        return f"{byte_order.prefix}HH4xIII"

    @staticmethod
    def get_len() -> int:
        return 20

    @staticmethod
    def get_total_len() -> int:
        return PcapHeaderFormat.MAGIC_LEN + PcapHeaderFormat.get_len()


class PcapRecordFormat:
    @staticmethod
    def get_format(byte_order: ByteOrder) -> str:
        # ts_sec (I), ts_usec (I), incl_len (I), orig_len (I)
        return f"{byte_order.prefix}IIII"

    @staticmethod
    def get_len() -> int:
        return struct.calcsize(PcapRecordFormat.get_format(ByteOrder.LITTLE))


class EtherHeaderFormat(Enum):
    """
    Ethernet II header: !6s6sH
    """
    DEST_MAC = '6s'   # 6 bytes: destination MAC address
    SRC_MAC = '6s'    # 6 bytes: source MAC address
    ETHER_TYPE = 'H'  # 2 bytes: EtherType

    @classmethod
    def get_format(cls):
        return f'!{cls.DEST_MAC.value}{cls.SRC_MAC.value}{cls.ETHER_TYPE.value}'

    @classmethod
    def get_len(cls):
        return 14


class IPv4HeaderFormat:
    """
    Fixed part of the IPv4 header (20 bytes), network order:
    version/ihl (B), tos (B), total_length (H), identification (H),
    flags/fragment_offset (H), ttl (B), protocol (B), checksum (H),
    src (4s), dst (4s)
    """
    CHECKSUM_OFFSET = 10
    FLAGS_SHIFT = 13
    FRAGMENT_OFFSET_MASK = 0x1FFF

    @staticmethod
    def get_format() -> str:
        return "!BBHHHBBH4s4s"

    @staticmethod
    def get_len() -> int:
        return struct.calcsize(IPv4HeaderFormat.get_format())
