import pytest

from pcapscope.analysis.events import clear_sinks
from pcapscope.core.enums.enums import EtherType
from pcapscope.core.helpers.frame_creator import (
    create_ipv4_header, create_raw_ethernet_frame, write_capture
)

DST_MAC = "01:23:45:67:89:AB"
SRC_MAC = "01:23:45:67:89:AC"

# 45 00 00 18 1c 46 40 00 40 06 [9c 81] c0 a8 00 01 c0 a8 00 c7 de ad be ef
IPV4_FIXTURE = bytes.fromhex("450000181c46400040069c81c0a80001c0a800c7deadbeef")


@pytest.fixture(autouse=True)
def _reset_sinks():
    yield
    clear_sinks()


@pytest.fixture
def ipv4_datagram() -> bytes:
    return IPV4_FIXTURE


@pytest.fixture
def ipv4_frame() -> bytes:
    return create_raw_ethernet_frame(DST_MAC, SRC_MAC, EtherType.IPV4, IPV4_FIXTURE)


@pytest.fixture
def arp_frame() -> bytes:
    return create_raw_ethernet_frame(DST_MAC, SRC_MAC, EtherType.ARP, b"\x00" * 28)


@pytest.fixture
def make_capture(tmp_path):
    counter = {"n": 0}

    def _make(records, **kwargs):
        counter["n"] += 1
        path = tmp_path / f"capture{counter['n']}.pcap"
        write_capture(path, records, **kwargs)
        return str(path)

    return _make


@pytest.fixture
def make_raw_file(tmp_path):
    def _make(data: bytes, name: str = "raw.pcap"):
        path = tmp_path / name
        path.write_bytes(data)
        return str(path)

    return _make


@pytest.fixture
def udp_datagram() -> bytes:
    payload = b"hello"
    return create_ipv4_header(src="10.0.0.1", dst="10.0.0.2", payload_len=len(payload), protocol=17) + payload
