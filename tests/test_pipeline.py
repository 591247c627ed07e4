import pytest

from pcapscope.analysis.events import set_sinks
from pcapscope.analysis.pipeline import analyze_capture
from pcapscope.core.enums.enums import EtherType
from pcapscope.core.errors import FrameTooShortError, ProtocolMismatchError, TruncatedDataError
from pcapscope.core.helpers.frame_creator import create_capture, create_raw_ethernet_frame
from pcapscope.core.schemas.capture_schemas import RecordHeader

from conftest import DST_MAC, SRC_MAC


@pytest.fixture
def mixed_capture(make_capture, ipv4_frame, arp_frame, ipv4_datagram):
    bad_version = create_raw_ethernet_frame(DST_MAC, SRC_MAC, EtherType.IPV4,
                                            bytes([0x65]) + ipv4_datagram[1:])
    bad_checksum = bytearray(ipv4_frame)
    bad_checksum[14 + 10:14 + 12] = b"\x00\x00"
    records = [
        (RecordHeader(ts_sec=100, ts_usec=5, incl_len=len(ipv4_frame), orig_len=len(ipv4_frame)), ipv4_frame),
        arp_frame,
        b"\x00" * 10,
        bad_version,
        bytes(bad_checksum),
        create_raw_ethernet_frame(DST_MAC, SRC_MAC, 0x88B5, b"chat"),
    ]
    return make_capture(records)


def test_rows_and_skips(mixed_capture):
    result = analyze_capture(mixed_capture, strict=False)

    assert result.total_records == 6
    assert [row.index for row in result.rows] == [1, 2, 4, 5, 6]
    assert result.skipped == {"FrameTooShortError": 1}
    assert result.skipped_total == 1
    assert result.ip_decode_failures == {"ProtocolMismatchError": 1}
    assert result.total_records == len(result.rows) + result.skipped_total
    assert result.ether_type_counts() == {"IPv4": 3, "ARP": 1, "Unknown(34997)": 1}
    assert result.checksum_failures == 1

    first = result.rows[0]
    assert first.source == SRC_MAC
    assert first.target == DST_MAC
    assert (first.ts_sec, first.ts_usec) == (100, 5)
    assert first.src_ip == "192.168.0.1"
    assert first.dst_ip == "192.168.0.199"
    assert first.protocol == 6
    assert first.ttl == 64
    assert first.checksum_ok is True

    # IPv4 decode failed: Ethernet row kept without IP fields
    assert result.rows[2].eth_type == "IPv4"
    assert result.rows[2].src_ip is None
    assert result.rows[3].checksum_ok is False


def test_row_dict_uses_camel_case(mixed_capture):
    rows = analyze_capture(mixed_capture, strict=False).rows
    assert rows[0].to_dict() == {
        "index": 1,
        "ethType": "IPv4",
        "source": SRC_MAC,
        "target": DST_MAC,
        "tsSec": 100,
        "tsUsec": 5,
        "capturedLen": 38,
        "originalLen": 38,
        "srcIp": "192.168.0.1",
        "dstIp": "192.168.0.199",
        "protocol": 6,
        "ttl": 64,
        "checksumOk": True,
    }
    assert "srcIp" not in rows[1].to_dict()
    assert rows[4].to_dict()["ethType"] == "Unknown(34997)"


def test_strict_mode_raises_first_failure(mixed_capture):
    with pytest.raises(FrameTooShortError):
        analyze_capture(mixed_capture, strict=True)


def test_strict_mode_from_environment(mixed_capture, monkeypatch):
    monkeypatch.setenv("PCAPSCOPE_STRICT", "yes")
    with pytest.raises(FrameTooShortError):
        analyze_capture(mixed_capture)


def test_ipv4_decoding_can_be_disabled(mixed_capture):
    result = analyze_capture(mixed_capture, decode_ipv4=False, strict=False)
    assert len(result.rows) == 5
    assert result.skipped == {"FrameTooShortError": 1}
    assert result.ip_decode_failures == {}
    assert all(row.src_ip is None for row in result.rows)


def test_limit_stops_scan(mixed_capture):
    result = analyze_capture(mixed_capture, strict=False, limit=2)
    assert len(result.rows) == 2
    assert result.total_records == 2


@pytest.mark.parametrize("limit", [0, -1])
def test_limit_below_one_yields_no_rows(mixed_capture, limit):
    rows = []
    set_sinks(on_row=rows.append)
    result = analyze_capture(mixed_capture, strict=False, limit=limit)
    assert result.rows == []
    assert result.total_records == 0
    assert rows == []


def test_sinks_receive_rows_and_skips(mixed_capture):
    rows, skips = [], []
    set_sinks(on_row=rows.append, on_skip=skips.append)

    analyze_capture(mixed_capture, strict=False)

    assert [r["index"] for r in rows] == [1, 2, 4, 5, 6]
    assert skips == [
        {"index": 3, "layer": "ethernet", "error": "FrameTooShortError",
         "reason": skips[0]["reason"]},
        {"index": 4, "layer": "ipv4", "error": ProtocolMismatchError.__name__,
         "reason": skips[1]["reason"]},
    ]


def test_failing_sink_does_not_abort(mixed_capture):
    def boom(_):
        raise RuntimeError("sink down")

    set_sinks(on_row=boom, on_skip=boom)
    result = analyze_capture(mixed_capture, strict=False)
    assert len(result.rows) == 5


def test_reader_errors_propagate(make_raw_file, ipv4_frame):
    data = create_capture([ipv4_frame, ipv4_frame])[:-5]
    with pytest.raises(TruncatedDataError):
        analyze_capture(make_raw_file(data), strict=False)
