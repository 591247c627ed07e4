# pcapscope/main.py
import sys
import json
import argparse
import logging

from pcapscope.analysis.pipeline import analyze_capture
from pcapscope.core.errors import CaptureError, DecodeError
from pcapscope.core.managers.capture_reader import CaptureReader
from pcapscope.prepare.config import get_log_level, get_max_record_len, get_strict


# --------------------------------------------------------------------------------------
# info: global header
# --------------------------------------------------------------------------------------
def run_info(path: str, max_record_len: int | None, as_json: bool):
    with CaptureReader(path, max_record_len=max_record_len) as reader:
        h = reader.header

    if as_json:
        print(json.dumps({
            "magicNumber": f"0x{h.magic_number:08x}",
            "byteOrder": h.byte_order.name.lower(),
            "versionMajor": h.version_major,
            "versionMinor": h.version_minor,
            "thiszone": h.thiszone,
            "sigfigs": h.sigfigs,
            "snaplen": h.snaplen,
            "network": h.network,
        }, indent=2))
        return

    link = h.link_type.name if h.link_type else "UNKNOWN"
    print(f"File:        {path}")
    print(f"Magic:       0x{h.magic_number:08x} ({h.byte_order.name.lower()}-endian)")
    print(f"Version:     {h.version}")
    print(f"Thiszone:    {h.thiszone}")
    print(f"Sigfigs:     {h.sigfigs}")
    print(f"Snaplen:     {h.snaplen}")
    print(f"Link type:   {h.network} ({link})")


# --------------------------------------------------------------------------------------
# list: one row per decoded record
# --------------------------------------------------------------------------------------
def run_list(path: str, *, decode_ipv4: bool, strict: bool, max_record_len: int | None,
             limit: int | None, as_json: bool):
    result = analyze_capture(path, decode_ipv4=decode_ipv4, strict=strict,
                             max_record_len=max_record_len, limit=limit)
    if as_json:
        print(json.dumps([row.to_dict() for row in result.rows], indent=2))
        return

    for row in result.rows:
        line = (f"{row.index:>6} {row.ts_sec}.{row.ts_usec:06d} "
                f"{row.source} -> {row.target} {row.eth_type:<16} len={row.captured_len}")
        if row.src_ip:
            csum = "ok" if row.checksum_ok else "BAD"
            line += f" {row.src_ip} -> {row.dst_ip} proto={row.protocol} ttl={row.ttl} csum={csum}"
        print(line)


# --------------------------------------------------------------------------------------
# summary: counts per EtherType
# --------------------------------------------------------------------------------------
def run_summary(path: str, *, strict: bool, max_record_len: int | None, as_json: bool):
    result = analyze_capture(path, strict=strict, max_record_len=max_record_len)
    counts = result.ether_type_counts()

    if as_json:
        print(json.dumps({
            "totalRecords": result.total_records,
            "rows": len(result.rows),
            "etherTypes": dict(counts),
            "checksumFailures": result.checksum_failures,
            "skipped": result.skipped,
            "ipDecodeFailures": result.ip_decode_failures,
        }, indent=2))
        return

    print(f"Total records:     {result.total_records}")
    print(f"Decoded rows:      {len(result.rows)}")
    for eth_type, count in counts.most_common():
        print(f"  {eth_type:<16} {count}")
    print(f"Checksum failures: {result.checksum_failures}")
    print(f"Skipped:           {result.skipped_total}")
    for name, count in sorted(result.skipped.items()):
        print(f"  {name:<24} {count}")
    print(f"IPv4 decode failures: {sum(result.ip_decode_failures.values())}")
    for name, count in sorted(result.ip_decode_failures.items()):
        print(f"  {name:<24} {count}")


# --------------------------------------------------------------------------------------
# Entry point and CLI
# --------------------------------------------------------------------------------------
def positive_int(text: str) -> int:
    try:
        value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0: {text!r}")
    return value


def build_parser():
    p = argparse.ArgumentParser(
        prog="pcapscope",
        description="Decodes pcap captures: Ethernet frames and IPv4 headers."
    )
    p.add_argument("--max-record-len", dest="max_record_len", type=positive_int, default=None,
                   help="Largest record accepted, in bytes (default PCAPSCOPE_MAX_RECORD_LEN or 262144).")
    sub = p.add_subparsers(dest="cmd", required=False)

    p_info = sub.add_parser("info", help="Print the global header of a capture.")
    p_info.add_argument("path", help="Path of the pcap file.")
    p_info.add_argument("--json", dest="as_json", action="store_true", help="JSON output.")

    p_list = sub.add_parser("list", help="Print one line per decoded record.")
    p_list.add_argument("path", help="Path of the pcap file.")
    p_list.add_argument("--json", dest="as_json", action="store_true", help="JSON output.")
    p_list.add_argument("--no-ip", dest="decode_ipv4", action="store_false", help="Skip IPv4 decoding.")
    p_list.add_argument("--strict", action="store_true", default=None,
                        help="Abort on the first record that fails to decode.")
    p_list.add_argument("--limit", type=positive_int, default=None, help="Stop after N rows.")

    p_sum = sub.add_parser("summary", help="Count records per EtherType.")
    p_sum.add_argument("path", help="Path of the pcap file.")
    p_sum.add_argument("--json", dest="as_json", action="store_true", help="JSON output.")
    p_sum.add_argument("--strict", action="store_true", default=None,
                       help="Abort on the first record that fails to decode.")

    return p


def main(argv=None) -> int:
    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s - %(levelname)s - %(message)s"
    )
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0

    try:
        # flags override the environment
        max_record_len = args.max_record_len
        if max_record_len is None:
            max_record_len = get_max_record_len()
        strict = getattr(args, "strict", None)
        if strict is None and args.cmd != "info":
            strict = get_strict()

        if args.cmd == "info":
            run_info(args.path, max_record_len, args.as_json)
        elif args.cmd == "list":
            run_list(args.path, decode_ipv4=args.decode_ipv4, strict=strict,
                     max_record_len=max_record_len, limit=args.limit, as_json=args.as_json)
        elif args.cmd == "summary":
            run_summary(args.path, strict=strict, max_record_len=max_record_len, as_json=args.as_json)
        else:
            parser.print_help()
    except CaptureError as e:
        logging.error(f"[CLI] {args.path}: {e}")
        return 1
    except DecodeError as e:
        # strict mode: first undecodable record
        logging.error(f"[CLI] {args.path}: {e}")
        return 1
    except RuntimeError as e:
        logging.error(f"[CLI] {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
