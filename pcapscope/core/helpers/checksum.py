def internet_checksum(data: bytes) -> int:
    """One's-complement sum of 16-bit big-endian words (RFC 1071)."""
    if len(data) % 2:
        data = data + b"\x00"

    total = 0
    for i in range(0, len(data), 2):
        total += (data[i] << 8) | data[i + 1]

    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)

    return ~total & 0xFFFF
