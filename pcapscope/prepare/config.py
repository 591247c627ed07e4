import os

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAX_RECORD_LEN = 262144  # libpcap MAXIMUM_SNAPLEN

TRUTHY = ("1", "true", "yes", "on")
FALSY = ("", "0", "false", "no", "off")


def _parse_int(name: str, val: str) -> int:
    # Accepts "0x40000" or "262144"
    try:
        return int(str(val).strip(), 0)
    except ValueError:
        raise RuntimeError(f"Invalid {name}: {val}")


def _parse_bool(name: str, val: str) -> bool:
    v = str(val).strip().lower()
    if v in TRUTHY:
        return True
    if v in FALSY:
        return False
    raise RuntimeError(f"Invalid {name}: {val}")


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def get_max_record_len() -> int:
    raw = os.environ.get("PCAPSCOPE_MAX_RECORD_LEN")
    if raw is None:
        return DEFAULT_MAX_RECORD_LEN
    value = _parse_int("PCAPSCOPE_MAX_RECORD_LEN", raw)
    if value <= 0:
        raise RuntimeError(f"Invalid PCAPSCOPE_MAX_RECORD_LEN: {raw}")
    return value


def get_strict() -> bool:
    return _parse_bool("PCAPSCOPE_STRICT", os.environ.get("PCAPSCOPE_STRICT", ""))


def get_runtime_config() -> dict:
    return {
        "log_level": get_log_level(),
        "max_record_len": get_max_record_len(),
        "strict": get_strict(),
    }
