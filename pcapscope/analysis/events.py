import logging
from typing import Callable, Optional

_sink_row: Optional[Callable[[dict], None]] = None
_sink_skip: Optional[Callable[[dict], None]] = None


def set_sinks(*,
              on_row: Callable[[dict], None] | None = None,
              on_skip: Callable[[dict], None] | None = None):
    """Registers callbacks for each decoded row and each decode failure (layer says which)."""
    global _sink_row, _sink_skip
    _sink_row = on_row
    _sink_skip = on_skip


def clear_sinks():
    set_sinks()


def emit_row(row: dict):
    if _sink_row:
        try:
            _sink_row(row)
        except Exception as e:
            logging.warning(f"[Events] on_row sink failed: {e}")


def emit_skip(*, index: int, layer: str, error: str, reason: str):
    if _sink_skip:
        try:
            _sink_skip({"index": index, "layer": layer, "error": error, "reason": reason})
        except Exception as e:
            logging.warning(f"[Events] on_skip sink failed: {e}")
