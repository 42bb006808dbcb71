from __future__ import annotations
"""Serial number suggestion for finished items: SBS{YY}ET{NNNN}.

The numeric suffix keeps counting across years; only the year prefix follows
the calendar. This is a suggestion, nothing here enforces uniqueness.
"""
import re
from datetime import date
from typing import Iterable, Optional

from atelier.constants.workflow import SERIAL_PREFIX, SERIAL_INFIX, SERIAL_WIDTH

SERIAL_RE = re.compile(rf'^{SERIAL_PREFIX}(\d{{2}}){SERIAL_INFIX}(\d+)$', re.IGNORECASE)


def serial_sequence(serial) -> Optional[int]:
    """Numeric suffix of a well-formed serial, None for anything else."""
    if not isinstance(serial, str):
        return None
    match = SERIAL_RE.match(serial.strip())
    if not match:
        return None
    return int(match.group(2))


def format_serial(sequence: int, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{SERIAL_PREFIX}{today.year % 100:02d}{SERIAL_INFIX}{sequence:0{SERIAL_WIDTH}d}"


def suggest_serial(records: Iterable, today: Optional[date] = None) -> str:
    highest = 0
    for record in records:
        seq = serial_sequence(getattr(record, 'serial_number', None))
        if seq is not None and seq > highest:
            highest = seq
    return format_serial(highest + 1, today)

__all__ = ['suggest_serial', 'serial_sequence', 'format_serial', 'SERIAL_RE']
