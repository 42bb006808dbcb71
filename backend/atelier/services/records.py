from __future__ import annotations
"""Item record (repair ticket) as seen by the workflow, views and reports.

``ItemRecord.from_payload`` is the single ingestion point for reception JSON, both
on the client (API responses) and in the service (serialized ORM rows). It
normalizes the legacy shapes the API has carried over time:

  * ``extra.serialNumber`` as a plain string or as ``{"serialNumber": "..."}``
  * ``delivered`` as ``true`` or the string ``"yes"``
  * ``client`` / ``etrier`` / ``user`` as populated objects or bare ids
"""
import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from atelier.constants.roles import ROLE_ADMIN, ROLE_USER
from atelier.constants.workflow import (
    STATE_RECEIVED, STATE_IN_PROGRESS, STATE_FINISHED, RETURN_NONE,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on the way back)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    try:
        return as_utc(datetime.fromisoformat(str(value).replace('Z', '+00:00')))
    except ValueError:
        return None


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return as_utc(dt).isoformat().replace('+00:00', 'Z')


def normalize_serial(value: Any) -> Optional[str]:
    """Return the serial as a plain string, unwrapping the legacy object form."""
    if isinstance(value, dict):
        return normalize_serial(value.get('serialNumber'))
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None


def normalize_delivered(value: Any) -> bool:
    if value is True:
        return True
    return isinstance(value, str) and value.strip().lower() == 'yes'


def _part_quantity(raw: Any) -> int:
    """Counter as stored by older clients: missing, null or unreadable means 1."""
    if not raw or isinstance(raw, bool):
        return 1
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 1


def _ref(value: Any, display_key: str):
    """Split a populated reference into (id, display) or accept a bare id."""
    if isinstance(value, dict):
        return value.get('_id', value.get('id')), value.get(display_key)
    return value, None


@dataclass
class Actor:
    """Identity and role of whoever triggers a transition."""
    user_id: Any
    name: str = ''
    role: str = ROLE_USER

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @classmethod
    def from_profile(cls, profile: Dict[str, Any]) -> 'Actor':
        return cls(
            user_id=profile.get('id', profile.get('_id')),
            name=profile.get('name') or '',
            role=profile.get('role') or ROLE_USER,
        )


@dataclass
class ItemRecord:
    id: Any
    reception_number: Optional[str] = None
    client_id: Any = None
    client_name: Optional[str] = None
    etrier_id: Any = None
    car_model: Optional[str] = None
    position: Optional[str] = None
    user_id: Any = None
    user_name: Optional[str] = None
    state: str = STATE_RECEIVED
    is_returned: bool = False
    delivered: bool = False
    serial_number: Optional[str] = None
    observation: str = ''
    parts: Dict[Any, int] = field(default_factory=dict)
    return_status: str = RETURN_NONE
    return_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_finished(self) -> bool:
        return self.state == STATE_FINISHED

    @property
    def is_in_progress(self) -> bool:
        return self.state == STATE_IN_PROGRESS

    @property
    def display_state(self) -> str:
        """``returned`` overrides the underlying state for display and grouping."""
        return 'returned' if self.is_returned else self.state

    @property
    def last_transition_at(self) -> Optional[datetime]:
        return self.updated_at or self.created_at

    def copy(self) -> 'ItemRecord':
        return copy.deepcopy(self)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'ItemRecord':
        extra = payload.get('extra') or {}
        client_id, client_name = _ref(payload.get('client'), 'name')
        etrier_id, car_model = _ref(payload.get('etrier'), 'carModel')
        user_id, user_name = _ref(payload.get('user'), 'name')
        pieces = extra.get('pieces') or []
        counters = extra.get('pieceCounters') or {}
        parts = {}
        for pid in pieces:
            qty = _part_quantity(counters.get(pid, counters.get(str(pid))))
            if qty > 0:
                parts[pid] = qty
        return cls(
            id=payload.get('_id', payload.get('id')),
            reception_number=payload.get('receptionNumber'),
            client_id=client_id,
            client_name=client_name,
            etrier_id=etrier_id,
            car_model=car_model,
            position=payload.get('position'),
            user_id=user_id,
            user_name=user_name,
            state=payload.get('etat') or STATE_RECEIVED,
            is_returned=bool(payload.get('isReturned')),
            delivered=normalize_delivered(payload.get('delivered')),
            serial_number=normalize_serial(extra.get('serialNumber', payload.get('serialNumber'))),
            observation=payload.get('observation') or '',
            parts=parts,
            return_status=payload.get('returnStatus') or RETURN_NONE,
            return_reason=payload.get('returnReason'),
            created_at=parse_timestamp(payload.get('date', payload.get('createdAt'))),
            updated_at=parse_timestamp(payload.get('updatedAt')),
        )


__all__ = [
    'Actor', 'ItemRecord', 'utcnow', 'as_utc', 'parse_timestamp', 'format_timestamp',
    'normalize_serial', 'normalize_delivered',
]
