from __future__ import annotations
"""Per-screen projections of the reception list.

One table (``VIEW_RULES``) decides what each screen shows and in which order:

    reception  everything except finished-and-not-returned   oldest created first
    finished   finished or returned, not delivered            oldest transition first
    delivered  finished or returned, delivered                oldest transition first

A free-text search (client name, serial, caliper model) runs before sorting. The
reception screen also takes a status filter where ``in_progress`` deliberately
includes returned items: they are back on the bench.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from atelier.constants.workflow import STATE_RECEIVED, STATE_IN_PROGRESS, STATE_FINISHED
from atelier.errors import ValidationError

VIEW_RECEPTION = 'reception'
VIEW_FINISHED = 'finished'
VIEW_DELIVERED = 'delivered'

STATUS_ALL = 'all'
STATUS_RECEIVED = 'received'
STATUS_IN_PROGRESS = 'in_progress'
STATUS_RETURNED = 'returned'

# Values the mobile filter tabs send
STATUS_ALIASES = {
    'recus': STATUS_RECEIVED,
    'en cours': STATUS_IN_PROGRESS,
    'in-progress': STATUS_IN_PROGRESS,
    'retour': STATUS_RETURNED,
}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _created_key(record):
    return record.created_at or _EPOCH


def _transition_key(record):
    return record.updated_at or record.created_at or _EPOCH


def _done(record) -> bool:
    return record.state == STATE_FINISHED or bool(record.is_returned)


@dataclass(frozen=True)
class ViewRule:
    name: str
    include: Callable[[object], bool]
    sort_key: Callable[[object], datetime]
    status_filters: bool = False


VIEW_RULES: Dict[str, ViewRule] = {
    VIEW_RECEPTION: ViewRule(
        VIEW_RECEPTION,
        include=lambda r: not (r.state == STATE_FINISHED and not r.is_returned),
        sort_key=_created_key,
        status_filters=True,
    ),
    VIEW_FINISHED: ViewRule(
        VIEW_FINISHED,
        include=lambda r: _done(r) and not r.delivered,
        sort_key=_transition_key,
    ),
    VIEW_DELIVERED: ViewRule(
        VIEW_DELIVERED,
        include=lambda r: _done(r) and bool(r.delivered),
        sort_key=_transition_key,
    ),
}

STATUS_FILTERS: Dict[str, Callable[[object], bool]] = {
    STATUS_ALL: lambda r: True,
    STATUS_RECEIVED: lambda r: not r.is_returned and r.state == STATE_RECEIVED,
    STATUS_IN_PROGRESS: lambda r: bool(r.is_returned) or r.state == STATE_IN_PROGRESS,
    STATUS_RETURNED: lambda r: bool(r.is_returned),
}


def normalize_status_filter(status: Optional[str]) -> str:
    if not status:
        return STATUS_ALL
    status = STATUS_ALIASES.get(status, status)
    if status not in STATUS_FILTERS:
        raise ValidationError('status filter invalid')
    return status


def matches_search(record, term: Optional[str]) -> bool:
    if not term:
        return True
    needle = term.strip().lower()
    if not needle:
        return True
    haystack = (record.client_name, record.serial_number, record.car_model)
    return any(needle in (value or '').lower() for value in haystack)


def select_view(records: Iterable, view: str, search: Optional[str] = None, status: Optional[str] = None) -> List:
    rule = VIEW_RULES.get(view)
    if rule is None:
        raise ValidationError(f'Unknown view {view}')
    status = normalize_status_filter(status)
    if status != STATUS_ALL and not rule.status_filters:
        raise ValidationError(f'status filter not supported on {view} view')
    status_ok = STATUS_FILTERS[status]
    visible = [r for r in records if rule.include(r) and matches_search(r, search) and status_ok(r)]
    return sorted(visible, key=rule.sort_key)


__all__ = [
    'select_view', 'matches_search', 'normalize_status_filter', 'VIEW_RULES', 'STATUS_FILTERS',
    'VIEW_RECEPTION', 'VIEW_FINISHED', 'VIEW_DELIVERED',
    'STATUS_ALL', 'STATUS_RECEIVED', 'STATUS_IN_PROGRESS', 'STATUS_RETURNED',
]
