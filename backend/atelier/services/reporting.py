from __future__ import annotations
"""Monthly recap and technician bonus (prime).

Only finished or returned receptions count, delivered or not. Items are grouped
by the (year, month) of their *creation* date; each group earns
``finished * 1.5 - returned * 5`` DT. No floor is applied, a month heavy in
returns goes negative.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from atelier.constants.workflow import MONTH_NAMES, STATE_FINISHED

FINISHED_BONUS = Decimal('1.5')
RETURN_PENALTY = Decimal('5')

KIND_FINISHED = 'finished'
KIND_RETURNED = 'returned'


@dataclass
class RecapEntry:
    record: object
    kind: str


@dataclass
class MonthGroup:
    year: int
    month: int
    entries: List[RecapEntry] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def label(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def finished_count(self) -> int:
        return sum(1 for e in self.entries if e.kind == KIND_FINISHED)

    @property
    def returned_count(self) -> int:
        return sum(1 for e in self.entries if e.kind == KIND_RETURNED)

    @property
    def bonus(self) -> Decimal:
        return compute_bonus(self.finished_count, self.returned_count)


@dataclass
class Recap:
    groups: List[MonthGroup]
    current_month: MonthGroup

    @property
    def total_count(self) -> int:
        return sum(g.count for g in self.groups)

    @property
    def total_bonus(self) -> Decimal:
        return sum((g.bonus for g in self.groups), Decimal('0'))


def compute_bonus(finished_count: int, returned_count: int) -> Decimal:
    return finished_count * FINISHED_BONUS - returned_count * RETURN_PENALTY


def counts_for_recap(record) -> bool:
    return record.state == STATE_FINISHED or bool(record.is_returned)


def build_recap(records: Iterable, today: Optional[date] = None) -> Recap:
    today = today or date.today()
    groups: Dict[Tuple[int, int], MonthGroup] = {}
    for record in records:
        if not counts_for_recap(record) or record.created_at is None:
            continue
        ym = (record.created_at.year, record.created_at.month)
        group = groups.setdefault(ym, MonthGroup(*ym))
        kind = KIND_RETURNED if record.is_returned else KIND_FINISHED
        group.entries.append(RecapEntry(record, kind))
    ordered = sorted(groups.values(), key=lambda g: (g.year, g.month), reverse=True)
    current = groups.get((today.year, today.month)) or MonthGroup(today.year, today.month)
    return Recap(groups=ordered, current_month=current)


def _group_json(group: MonthGroup, include_items: bool = True) -> dict:
    body = {
        'id': group.key,
        'year': group.year,
        'month': group.month,
        'label': group.label,
        'count': group.count,
        'finitCount': group.finished_count,
        'retourneCount': group.returned_count,
        'prime': float(group.bonus),
    }
    if include_items:
        body['items'] = [
            {
                '_id': e.record.id,
                'receptionNumber': e.record.reception_number,
                'serialNumber': e.record.serial_number,
                'client': e.record.client_name,
                'type': e.kind,
            }
            for e in group.entries
        ]
    return body


def recap_json(recap: Recap) -> dict:
    return {
        'totalCount': recap.total_count,
        'totalPrime': float(recap.total_bonus),
        'currentMonth': _group_json(recap.current_month, include_items=False),
        'groups': [_group_json(g) for g in recap.groups],
    }


__all__ = [
    'build_recap', 'compute_bonus', 'recap_json', 'Recap', 'MonthGroup', 'RecapEntry',
    'FINISHED_BONUS', 'RETURN_PENALTY', 'KIND_FINISHED', 'KIND_RETURNED',
]
