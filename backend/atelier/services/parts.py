from __future__ import annotations
"""Parts ledger: spare parts attached to a reception, with quantities.

Quantities are integers >= 1. Anything that brings a quantity to zero removes
the part instead. Saving is a full replace of ``pieces`` + ``pieceCounters``.
"""
from typing import Any, Dict, Iterable, List, Optional

from atelier.errors import ValidationError
from atelier.utils.validation import coerce_quantity

SEARCH_LIMIT = 10


class PartsLedger:
    def __init__(self, entries: Optional[Dict[Any, int]] = None):
        self._entries: Dict[Any, int] = {}
        for part_id, qty in (entries or {}).items():
            self.set_quantity(part_id, qty)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'PartsLedger':
        """Build from ``{pieces: [...], pieceCounters: {...}}``; strict on quantities."""
        pieces = payload.get('pieces') or []
        counters = payload.get('pieceCounters') or {}
        if not isinstance(pieces, list) or not isinstance(counters, dict):
            raise ValidationError('pieces must be a list and pieceCounters an object')
        ledger = cls()
        for part_id in pieces:
            raw = counters.get(part_id, counters.get(str(part_id), 1))
            qty = coerce_quantity(raw, f'pieceCounters.{part_id}')
            if qty < 1:
                raise ValidationError(f'pieceCounters.{part_id} must be >= 1')
            ledger._entries[part_id] = qty
        return ledger

    @classmethod
    def from_record(cls, record) -> 'PartsLedger':
        return cls(dict(record.parts or {}))

    def __contains__(self, part_id) -> bool:
        return part_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def quantity(self, part_id) -> int:
        return self._entries.get(part_id, 0)

    def items(self):
        return list(self._entries.items())

    def add(self, part_id, qty: int = 1) -> int:
        return self.set_quantity(part_id, self.quantity(part_id) + qty)

    def increment(self, part_id) -> int:
        return self.add(part_id, 1)

    def decrement(self, part_id) -> int:
        return self.set_quantity(part_id, self.quantity(part_id) - 1)

    def set_quantity(self, part_id, qty) -> int:
        qty = coerce_quantity(qty)
        if qty <= 0:
            self._entries.pop(part_id, None)
            return 0
        self._entries[part_id] = qty
        return qty

    def remove(self, part_id) -> None:
        self._entries.pop(part_id, None)

    def to_payload(self) -> Dict[str, Any]:
        pieces = list(self._entries.keys())
        return {
            'pieces': pieces,
            'pieceCounters': {str(pid): qty for pid, qty in self._entries.items()},
        }


def find_piece_by_code(catalog: Iterable[Dict[str, Any]], code: str) -> Optional[Dict[str, Any]]:
    """Resolve a scanned code against barCode or referenceArticle, case-insensitively."""
    normalized = (code or '').strip().upper()
    if not normalized:
        return None
    for piece in catalog:
        if (piece.get('barCode') or '').upper() == normalized:
            return piece
        if (piece.get('referenceArticle') or '').upper() == normalized:
            return piece
    return None


def search_pieces(catalog: Iterable[Dict[str, Any]], term: str, limit: int = SEARCH_LIMIT) -> List[Dict[str, Any]]:
    """Substring match on designation or referenceArticle; nothing for a blank term."""
    needle = (term or '').strip().lower()
    if not needle:
        return []
    hits = [
        p for p in catalog
        if needle in (p.get('designation') or '').lower() or needle in (p.get('referenceArticle') or '').lower()
    ]
    return hits[:limit]


def describe_ledger(ledger: PartsLedger, catalog: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Ledger lines joined with catalog display fields."""
    by_id = {p.get('_id', p.get('id')): p for p in catalog}
    lines = []
    for part_id, qty in ledger.items():
        piece = by_id.get(part_id) or {}
        lines.append({
            'id': part_id,
            'designation': piece.get('designation') or 'Pièce inconnue',
            'referenceArticle': piece.get('referenceArticle') or 'N/A',
            'quantity': qty,
        })
    return lines

__all__ = ['PartsLedger', 'find_piece_by_code', 'search_pieces', 'describe_ledger']
