from __future__ import annotations
"""Workshop operations as the mobile screens use them.

Every transition is checked locally with the same ``WorkflowEngine`` the service
runs (on a copy of the record) before anything goes over the wire, so role and
state errors surface without a round trip. The service stays authoritative: the
record returned by the call replaces the local one.

Nothing here retries. List refreshes are the one read path that degrades: on
failure they log and hand back the last list they fetched.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from atelier.constants import roles
from atelier.constants.workflow import (
    ALL_POSITIONS, STATE_RECEIVED, STATE_IN_PROGRESS, STATE_FINISHED, RETURN_APPROVED,
)
from atelier.errors import ReturnIncomplete, ValidationError, WorkshopError
from atelier.services.parts import PartsLedger, find_piece_by_code, search_pieces, describe_ledger
from atelier.services.policy import authorize
from atelier.services.records import ItemRecord
from atelier.services.reporting import build_recap
from atelier.services.serials import suggest_serial
from atelier.services.views import select_view, matches_search
from atelier.services.workflow import WorkflowEngine

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _rows(body) -> List[Dict[str, Any]]:
    if isinstance(body, dict):
        return list(body.get('data') or [])
    return list(body or [])


class WorkshopClient:
    def __init__(self, api, session, engine: Optional[WorkflowEngine] = None):
        self.api = api
        self.session = session
        self.engine = engine or WorkflowEngine()
        self._items: List[ItemRecord] = []

    @property
    def actor(self):
        return self.session.actor

    def _record(self, item) -> ItemRecord:
        if isinstance(item, ItemRecord):
            return item
        return self.get_item(item)

    def _path(self, record: ItemRecord, action: str) -> str:
        return f'/receptions/{record.id}/{action}'

    # ---------- reads ---------- #

    def list_items(self) -> List[ItemRecord]:
        body = self.api.get('/receptions')
        self._items = [ItemRecord.from_payload(p) for p in _rows(body)]
        return list(self._items)

    def refresh(self, view: Optional[str] = None, search: Optional[str] = None, status: Optional[str] = None) -> List[ItemRecord]:
        try:
            items = self.list_items()
        except WorkshopError as e:
            logger.warning('refresh failed (%s), showing last known list', e.detail)
            items = list(self._items)
        if view:
            return select_view(items, view, search=search, status=status)
        return [r for r in items if matches_search(r, search)]

    def get_item(self, item_id) -> ItemRecord:
        return ItemRecord.from_payload(self.api.get(f'/receptions/{item_id}'))

    def clients(self) -> List[Dict[str, Any]]:
        return _rows(self.api.get('/clients'))

    def etriers(self) -> List[Dict[str, Any]]:
        return _rows(self.api.get('/etriers'))

    def parts_catalog(self) -> List[Dict[str, Any]]:
        return _rows(self.api.get('/pieces'))

    def find_piece(self, code: str, catalog: Optional[List[Dict[str, Any]]] = None):
        """Resolve a scanned barcode or article reference, None when unknown."""
        return find_piece_by_code(catalog if catalog is not None else self.parts_catalog(), code)

    def search_parts(self, term: str, catalog: Optional[List[Dict[str, Any]]] = None) -> List[Dict[str, Any]]:
        return search_pieces(catalog if catalog is not None else self.parts_catalog(), term)

    def suggest_serial(self, today: Optional[date] = None) -> str:
        return suggest_serial(self.list_items(), today)

    # ---------- transitions ---------- #

    def create_reception(self, client_id, etrier_id, position: str, observation: str = '') -> ItemRecord:
        actor = self.actor
        authorize(actor, roles.RECEPTION_CREATE)
        if position not in ALL_POSITIONS:
            raise ValidationError('position invalid')
        body = self.api.post('/receptions', json={
            'client': client_id,
            'etrier': etrier_id,
            'user': actor.user_id,
            'position': position,
            'observation': observation,
            'etat': STATE_RECEIVED,
        })
        return ItemRecord.from_payload(body)

    def start(self, item) -> ItemRecord:
        record = self._record(item)
        self.engine.start(record.copy(), self.actor)
        body = self.api.patch(self._path(record, 'etat'), json={'etat': STATE_IN_PROGRESS})
        return ItemRecord.from_payload(body)

    def finish(self, item, serial_number: Optional[str] = None) -> ItemRecord:
        """Finish with the given serial, or the next suggested one when none is typed."""
        record = self._record(item)
        if not record.serial_number and not (serial_number or '').strip():
            serial_number = self.suggest_serial()
        self.engine.finish(record.copy(), self.actor, serial_number)
        payload = {'etat': STATE_FINISHED}
        if serial_number:
            payload['serialNumber'] = serial_number.strip()
        body = self.api.patch(self._path(record, 'etat'), json=payload)
        return ItemRecord.from_payload(body)

    def deliver(self, item) -> ItemRecord:
        record = self._record(item)
        self.engine.deliver(record.copy(), self.actor)
        return ItemRecord.from_payload(self.api.patch(self._path(record, 'delivered')))

    # ---------- returns ---------- #

    def request_return(self, item, reason: Optional[str] = None) -> ItemRecord:
        """Technicians file a request; for admins this is the one-step confirm."""
        record = self._record(item)
        if self.session.is_admin:
            return self.confirm_return(record, reason)
        self.engine.returns.request(record.copy(), self.actor, reason)
        body = self.api.post(self._path(record, 'request-return'), json={'reason': (reason or '').strip()})
        return ItemRecord.from_payload(body)

    def approve_return(self, item, reason: Optional[str] = None) -> ItemRecord:
        record = self._record(item)
        self.engine.approve_return(record.copy(), self.actor)
        payload = {'reason': reason.strip()} if reason and reason.strip() else None
        return ItemRecord.from_payload(self.api.patch(self._path(record, 'approve-return'), json=payload))

    def complete_return(self, item) -> ItemRecord:
        record = self._record(item)
        self.engine.complete_return(record.copy(), self.actor)
        return ItemRecord.from_payload(self.api.post(self._path(record, 'complete-return')))

    def confirm_return(self, item, reason: Optional[str] = None) -> ItemRecord:
        """Approve then complete. Two calls, so the pair can stop half-way.

        When complete fails after approve went through, ``ReturnIncomplete`` is
        raised: the record is ``approved`` and calling this again (or
        ``complete_return``) finishes the job.
        """
        record = self._record(item)
        authorize(self.actor, roles.RETURN_CONFIRM)
        if record.return_status != RETURN_APPROVED:
            record = self.approve_return(record, reason)
        try:
            return self.complete_return(record)
        except WorkshopError as e:
            logger.warning('return of reception %s approved but not completed: %s', record.id, e.detail)
            raise ReturnIncomplete(record.id, e) from e

    # ---------- parts ---------- #

    def load_parts(self, item) -> PartsLedger:
        return PartsLedger.from_record(self._record(item))

    def describe_parts(self, ledger: PartsLedger, catalog: Optional[List[Dict[str, Any]]] = None):
        return describe_ledger(ledger, catalog if catalog is not None else self.parts_catalog())

    def save_parts(self, item, ledger: PartsLedger) -> ItemRecord:
        record = self._record(item)
        authorize(self.actor, roles.RECEPTION_PARTS)
        body = self.api.patch(self._path(record, 'extra'), json=ledger.to_payload())
        return ItemRecord.from_payload(body)

    # ---------- admin ---------- #

    def monthly_recap(self, today: Optional[date] = None):
        authorize(self.actor, roles.REPORT_RECAP)
        return build_recap(self.list_items(), today)

    def list_users(self) -> List[Dict[str, Any]]:
        authorize(self.actor, roles.USER_MANAGE)
        return _rows(self.api.get('/users'))

    def create_user(self, name: str, password: str, role: str = roles.ROLE_USER) -> Dict[str, Any]:
        authorize(self.actor, roles.USER_MANAGE)
        if role not in roles.ROLES:
            raise ValidationError('role invalid')
        return self.api.post('/users/users', json={'name': name, 'password': password, 'role': role})

    def delete_user(self, user_id) -> None:
        authorize(self.actor, roles.USER_MANAGE)
        self.api.delete(f'/users/{user_id}')

    def delete_account(self, password: str) -> None:
        """Delete the logged-in account, then drop the local session."""
        actor = self.actor
        authorize(actor, roles.RECEPTION_READ)
        if len(password or '') < MIN_PASSWORD_LENGTH:
            raise ValidationError(f'password must be at least {MIN_PASSWORD_LENGTH} characters')
        self.api.delete(f'/users/{actor.user_id}', json={'password': password})
        self.session.logout()


__all__ = ['WorkshopClient']
