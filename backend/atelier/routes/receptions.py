from __future__ import annotations
from datetime import date
from flask import Blueprint, request
from sqlalchemy import select
from atelier.decorators.auth import require_permissions, current_actor
from atelier.decorators.audit import audit_log
from atelier import get_db
from atelier.constants import roles
from atelier.constants.workflow import ALL_POSITIONS, ALL_STATES, STATE_RECEIVED, STATE_IN_PROGRESS, STATE_FINISHED
from atelier.errors import NotFound, ValidationError
from atelier.models.catalog import Client, Etrier, Piece
from atelier.models.reception import Reception, ReceptionPiece
from atelier.models.user import User
from atelier.services.parts import PartsLedger
from atelier.services.policy import assert_self_or_admin
from atelier.services.records import ItemRecord, format_timestamp, utcnow
from atelier.services.serials import suggest_serial
from atelier.services.views import select_view, matches_search
from atelier.services.workflow import WorkflowEngine, STATE_FSM
from atelier.utils.validation import validate_choice

rcp_bp = Blueprint('receptions', __name__)

ENGINE = WorkflowEngine()


def _ref_id(value, field_name):
    """Accept a bare id or a populated ``{_id: ...}`` object."""
    if isinstance(value, dict):
        value = value.get('_id', value.get('id'))
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field_name} required')


def _load(reception_id: int) -> Reception:
    session = get_db()
    r = session.execute(select(Reception).where(Reception.id==reception_id)).scalar_one_or_none()
    if not r:
        raise NotFound(f'Reception {reception_id} not found')
    return r


def _prefetch(reception_id):
    r = get_db().get(Reception, reception_id)
    return reception_json(r) if r else {}


@rcp_bp.get('/receptions')
@require_permissions(roles.RECEPTION_READ)
def list_receptions():
    session = get_db()
    rows = session.execute(select(Reception).order_by(Reception.created_at, Reception.id)).scalars().all()
    rows_json = [reception_json(r) for r in rows]
    view = request.args.get('view')
    search = request.args.get('search') or request.args.get('q')
    status = request.args.get('status')
    if not view and not search and not status:
        return {'data': rows_json}
    by_id = {p['_id']: p for p in rows_json}
    records = [ItemRecord.from_payload(p) for p in rows_json]
    if view:
        records = select_view(records, view, search=search, status=status)
    else:
        if status:
            raise ValidationError('status filter requires view=reception')
        records = [rec for rec in records if matches_search(rec, search)]
    return {'data': [by_id[rec.id] for rec in records]}


@rcp_bp.get('/receptions/<int:reception_id>')
@require_permissions(roles.RECEPTION_READ)
def get_reception(reception_id: int):
    return reception_json(_load(reception_id))


@rcp_bp.post('/receptions')
@require_permissions(roles.RECEPTION_CREATE)
@audit_log('RECEPTION.CREATE', entity='Reception', entity_id_key='_id', meta_keys=['receptionNumber', 'position'])
def create_reception():
    session = get_db()
    data = request.json or {}
    actor = current_actor()
    client_id = _ref_id(data.get('client'), 'client')
    etrier_id = _ref_id(data.get('etrier'), 'etrier')
    position = validate_choice(data.get('position'), ALL_POSITIONS, 'position')
    if data.get('etat', STATE_RECEIVED) != STATE_RECEIVED:
        raise ValidationError('etat must be recus on creation')
    user_id = _ref_id(data['user'], 'user') if data.get('user') else actor.user_id
    assert_self_or_admin(actor, user_id)
    if not session.get(Client, client_id):
        raise ValidationError(f'client {client_id} unknown')
    if not session.get(Etrier, etrier_id):
        raise ValidationError(f'etrier {etrier_id} unknown')
    if not session.get(User, user_id):
        raise ValidationError(f'user {user_id} unknown')
    r = Reception(
        client_id=client_id,
        etrier_id=etrier_id,
        user_id=user_id,
        position=position,
        observation=(data.get('observation') or '').strip(),
        state=STATE_RECEIVED,
    )
    session.add(r)
    session.flush()
    r.assign_number()
    session.commit()
    return reception_json(r), 201


@rcp_bp.patch('/receptions/<int:reception_id>/etat')
@require_permissions(roles.RECEPTION_READ)
@audit_log('RECEPTION.ETAT', entity='Reception', entity_id_key='_id', diff_keys=['etat'], pre_fetch=lambda a, kw: _prefetch(kw.get('reception_id')))
def update_state(reception_id: int):
    session = get_db()
    data = request.json or {}
    target = validate_choice(data.get('etat'), ALL_STATES, 'etat')
    r = _load(reception_id)
    actor = current_actor()
    if target == STATE_IN_PROGRESS:
        ENGINE.start(r, actor)
    elif target == STATE_FINISHED:
        serial = (data.get('serialNumber') or '').strip() or None
        if serial is None and not r.serial_number:
            # Nobody typed a serial: take the next one in sequence
            everything = session.execute(select(Reception)).scalars().all()
            serial = suggest_serial(everything, date.today())
        ENGINE.finish(r, actor, serial)
    else:
        STATE_FSM.assert_can_transition(r.state, target)
    session.commit()
    return reception_json(r)


@rcp_bp.patch('/receptions/<int:reception_id>/delivered')
@require_permissions(roles.RECEPTION_DELIVER)
@audit_log('RECEPTION.DELIVER', entity='Reception', entity_id_key='_id', diff_keys=['delivered'], pre_fetch=lambda a, kw: _prefetch(kw.get('reception_id')))
def mark_delivered(reception_id: int):
    session = get_db()
    r = _load(reception_id)
    ENGINE.deliver(r, current_actor())
    session.commit()
    return reception_json(r)


@rcp_bp.post('/receptions/<int:reception_id>/request-return')
@require_permissions(roles.RETURN_REQUEST)
@audit_log('RETURN.REQUEST', entity='Reception', entity_id_key='_id', diff_keys=['returnStatus', 'isReturned'], pre_fetch=lambda a, kw: _prefetch(kw.get('reception_id')), meta_keys=['returnReason'])
def request_return(reception_id: int):
    session = get_db()
    data = request.json or {}
    r = _load(reception_id)
    ENGINE.request_return(r, current_actor(), data.get('reason'))
    session.commit()
    return reception_json(r)


@rcp_bp.patch('/receptions/<int:reception_id>/approve-return')
@require_permissions(roles.RETURN_APPROVE)
@audit_log('RETURN.APPROVE', entity='Reception', entity_id_key='_id', diff_keys=['returnStatus'], pre_fetch=lambda a, kw: _prefetch(kw.get('reception_id')))
def approve_return(reception_id: int):
    session = get_db()
    r = _load(reception_id)
    ENGINE.approve_return(r, current_actor())
    reason = ((request.get_json(silent=True) or {}).get('reason') or '').strip()
    if reason:
        r.return_reason = reason
    session.commit()
    return reception_json(r)


@rcp_bp.post('/receptions/<int:reception_id>/complete-return')
@require_permissions(roles.RETURN_COMPLETE)
@audit_log('RETURN.COMPLETE', entity='Reception', entity_id_key='_id', diff_keys=['returnStatus', 'isReturned'], pre_fetch=lambda a, kw: _prefetch(kw.get('reception_id')))
def complete_return(reception_id: int):
    session = get_db()
    r = _load(reception_id)
    ENGINE.complete_return(r, current_actor())
    session.commit()
    return reception_json(r)


@rcp_bp.patch('/receptions/<int:reception_id>/extra')
@require_permissions(roles.RECEPTION_PARTS)
@audit_log('RECEPTION.PARTS.REPLACE', entity='Reception', entity_id_key='_id', meta_builder=lambda data, rv, a, kw: {'count': len(data.get('extra', {}).get('pieces', []))})
def replace_parts(reception_id: int):
    session = get_db()
    r = _load(reception_id)
    ledger = PartsLedger.from_payload(request.json or {})
    wanted = {}
    for part_id, qty in ledger.items():
        pid = _ref_id(part_id, f'pieces.{part_id}')
        wanted[pid] = wanted.get(pid, 0) + qty
    if wanted:
        known = set(session.execute(select(Piece.id).where(Piece.id.in_(wanted.keys()))).scalars().all())
        missing = sorted(set(wanted) - known)
        if missing:
            raise ValidationError(f"unknown pieces: {', '.join(str(m) for m in missing)}")
    # Full replace
    r.pieces.clear()
    session.flush()
    for pid, qty in wanted.items():
        r.pieces.append(ReceptionPiece(piece_id=pid, quantity=qty))
    r.updated_at = utcnow()
    session.commit()
    return reception_json(r)


def reception_json(r: Reception):
    return {
        '_id': r.id,
        'receptionNumber': r.reception_number,
        'client': {'_id': r.client_id, 'name': r.client.name if r.client else None},
        'etrier': {'_id': r.etrier_id, 'carModel': r.etrier.car_model if r.etrier else None},
        'user': {'_id': r.user_id, 'name': r.user.name if r.user else None} if r.user_id else None,
        'position': r.position,
        'observation': r.observation,
        'etat': r.state,
        'isReturned': bool(r.is_returned),
        'delivered': bool(r.delivered),
        'returnStatus': r.return_status,
        'returnReason': r.return_reason,
        'extra': {
            'serialNumber': r.serial_number,
            'pieces': [p.piece_id for p in r.pieces],
            'pieceCounters': {str(p.piece_id): p.quantity for p in r.pieces},
        },
        'date': format_timestamp(r.created_at),
        'updatedAt': format_timestamp(r.updated_at),
    }
