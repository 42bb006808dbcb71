from __future__ import annotations
from flask import Blueprint, request
from sqlalchemy import select, or_, func
from atelier.decorators.auth import require_permissions
from atelier import get_db
from atelier.constants import roles
from atelier.models.catalog import Client, Etrier, Piece, client_json, etrier_json, piece_json

cat_bp = Blueprint('catalog', __name__)


@cat_bp.get('/clients')
@require_permissions(roles.RECEPTION_READ)
def list_clients():
    rows = get_db().execute(select(Client).order_by(Client.name)).scalars().all()
    return {'data': [client_json(c) for c in rows]}


@cat_bp.get('/etriers')
@require_permissions(roles.RECEPTION_READ)
def list_etriers():
    rows = get_db().execute(select(Etrier).order_by(Etrier.car_model)).scalars().all()
    return {'data': [etrier_json(e) for e in rows]}


@cat_bp.get('/pieces')
@require_permissions(roles.RECEPTION_READ)
def list_pieces():
    q = select(Piece).order_by(Piece.designation)
    code = (request.args.get('code') or '').strip().upper()
    if code:
        # what a scanner sends: barcode or article reference
        q = q.where(or_(func.upper(Piece.bar_code)==code, func.upper(Piece.reference_article)==code))
    rows = get_db().execute(q).scalars().all()
    return {'data': [piece_json(p) for p in rows]}
