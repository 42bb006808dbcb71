from __future__ import annotations
from datetime import date
from flask import Blueprint, request
from sqlalchemy import select
from atelier import get_db
from atelier.constants import roles
from atelier.decorators.auth import require_permissions
from atelier.errors import ValidationError
from atelier.models.reception import Reception
from atelier.routes.receptions import reception_json
from atelier.services.records import ItemRecord
from atelier.services.reporting import build_recap, recap_json

rpt_bp = Blueprint('reports', __name__)


@rpt_bp.get('/recap')
@require_permissions(roles.REPORT_RECAP)
def monthly_recap():
    """Monthly bonus recap over every finished or returned reception.

    ``?today=YYYY-MM-DD`` pins the current month (used by tests and back-dated reports).
    """
    today = date.today()
    if request.args.get('today'):
        try:
            today = date.fromisoformat(request.args['today'])
        except ValueError:
            raise ValidationError('today must be YYYY-MM-DD')
    rows = get_db().execute(select(Reception)).scalars().all()
    records = [ItemRecord.from_payload(reception_json(r)) for r in rows]
    return recap_json(build_recap(records, today))
