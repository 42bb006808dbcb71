from __future__ import annotations
import logging
from typing import Any, Dict, Optional
from flask_jwt_extended import get_jwt_identity, get_jwt
from flask_jwt_extended.exceptions import JWTExtendedException
from atelier import get_db
from atelier.models.audit import AuditLog

logger = logging.getLogger(__name__)


def add_audit(action: str, entity: Optional[str] = None, entity_id: Optional[str] = None, meta: Optional[Dict[str, Any]] = None):
    """Persist an audit log entry within the current DB session.

    Parameters:
      action: action code e.g. RECEPTION.FINISH, RETURN.APPROVE
      entity: optional entity name (Reception, User)
      entity_id: optional primary key string
      meta: additional JSON-safe dictionary (will be shallow copied)
    """
    session = get_db()
    claims: Dict[str, Any] = {}
    actor = None
    try:
        claims = get_jwt() or {}
        ident = get_jwt_identity()
        actor = int(ident) if ident is not None else None
    except (RuntimeError, JWTExtendedException, ValueError):
        # no JWT in this request (login, seeding)
        logger.debug('audit %s recorded without actor', action)
    log = AuditLog(
        actor_user_id=actor or 0,
        actor_role=claims.get('role'),
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        meta=dict(meta or {}),
    )
    session.add(log)
    # No commit here; caller's transaction boundary controls durability.
    return log
