from __future__ import annotations
"""Audit logging decorator for route handlers.

Usage:

@audit_log('RECEPTION.FINISH', entity='Reception', entity_id_key='_id',
           diff_keys=['etat'], pre_fetch=lambda a, kw: _snapshot(kw['reception_id']))
def finish(reception_id): ...

Parameters:
  action: audit action code (RECEPTION.START, RETURN.APPROVE, ...)
  entity: optional entity label (Reception, User)
  entity_id_key: key in the returned JSON object whose value becomes entity_id.
  entity_id_arg: path parameter used for entity_id when the key is absent.
  meta_keys: keys projected from the returned JSON into meta.
  meta_builder: callable (data, rv, args, kwargs) -> dict; overrides meta_keys.
  diff_keys / pre_fetch: snapshot taken before the handler runs; changed keys land
    in meta['changes'] as {'before', 'after'}.

Only successful handlers are audited. An exception raised by the handler
propagates untouched (the error handler rolls the session back).
"""

import logging
from functools import wraps
from typing import Any, Callable, Iterable, Optional, Dict

from sqlalchemy.exc import SQLAlchemyError

from atelier.services.audit import add_audit
from atelier import get_db

logger = logging.getLogger(__name__)


def _extract_payload(rv: Any):
    """Return the JSON-able dict of a view return value (dict, (dict, status), ...)."""
    if isinstance(rv, tuple) and rv:
        return rv[0]
    return rv


def _diff(before: Dict[str, Any], after: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    changes = {}
    for k in keys:
        if k in before and k in after and before.get(k) != after.get(k):
            changes[k] = {'before': before.get(k), 'after': after.get(k)}
    return changes


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    entity_id_arg: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    meta_builder: Optional[Callable[[dict, Any, tuple, dict], dict]] = None,
    commit: bool = True,
    diff_keys: Optional[Iterable[str]] = None,
    pre_fetch: Optional[Callable[[tuple, dict], Dict[str, Any]]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            before = pre_fetch(args, kwargs) if (diff_keys and pre_fetch) else None
            rv = fn(*args, **kwargs)
            data = _extract_payload(rv)
            if not isinstance(data, dict):
                add_audit(action, entity, None, None)
            else:
                entity_id = None
                if entity_id_key and entity_id_key in data:
                    entity_id = data.get(entity_id_key)
                elif entity_id_arg and entity_id_arg in kwargs:
                    entity_id = kwargs.get(entity_id_arg)
                if meta_builder:
                    meta = meta_builder(data, rv, args, kwargs)
                elif meta_keys:
                    meta = {k: data.get(k) for k in meta_keys if k in data}
                else:
                    meta = None
                if diff_keys and isinstance(before, dict):
                    changes = _diff(before, data, diff_keys)
                    if changes:
                        meta = dict(meta or {})
                        meta['changes'] = changes
                add_audit(action, entity, entity_id, meta)
            if commit:
                try:
                    get_db().commit()
                except SQLAlchemyError:
                    # the business change is already committed by the handler
                    logger.exception('audit entry for %s not persisted', action)
                    get_db().rollback()
            return rv
        return wrapper
    return outer
