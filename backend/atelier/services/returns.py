from __future__ import annotations
"""Return sub-flow: none -> requested -> approved -> completed.

Technicians only *request* a return (a reason is mandatory). Admins approve and
complete it; the admin "confirm" action is approve + complete back to back, with
no observable ``requested`` step. Completion sets ``is_returned`` but leaves
``delivered`` untouched, so a return after delivery stays representable.

A completed return can start a new cycle (the item came back again).
"""
import logging
from typing import Callable, Optional

from atelier.constants import roles
from atelier.constants.workflow import (
    STATE_IN_PROGRESS, STATE_FINISHED,
    RETURN_NONE, RETURN_REQUESTED, RETURN_APPROVED, RETURN_COMPLETED,
)
from atelier.errors import InvalidTransition, ValidationError
from atelier.services.policy import authorize
from atelier.services.records import utcnow
from atelier.utils.fsm import TransitionValidator

logger = logging.getLogger(__name__)

RETURN_FSM = TransitionValidator({
    RETURN_NONE: {RETURN_REQUESTED, RETURN_APPROVED},
    RETURN_REQUESTED: {RETURN_APPROVED},
    RETURN_APPROVED: {RETURN_COMPLETED},
    RETURN_COMPLETED: {RETURN_REQUESTED, RETURN_APPROVED},
}, field_name='return')


def is_returnable(record) -> bool:
    """In progress, finished, or already returned once."""
    return record.state in (STATE_IN_PROGRESS, STATE_FINISHED) or bool(record.is_returned)


class ReturnFlow:
    def __init__(self, clock: Optional[Callable] = None):
        self.clock = clock or utcnow

    def _assert_returnable(self, record):
        if not is_returnable(record):
            raise InvalidTransition(f"Cannot return an item in state '{record.state}'")

    def _status(self, record) -> str:
        return record.return_status or RETURN_NONE

    def request(self, record, actor, reason: Optional[str] = None):
        authorize(actor, roles.RETURN_REQUEST)
        reason = (reason or '').strip()
        if not actor.is_admin and not reason:
            raise ValidationError('reason required')
        self._assert_returnable(record)
        RETURN_FSM.assert_can_transition(self._status(record), RETURN_REQUESTED)
        record.return_status = RETURN_REQUESTED
        record.return_reason = reason or None
        record.updated_at = self.clock()
        logger.info('return requested for reception %s by %s', record.id, actor.name or actor.user_id)
        return record

    def approve(self, record, actor):
        authorize(actor, roles.RETURN_APPROVE)
        self._assert_returnable(record)
        RETURN_FSM.assert_can_transition(self._status(record), RETURN_APPROVED)
        record.return_status = RETURN_APPROVED
        record.updated_at = self.clock()
        logger.info('return approved for reception %s', record.id)
        return record

    def complete(self, record, actor):
        authorize(actor, roles.RETURN_COMPLETE)
        if self._status(record) == RETURN_COMPLETED:
            # retried after a lost response: nothing left to do
            return record
        RETURN_FSM.assert_can_transition(self._status(record), RETURN_COMPLETED)
        record.return_status = RETURN_COMPLETED
        record.is_returned = True
        record.updated_at = self.clock()
        logger.info('return completed for reception %s', record.id)
        return record

    def confirm(self, record, actor, reason: Optional[str] = None):
        """Admin one-step return. In-process both steps apply together."""
        authorize(actor, roles.RETURN_CONFIRM)
        reason = (reason or '').strip()
        self.approve(record, actor)
        if reason:
            record.return_reason = reason
        return self.complete(record, actor)


__all__ = ['ReturnFlow', 'RETURN_FSM', 'is_returnable']
