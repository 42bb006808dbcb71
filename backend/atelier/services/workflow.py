from __future__ import annotations
"""Workflow engine for receptions.

States: recus -> en cours -> finit, with ``delivered`` and ``is_returned`` as
orthogonal flags. Transitions mutate the record in place (an ``ItemRecord`` on
the client, the ORM ``Reception`` in the service: both expose the same
attribute names) and stamp ``updated_at``.

Every operation authorizes the actor first, then checks preconditions, then
mutates. A rejected transition leaves the record untouched.
"""
import logging
from typing import Callable, Optional

from atelier.constants import roles
from atelier.constants.workflow import STATE_RECEIVED, STATE_IN_PROGRESS, STATE_FINISHED
from atelier.errors import InvalidTransition
from atelier.services.policy import authorize
from atelier.services.records import utcnow
from atelier.services.returns import ReturnFlow
from atelier.utils.fsm import TransitionValidator
from atelier.utils.validation import require_text

logger = logging.getLogger(__name__)

STATE_FSM = TransitionValidator({
    STATE_RECEIVED: {STATE_IN_PROGRESS},
    STATE_IN_PROGRESS: {STATE_FINISHED},
    STATE_FINISHED: set(),
}, field_name='etat')


class WorkflowEngine:
    def __init__(self, clock: Optional[Callable] = None):
        self.clock = clock or utcnow
        self.returns = ReturnFlow(self.clock)

    def _touch(self, record):
        record.updated_at = self.clock()

    def start(self, record, actor):
        authorize(actor, roles.RECEPTION_START)
        STATE_FSM.assert_can_transition(record.state, STATE_IN_PROGRESS)
        record.state = STATE_IN_PROGRESS
        self._touch(record)
        logger.info('reception %s started by %s', record.id, actor.name or actor.user_id)
        return record

    def finish(self, record, actor, serial_number: Optional[str] = None):
        """Finish the repair. The caller supplies the serial (see ``suggest_serial``).

        A returned item can be finished again after rework; its existing serial
        is kept and ``serial_number`` is ignored.
        """
        authorize(actor, roles.RECEPTION_FINISH)
        if not record.is_returned:
            STATE_FSM.assert_can_transition(record.state, STATE_FINISHED)
        if record.serial_number:
            if serial_number and serial_number.strip() != record.serial_number:
                logger.info('reception %s keeps serial %s, ignoring %s', record.id, record.serial_number, serial_number)
        else:
            record.serial_number = require_text(serial_number, 'serialNumber')
        record.state = STATE_FINISHED
        self._touch(record)
        logger.info('reception %s finished with serial %s', record.id, record.serial_number)
        return record

    def deliver(self, record, actor):
        authorize(actor, roles.RECEPTION_DELIVER)
        if record.delivered:
            raise InvalidTransition(f'Reception {record.id} already delivered')
        if record.state != STATE_FINISHED and not record.is_returned:
            raise InvalidTransition(f"Cannot deliver an item in state '{record.state}'")
        record.delivered = True
        self._touch(record)
        logger.info('reception %s delivered', record.id)
        return record

    def request_return(self, record, actor, reason: Optional[str] = None):
        """Technicians open a return request; admins get it approved and completed at once."""
        if actor is not None and actor.is_admin:
            return self.returns.confirm(record, actor, reason)
        return self.returns.request(record, actor, reason)

    def approve_return(self, record, actor):
        return self.returns.approve(record, actor)

    def complete_return(self, record, actor):
        return self.returns.complete(record, actor)

    def confirm_return(self, record, actor, reason: Optional[str] = None):
        return self.returns.confirm(record, actor, reason)


__all__ = ['WorkflowEngine', 'STATE_FSM']
