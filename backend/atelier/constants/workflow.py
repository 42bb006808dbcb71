"""Wire values of the reception lifecycle.

The service and the mobile clients exchange the French workshop vocabulary, so
those strings are the canonical values everywhere.
"""
from __future__ import annotations

STATE_RECEIVED = 'recus'
STATE_IN_PROGRESS = 'en cours'
STATE_FINISHED = 'finit'
ALL_STATES = (STATE_RECEIVED, STATE_IN_PROGRESS, STATE_FINISHED)

RETURN_NONE = 'none'
RETURN_REQUESTED = 'requested'
RETURN_APPROVED = 'approved'
RETURN_COMPLETED = 'completed'
ALL_RETURN_STATUSES = (RETURN_NONE, RETURN_REQUESTED, RETURN_APPROVED, RETURN_COMPLETED)

POSITION_FRONT_LEFT = 'avant gauche'
POSITION_FRONT_RIGHT = 'avant droit'
POSITION_REAR_LEFT = 'arrière gauche'
POSITION_REAR_RIGHT = 'arrière droit'
ALL_POSITIONS = (POSITION_FRONT_LEFT, POSITION_FRONT_RIGHT, POSITION_REAR_LEFT, POSITION_REAR_RIGHT)

# Display labels for month groups in the recap
MONTH_NAMES = (
    'Janvier', 'Février', 'Mars', 'Avril', 'Mai', 'Juin',
    'Juillet', 'Août', 'Septembre', 'Octobre', 'Novembre', 'Décembre',
)

SERIAL_PREFIX = 'SBS'
SERIAL_INFIX = 'ET'
SERIAL_WIDTH = 4
RECEPTION_NUMBER_PREFIX = 'REC'
RECEPTION_NUMBER_WIDTH = 5
