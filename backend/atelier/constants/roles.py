"""Role and action codes used for authorization.
Codes follow the SERVICE.ACTION pattern. Never rename a code silently: routes, engine and
client all check against the same strings.
"""
from __future__ import annotations
from typing import Dict, List

ROLE_ADMIN = 'admin'
ROLE_USER = 'user'
ROLES = (ROLE_ADMIN, ROLE_USER)

SERVICE_ACTIONS = {
    'RECEPTION': ['READ', 'CREATE', 'START', 'FINISH', 'DELIVER', 'PARTS.UPDATE'],
    'RETURN': ['REQUEST', 'APPROVE', 'COMPLETE', 'CONFIRM'],
    'RPT': ['RECAP'],
    'ADMIN': ['USER.MANAGE'],
}

RECEPTION_READ = 'RECEPTION.READ'
RECEPTION_CREATE = 'RECEPTION.CREATE'
RECEPTION_START = 'RECEPTION.START'
RECEPTION_FINISH = 'RECEPTION.FINISH'
RECEPTION_DELIVER = 'RECEPTION.DELIVER'
RECEPTION_PARTS = 'RECEPTION.PARTS.UPDATE'
RETURN_REQUEST = 'RETURN.REQUEST'
RETURN_APPROVE = 'RETURN.APPROVE'
RETURN_COMPLETE = 'RETURN.COMPLETE'
RETURN_CONFIRM = 'RETURN.CONFIRM'
REPORT_RECAP = 'RPT.RECAP'
USER_MANAGE = 'ADMIN.USER.MANAGE'


def build_all_action_codes() -> List[str]:
    codes: List[str] = []
    for svc, actions in SERVICE_ACTIONS.items():
        for act in actions:
            codes.append(f"{svc}.{act}")
    return codes

ALL_ACTION_CODES = build_all_action_codes()

ROLE_PRESETS: Dict[str, List[str]] = {
    # Technician: intake, bench work, parts and return requests
    ROLE_USER: [
        RECEPTION_READ, RECEPTION_CREATE, RECEPTION_START, RECEPTION_FINISH, RECEPTION_PARTS,
        RETURN_REQUEST,
    ],
    ROLE_ADMIN: ['*'],
}


def actions_for_role(role: str) -> List[str]:
    codes = ROLE_PRESETS.get(role, [])
    if '*' in codes:
        return list(ALL_ACTION_CODES)
    return list(codes)
