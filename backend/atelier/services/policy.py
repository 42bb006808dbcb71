from __future__ import annotations
"""Role based authorization for workshop actions.

The engine calls ``authorize`` on every transition, so hiding a button in a client
is never what protects an action.
"""
from typing import Set
from atelier.constants.roles import actions_for_role
from atelier.errors import Forbidden, Unauthorized


def permissions_for(role: str) -> Set[str]:
    return set(actions_for_role(role))


def has_permissions(role: str, *codes: str) -> bool:
    perms = permissions_for(role)
    return all(c in perms for c in codes)


def authorize(actor, *codes: str) -> None:
    if actor is None:
        raise Unauthorized('Authentication required')
    if not has_permissions(actor.role, *codes):
        raise Forbidden(f"Role '{actor.role}' may not perform {', '.join(codes)}")


def assert_self_or_admin(actor, target_user_id) -> None:
    if actor is None:
        raise Unauthorized('Authentication required')
    if actor.is_admin:
        return
    if str(actor.user_id) != str(target_user_id):
        raise Forbidden('Record ownership required')

__all__ = ['permissions_for', 'has_permissions', 'authorize', 'assert_self_or_admin']
