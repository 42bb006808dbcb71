from __future__ import annotations
import logging
from flask import Blueprint, request
from flask_jwt_extended import create_access_token, jwt_required
from sqlalchemy import select, update, func
from atelier import get_db
from atelier.constants import roles
from atelier.decorators.audit import audit_log
from atelier.decorators.auth import require_permissions, current_actor
from atelier.errors import Forbidden, NotFound, Unauthorized, ValidationError
from atelier.models.reception import Reception
from atelier.models.user import User
from atelier.utils.validation import require_text, validate_choice

usr_bp = Blueprint('users', __name__)
logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def issue_token(user: User) -> str:
    # JWT identity must be a string (flask-jwt-extended v4 requirement)
    return create_access_token(identity=str(user.id), additional_claims={'role': user.role, 'name': user.name})


def assert_not_removing_last_admin(session, user: User):
    if user.role != roles.ROLE_ADMIN:
        return
    admins = session.execute(select(func.count(User.id)).where(User.role==roles.ROLE_ADMIN)).scalar_one()
    if admins <= 1:
        raise ValidationError('Cannot delete the last admin')


@usr_bp.post('/login')
def login():
    data = request.json or {}
    name = (data.get('name') or '').strip()
    password = data.get('password')
    if not name or not password:
        raise ValidationError('name & password required')
    session = get_db()
    user = session.execute(select(User).where(User.name==name)).scalar_one_or_none()
    if not user or not user.verify_password(password):
        logger.warning('failed login for %s', name)
        raise Unauthorized('invalid credentials')
    return {'token': issue_token(user), 'user': user.profile()}


@usr_bp.get('/me')
@jwt_required()
def me():
    actor = current_actor()
    user = get_db().get(User, actor.user_id)
    if not user:
        raise NotFound('User not found')
    return user.profile()


@usr_bp.get('')
@require_permissions(roles.USER_MANAGE)
def list_users():
    rows = get_db().execute(select(User).order_by(User.name)).scalars().all()
    return {'data': [u.profile() for u in rows]}


@usr_bp.post('/users')
@require_permissions(roles.USER_MANAGE)
@audit_log('ADMIN.USER.CREATE', entity='User', entity_id_key='id', meta_keys=['name', 'role'])
def create_user():
    session = get_db()
    data = request.json or {}
    name = require_text(data.get('name'), 'name')
    password = data.get('password') or ''
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'password must be at least {MIN_PASSWORD_LENGTH} characters')
    role = validate_choice(data.get('role') or roles.ROLE_USER, roles.ROLES, 'role')
    if session.execute(select(User).where(User.name==name)).scalar_one_or_none():
        raise ValidationError(f"user '{name}' already exists")
    user = User(name=name, role=role)
    user.set_password(password)
    session.add(user)
    session.commit()
    return user.profile(), 201


@usr_bp.delete('/<int:user_id>')
@jwt_required()
@audit_log('ADMIN.USER.DELETE', entity='User', entity_id_arg='user_id')
def delete_user(user_id: int):
    """Admins delete anyone; a technician may only delete their own account.

    Deleting one's own account always needs the current password.
    """
    session = get_db()
    actor = current_actor()
    user = session.get(User, user_id)
    if not user:
        raise NotFound(f'User {user_id} not found')
    if actor.user_id == user.id:
        password = (request.get_json(silent=True) or {}).get('password') or ''
        if len(password) < MIN_PASSWORD_LENGTH or not user.verify_password(password):
            raise Forbidden('password confirmation failed')
    elif not actor.is_admin:
        raise Forbidden('Only admins may delete other accounts')
    assert_not_removing_last_admin(session, user)
    # receptions outlive their technician
    session.execute(update(Reception).where(Reception.user_id==user.id).values(user_id=None))
    session.delete(user)
    session.commit()
    return {'deleted': user_id}
