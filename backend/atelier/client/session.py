from __future__ import annotations
"""Explicit session context: who is logged in, restored from and persisted to a credential store."""
import json
import logging
from typing import Any, Dict, Optional

from atelier.services.records import Actor
from .credentials import TOKEN_KEY, USER_KEY

logger = logging.getLogger(__name__)


class SessionContext:
    def __init__(self, store):
        self.store = store
        self.user: Optional[Dict[str, Any]] = None

    @property
    def token(self) -> Optional[str]:
        return self.store.get(TOKEN_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and bool(self.token)

    @property
    def actor(self) -> Optional[Actor]:
        if not self.is_authenticated:
            return None
        return Actor.from_profile(self.user)

    @property
    def is_admin(self) -> bool:
        actor = self.actor
        return bool(actor and actor.is_admin)

    def restore(self) -> Optional[Dict[str, Any]]:
        """Load the persisted session, if both token and profile are present."""
        token = self.store.get(TOKEN_KEY)
        raw = self.store.get(USER_KEY)
        if not token or not raw:
            self.user = None
            return None
        try:
            self.user = json.loads(raw)
        except ValueError:
            logger.warning('stored user profile is not valid JSON, clearing session')
            self.logout()
            return None
        return self.user

    def login(self, api, name: str, password: str) -> Dict[str, Any]:
        body = api.post('/users/login', json={'name': name, 'password': password})
        self.store.set(TOKEN_KEY, body['token'])
        self.store.set(USER_KEY, json.dumps(body['user']))
        self.user = body['user']
        logger.info('logged in as %s', self.user.get('name'))
        return self.user

    def logout(self) -> None:
        self.store.delete(TOKEN_KEY)
        self.store.delete(USER_KEY)
        self.user = None


__all__ = ['SessionContext']
