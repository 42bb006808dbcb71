from __future__ import annotations
"""Credential stores holding the auth token and the user profile.

Keys mirror the mobile secure store: ``userToken`` and ``userData`` (JSON string).
"""
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

TOKEN_KEY = 'userToken'
USER_KEY = 'userData'
DEFAULT_CREDENTIALS_PATH = '~/.atelier/credentials.json'


class MemoryCredentialStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class FileCredentialStore:
    """JSON file store, readable by the owner only."""

    def __init__(self, path: Optional[str] = None):
        raw = path or os.getenv('ATELIER_CREDENTIALS_PATH') or DEFAULT_CREDENTIALS_PATH
        self.path = Path(raw).expanduser()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError):
            logger.warning('credential file %s unreadable, ignoring it', self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # 0600 from creation, then renamed over the old file
        tmp = self.path.with_name(self.path.name + '.tmp')
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, 'w', encoding='utf-8') as fh:
            json.dump(data, fh)
        os.chmod(tmp, 0o600)
        os.replace(tmp, self.path)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


__all__ = ['MemoryCredentialStore', 'FileCredentialStore', 'TOKEN_KEY', 'USER_KEY']
