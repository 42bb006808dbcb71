from __future__ import annotations
"""HTTP access to the workshop service.

One ``requests.Session`` per client, a fixed per-request timeout and no retries.
The bearer token is read from the credential store on every request. Error
responses are mapped back onto ``atelier.errors``; a request that gets no
response at all raises ``NetworkError``.
"""
import logging
import os
from typing import Any, Optional

import requests

from atelier.errors import NetworkError, error_for_status
from .credentials import TOKEN_KEY

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'http://localhost:5000/api'
DEFAULT_TIMEOUT = 10


class ApiClient:
    def __init__(self, base_url: Optional[str] = None, store=None, timeout: Optional[float] = None, http=None):
        self.base_url = (base_url or os.getenv('ATELIER_API_URL') or DEFAULT_API_URL).rstrip('/')
        if timeout is None:
            timeout = float(os.getenv('ATELIER_API_TIMEOUT', DEFAULT_TIMEOUT))
        self.timeout = timeout
        self.store = store
        self.http = http or requests.Session()

    def _headers(self):
        headers = {'Accept': 'application/json'}
        token = self.store.get(TOKEN_KEY) if self.store is not None else None
        if token:
            headers['Authorization'] = f'Bearer {token}'
        return headers

    def request(self, method: str, path: str, json: Any = None, params: Optional[dict] = None):
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug('request %s %s', method, url)
        try:
            resp = self.http.request(method, url, headers=self._headers(), json=json, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning('no response for %s %s: %s', method, url, e)
            raise NetworkError(str(e)) from e
        logger.debug('response %s %s %s', resp.status_code, method, url)
        if resp.status_code >= 400:
            err = self._error(resp)
            logger.warning('%s %s failed with %s: %s', method, url, resp.status_code, err.detail)
            raise err
        if not resp.content:
            return None
        return resp.json()

    def _error(self, resp):
        detail, code = '', None
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            err = body.get('error')
            if isinstance(err, dict):
                detail = err.get('detail') or err.get('title') or ''
                code = err.get('code')
            elif isinstance(err, str):
                detail = err
            else:
                detail = body.get('message') or ''
        if not detail:
            detail = (resp.text or '')[:200]
        return error_for_status(resp.status_code, detail, code)

    def get(self, path: str, params: Optional[dict] = None):
        return self.request('GET', path, params=params)

    def post(self, path: str, json: Any = None):
        return self.request('POST', path, json=json)

    def patch(self, path: str, json: Any = None):
        return self.request('PATCH', path, json=json)

    def delete(self, path: str, json: Any = None):
        return self.request('DELETE', path, json=json)


__all__ = ['ApiClient', 'DEFAULT_API_URL', 'DEFAULT_TIMEOUT']
