"""Reusable test helpers for the reception lifecycle.

Patterns unified:
 - Auth header creation using direct JWT claims (bypassing /login) or a real login.
 - Transition calls with status assertions.
 - A requests-compatible transport over the Flask test client so the API client
   runs against the real routes without a network.
"""
from __future__ import annotations
import json as jsonlib
from typing import Dict, Optional
from urllib.parse import urlsplit
import requests
from flask_jwt_extended import create_access_token
from atelier.constants.roles import ROLE_USER

# ---------- Generic Auth Helpers ---------- #

def jwt_headers(user_id: int, role: str = ROLE_USER, name: str = ''):
    token = create_access_token(identity=str(user_id), additional_claims={'role': role, 'name': name})
    return {'Authorization': f'Bearer {token}'}


def login_headers(client, name: str, password: str):
    resp = client.post('/api/users/login', json={'name': name, 'password': password})
    assert resp.status_code == 200, resp.get_json()
    return {'Authorization': f"Bearer {resp.get_json()['token']}"}

# ---------- Assertion Helpers ---------- #

def assert_transition(client, method: str, url: str, headers: Dict[str, str], expected_status: int, json: Optional[dict] = None, expected: Optional[dict] = None):
    resp = client.open(url, method=method, headers=headers, json=json)
    assert resp.status_code == expected_status, resp.get_json()
    body = resp.get_json()
    for key, value in (expected or {}).items():
        assert body[key] == value, (key, body)
    return body


def create_reception_via_api(client, headers: Dict[str, str], client_id: int, etrier_id: int, position: str = 'avant gauche', observation: str = ''):
    resp = client.post('/api/receptions', json={
        'client': client_id, 'etrier': etrier_id, 'position': position, 'observation': observation, 'etat': 'recus',
    }, headers=headers)
    assert resp.status_code == 201, resp.get_json()
    body = resp.get_json()
    assert body['etat'] == 'recus'
    return body

# ---------- API client transport ---------- #

class FlaskResponse:
    def __init__(self, resp):
        self.status_code = resp.status_code
        self.content = resp.get_data()
        self.text = resp.get_data(as_text=True)

    def json(self):
        return jsonlib.loads(self.content)


class FlaskTransport:
    """Stands in for ``requests.Session``; ``fail_on`` simulates a dropped connection."""

    def __init__(self, client, fail_on: Optional[str] = None):
        self.client = client
        self.fail_on = fail_on
        self.calls = []

    def request(self, method, url, headers=None, json=None, params=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append((method, path))
        if self.fail_on and self.fail_on in path:
            raise requests.ConnectionError(f'connection reset on {path}')
        kwargs = {'method': method, 'headers': headers, 'query_string': params}
        if json is not None:
            kwargs['json'] = json
        return FlaskResponse(self.client.open(path, **kwargs))


__all__ = [
    'jwt_headers', 'login_headers', 'assert_transition', 'create_reception_via_api', 'FlaskTransport', 'FlaskResponse',
]
