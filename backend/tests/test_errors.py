from atelier.errors import (
    error_for_status, ValidationError, Forbidden, InvalidTransition, NotFound, WorkshopError, ReturnIncomplete, NetworkError,
)
from tests.test_utils_seed import ensure_user
from tests.test_lifecycle_helpers import jwt_headers


def test_unknown_path_returns_error_json(client):
    resp = client.get('/non-existent-path')
    # Flask default 404 should be wrapped by error handler
    assert resp.status_code == 404
    body = resp.get_json()
    assert body['error']['status'] == 404
    assert 'detail' in body['error']


def test_missing_token_is_401_json(client):
    resp = client.get('/api/receptions')
    assert resp.status_code == 401
    assert resp.get_json()['error']['code'] == 'Unauthorized'


def test_garbage_token_is_401_json(client):
    resp = client.get('/api/receptions', headers={'Authorization': 'Bearer not-a-jwt'})
    assert resp.status_code == 401
    assert resp.get_json()['error']['status'] == 401


def test_domain_error_envelope(client, app_instance):
    user = ensure_user('err-tech')
    with app_instance.app_context():
        headers = jwt_headers(user.id, 'user', 'err-tech')
    resp = client.get('/api/receptions/999999', headers=headers)
    assert resp.status_code == 404
    err = resp.get_json()['error']
    assert err['code'] == 'NotFound'
    assert err['title'] == 'Not Found'


def test_internal_error_shape(client, app_instance, monkeypatch):
    user = ensure_user('err-boom')
    with app_instance.app_context():
        headers = jwt_headers(user.id, 'user', 'err-boom')
    import atelier.routes.catalog as catalog_mod
    class BoomSession:
        def execute(self, *a, **k):
            raise RuntimeError('explode')
        def rollback(self):
            pass
    monkeypatch.setattr(catalog_mod, 'get_db', lambda: BoomSession())
    resp = client.get('/api/clients', headers=headers)
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['error']['status'] == 500
    assert body['error']['title'] == 'Internal Server Error'


def test_error_for_status_prefers_code():
    assert isinstance(error_for_status(409, 'x', 'InvalidTransition'), InvalidTransition)
    assert isinstance(error_for_status(400, 'x', 'Forbidden'), Forbidden)
    assert isinstance(error_for_status(404, 'gone'), NotFound)
    assert isinstance(error_for_status(422, 'x', 'Nope'), WorkshopError)
    err = error_for_status(400, 'bad qty')
    assert isinstance(err, ValidationError) and err.detail == 'bad qty'


def test_return_incomplete_carries_cause():
    cause = NetworkError('timeout')
    err = ReturnIncomplete(12, cause)
    assert err.reception_id == 12
    assert err.return_status == 'approved'
    assert err.cause is cause
    assert err.to_payload()['error']['code'] == 'ReturnIncomplete'
