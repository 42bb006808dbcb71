import pytest
from atelier import get_db
from atelier.models.user import User
from tests.test_utils_seed import ensure_user, create_reception, DEFAULT_PASSWORD
from tests.test_lifecycle_helpers import jwt_headers, login_headers


@pytest.fixture()
def admin_headers(app_instance):
    admin = ensure_user('usr-admin', role='admin')
    with app_instance.app_context():
        return jwt_headers(admin.id, 'admin', 'usr-admin')


def test_login_returns_token_and_profile(client):
    u = ensure_user('usr-login')
    resp = client.post('/api/users/login', json={'name': 'usr-login', 'password': DEFAULT_PASSWORD})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['token']
    assert body['user'] == {'id': u.id, '_id': u.id, 'name': 'usr-login', 'role': 'user'}
    me = client.get('/api/users/me', headers={'Authorization': f"Bearer {body['token']}"})
    assert me.get_json()['name'] == 'usr-login'


def test_login_rejects_bad_password(client):
    ensure_user('usr-login')
    resp = client.post('/api/users/login', json={'name': 'usr-login', 'password': 'wrong-password'})
    assert resp.status_code == 401
    assert client.post('/api/users/login', json={'name': 'usr-login'}).status_code == 400


def test_user_admin_endpoints_need_admin(client, app_instance):
    tech = ensure_user('usr-tech')
    with app_instance.app_context():
        th = jwt_headers(tech.id, 'user', 'usr-tech')
    assert client.get('/api/users', headers=th).status_code == 403
    assert client.post('/api/users/users', json={'name': 'x', 'password': 'secret1'}, headers=th).status_code == 403


def test_admin_creates_and_lists_users(client, admin_headers):
    session = get_db()
    existing = session.query(User).filter_by(name='usr-new').one_or_none()
    if existing:
        session.delete(existing); session.commit()
    resp = client.post('/api/users/users', json={'name': 'usr-new', 'password': 'secret1', 'role': 'user'}, headers=admin_headers)
    assert resp.status_code == 201, resp.get_json()
    assert resp.get_json()['role'] == 'user'
    dup = client.post('/api/users/users', json={'name': 'usr-new', 'password': 'secret1'}, headers=admin_headers)
    assert dup.status_code == 400
    assert client.post('/api/users/users', json={'name': 'usr-x', 'password': 'short'}, headers=admin_headers).status_code == 400
    assert client.post('/api/users/users', json={'name': 'usr-x', 'password': 'secret1', 'role': 'root'}, headers=admin_headers).status_code == 400
    names = [u['name'] for u in client.get('/api/users', headers=admin_headers).get_json()['data']]
    assert 'usr-new' in names


def test_technician_deletes_own_account_with_password(client):
    u = ensure_user('usr-leaving')
    r = create_reception(u)
    headers = login_headers(client, 'usr-leaving', DEFAULT_PASSWORD)
    assert client.delete(f'/api/users/{u.id}', json={'password': 'badpass'}, headers=headers).status_code == 403
    resp = client.delete(f'/api/users/{u.id}', json={'password': DEFAULT_PASSWORD}, headers=headers)
    assert resp.status_code == 200
    session = get_db()
    assert session.query(User).filter_by(name='usr-leaving').one_or_none() is None
    session.refresh(r)
    assert r.user_id is None


def test_technician_cannot_delete_others(client, app_instance):
    victim = ensure_user('usr-victim')
    tech = ensure_user('usr-tech')
    with app_instance.app_context():
        th = jwt_headers(tech.id, 'user', 'usr-tech')
    assert client.delete(f'/api/users/{victim.id}', headers=th).status_code == 403


def test_admin_deletes_user(client, admin_headers):
    victim = ensure_user('usr-victim2')
    assert client.delete(f'/api/users/{victim.id}', headers=admin_headers).status_code == 200
    assert client.delete(f'/api/users/{victim.id}', headers=admin_headers).status_code == 404


def test_last_admin_cannot_be_deleted(client):
    session = get_db()
    for other in session.query(User).filter(User.role == 'admin', User.name != 'usr-solo').all():
        other.role = 'user'
    session.commit()
    solo = ensure_user('usr-solo', role='admin')
    headers = login_headers(client, 'usr-solo', DEFAULT_PASSWORD)
    resp = client.delete(f'/api/users/{solo.id}', json={'password': DEFAULT_PASSWORD}, headers=headers)
    assert resp.status_code == 400
    assert 'last admin' in resp.get_json()['error']['detail']
