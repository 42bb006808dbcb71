import pytest
from atelier.errors import ValidationError
from atelier.models.reception import Reception
from tests.test_utils_seed import ensure_user, create_reception
from tests.test_lifecycle_helpers import jwt_headers, assert_transition

pytestmark = pytest.mark.usefixtures('clean_receptions')


@pytest.fixture()
def headers(app_instance):
    tech = ensure_user('ret-tech')
    admin = ensure_user('ret-admin', role='admin')
    with app_instance.app_context():
        return tech, jwt_headers(tech.id, 'user', 'ret-tech'), jwt_headers(admin.id, 'admin', 'ret-admin')


def test_two_step_return(client, headers):
    tech, th, ah = headers
    r = create_reception(tech, state='finit', serial_number='SBS25ET0001', delivered=True)
    base = f'/api/receptions/{r.id}'
    body = assert_transition(client, 'POST', f'{base}/request-return', th, 200, json={'reason': 'bruit au freinage'})
    assert (body['returnStatus'], body['returnReason'], body['isReturned']) == ('requested', 'bruit au freinage', False)
    # technicians stop at the request
    assert_transition(client, 'PATCH', f'{base}/approve-return', th, 403)
    assert_transition(client, 'POST', f'{base}/complete-return', ah, 409)
    assert_transition(client, 'PATCH', f'{base}/approve-return', ah, 200, expected={'returnStatus': 'approved', 'isReturned': False})
    body = assert_transition(client, 'POST', f'{base}/complete-return', ah, 200, expected={'returnStatus': 'completed', 'isReturned': True})
    # delivery flag untouched by the return
    assert body['delivered'] is True
    # retried complete after a lost response
    assert_transition(client, 'POST', f'{base}/complete-return', ah, 200, expected={'returnStatus': 'completed'})


def test_request_without_reason_is_rejected(client, headers):
    tech, th, _ = headers
    r = create_reception(tech, state='en cours')
    err = assert_transition(client, 'POST', f'/api/receptions/{r.id}/request-return', th, 400, json={'reason': '   '})
    assert err['error']['code'] == 'ValidationError'
    body = client.get(f'/api/receptions/{r.id}', headers=th).get_json()
    assert body['returnStatus'] == 'none'


def test_admin_request_return_confirms_at_once(client, headers):
    tech, _, ah = headers
    r = create_reception(tech, state='finit', serial_number='SBS25ET0002')
    body = assert_transition(client, 'POST', f'/api/receptions/{r.id}/request-return', ah, 200, json={})
    assert body['returnStatus'] == 'completed' and body['isReturned'] is True


def test_received_item_cannot_be_returned(client, headers):
    tech, th, ah = headers
    r = create_reception(tech)
    assert_transition(client, 'POST', f'/api/receptions/{r.id}/request-return', th, 409, json={'reason': 'x'})
    assert_transition(client, 'PATCH', f'/api/receptions/{r.id}/approve-return', ah, 409)


def test_returned_item_appears_in_finished_view(client, headers):
    tech, th, ah = headers
    r = create_reception(tech, state='en cours')
    assert_transition(client, 'POST', f'/api/receptions/{r.id}/request-return', ah, 200, json={'reason': 'reprise'})
    rows = client.get('/api/receptions?view=finished', headers=th).get_json()['data']
    assert [row['_id'] for row in rows] == [r.id]
    # deliverable once returned
    assert_transition(client, 'PATCH', f'/api/receptions/{r.id}/delivered', ah, 200, expected={'delivered': True})


def test_unknown_return_status_is_refused_by_the_model():
    with pytest.raises(ValidationError):
        Reception(return_status='lost')
    assert Reception(return_status='approved').return_status == 'approved'
