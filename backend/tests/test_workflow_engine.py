from datetime import datetime, timezone
import pytest
from atelier.errors import Forbidden, InvalidTransition, Unauthorized, ValidationError
from atelier.services.records import Actor, ItemRecord
from atelier.services.workflow import WorkflowEngine

T0 = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)
T1 = datetime(2025, 3, 2, 9, 30, tzinfo=timezone.utc)

TECH = Actor(user_id=1, name='sami', role='user')
ADMIN = Actor(user_id=2, name='boss', role='admin')


@pytest.fixture()
def engine():
    return WorkflowEngine(clock=lambda: T1)


def _item(**kw):
    base = dict(id='r1', reception_number='REC00001', client_name='Garage', car_model='Clio', created_at=T0, updated_at=T0)
    base.update(kw)
    return ItemRecord(**base)


def test_happy_path_received_to_delivered(engine):
    r = _item()
    engine.start(r, TECH)
    assert r.state == 'en cours' and r.updated_at == T1
    engine.finish(r, TECH, 'SBS25ET0003')
    assert r.state == 'finit' and r.serial_number == 'SBS25ET0003'
    engine.deliver(r, ADMIN)
    assert r.delivered is True
    # identity never changes
    assert (r.id, r.reception_number) == ('r1', 'REC00001')


@pytest.mark.parametrize('state,op', [
    ('recus', 'finish'),
    ('en cours', 'start'),
    ('finit', 'start'),
    ('finit', 'finish'),
])
def test_illegal_transition_leaves_record_untouched(engine, state, op):
    r = _item(state=state, serial_number='SBS25ET0001' if state == 'finit' else None)
    before = r.copy()
    with pytest.raises(InvalidTransition):
        if op == 'start':
            engine.start(r, TECH)
        else:
            engine.finish(r, TECH, 'SBS25ET0009')
    assert r == before


def test_finish_requires_a_serial_when_none_assigned(engine):
    r = _item(state='en cours')
    with pytest.raises(ValidationError):
        engine.finish(r, TECH, '   ')
    assert r.state == 'en cours'


def test_returned_item_can_be_finished_again_and_keeps_serial(engine):
    r = _item(state='en cours', is_returned=True, serial_number='SBS24ET0100', return_status='completed')
    engine.finish(r, TECH, 'SBS25ET0200')
    assert r.state == 'finit'
    assert r.serial_number == 'SBS24ET0100'


def test_deliver_requires_finished_or_returned(engine):
    r = _item(state='en cours')
    with pytest.raises(InvalidTransition):
        engine.deliver(r, ADMIN)
    assert r.delivered is False
    returned = _item(state='en cours', is_returned=True)
    engine.deliver(returned, ADMIN)
    assert returned.delivered is True


def test_deliver_twice_is_rejected(engine):
    r = _item(state='finit', serial_number='SBS25ET0001', delivered=True)
    with pytest.raises(InvalidTransition):
        engine.deliver(r, ADMIN)
    assert r.updated_at == T0 and r.delivered is True


def test_technician_cannot_deliver(engine):
    r = _item(state='finit', serial_number='SBS25ET0001')
    with pytest.raises(Forbidden):
        engine.deliver(r, TECH)
    assert r.delivered is False and r.updated_at == T0


def test_anonymous_actor_is_unauthorized(engine):
    with pytest.raises(Unauthorized):
        engine.start(_item(), None)


def test_admin_can_do_technician_work(engine):
    r = _item()
    engine.start(r, ADMIN)
    engine.finish(r, ADMIN, 'SBS25ET0001')
    assert r.state == 'finit'
