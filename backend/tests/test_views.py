from datetime import datetime, timedelta, timezone
import pytest
from atelier.errors import ValidationError
from atelier.services.records import ItemRecord
from atelier.services.views import select_view

T = datetime(2025, 5, 1, tzinfo=timezone.utc)


def _rec(rid, state, days=0, returned=False, delivered=False, updated=None, **kw):
    return ItemRecord(
        id=rid, state=state, is_returned=returned, delivered=delivered,
        created_at=T + timedelta(days=days),
        updated_at=T + timedelta(days=updated) if updated is not None else None, **kw,
    )


@pytest.fixture()
def records():
    return [
        _rec('a', 'recus', days=3, client_name='Garage Nord', car_model='Clio'),
        _rec('b', 'en cours', days=1, client_name='Auto Sud', car_model='Golf'),
        _rec('c', 'finit', days=0, updated=5, serial_number='SBS25ET0001', client_name='Garage Nord'),
        _rec('d', 'finit', days=2, updated=4, delivered=True, serial_number='SBS25ET0002'),
        _rec('e', 'en cours', days=4, returned=True, updated=2, client_name='Particulier'),
        _rec('f', 'finit', days=5, returned=True, delivered=True),
    ]


def test_view_partition(records):
    ids = lambda rows: [r.id for r in rows]
    assert ids(select_view(records, 'reception')) == ['b', 'a', 'e', 'f']
    assert ids(select_view(records, 'finished')) == ['e', 'c']
    assert ids(select_view(records, 'delivered')) == ['d', 'f']


def test_finished_view_falls_back_to_created_at():
    rows = [_rec('x', 'finit', days=10), _rec('y', 'finit', days=1, updated=20)]
    assert [r.id for r in select_view(rows, 'finished')] == ['x', 'y']


def test_search_is_case_insensitive_over_client_serial_model(records):
    assert {r.id for r in select_view(records, 'reception', search='garage')} == {'a'}
    assert {r.id for r in select_view(records, 'finished', search='sbs25et0001')} == {'c'}
    assert {r.id for r in select_view(records, 'reception', search='GOLF')} == {'b'}


def test_reception_status_filters(records):
    ids = lambda status: [r.id for r in select_view(records, 'reception', status=status)]
    assert ids('all') == ['b', 'a', 'e', 'f']
    assert ids('recus') == ['a']
    assert ids('in_progress') == ['b', 'e', 'f']
    assert ids('en cours') == ['b', 'e', 'f']
    assert ids('retour') == ['e', 'f']


def test_unknown_view_or_filter(records):
    with pytest.raises(ValidationError):
        select_view(records, 'archived')
    with pytest.raises(ValidationError):
        select_view(records, 'reception', status='lost')
    with pytest.raises(ValidationError):
        select_view(records, 'finished', status='returned')
