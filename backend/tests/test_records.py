from datetime import datetime, timezone
import pytest
from atelier.services.records import ItemRecord, Actor, normalize_serial, normalize_delivered, format_timestamp


def test_payload_normalization_of_legacy_shapes():
    r = ItemRecord.from_payload({
        '_id': 'abc',
        'receptionNumber': 'REC00042',
        'etat': 'finit',
        'delivered': 'yes',
        'isReturned': False,
        'client': {'_id': 'c1', 'name': 'Garage'},
        'etrier': {'_id': 'e1', 'carModel': 'Golf 7'},
        'user': 'u1',
        'extra': {'serialNumber': {'serialNumber': 'SBS25ET0004'}, 'pieces': ['p1'], 'pieceCounters': {'p1': 2}},
        'date': '2025-03-01T10:00:00.000Z',
        'updatedAt': '2025-03-02T11:00:00Z',
    })
    assert r.id == 'abc'
    assert r.serial_number == 'SBS25ET0004'
    assert r.delivered is True
    assert (r.client_id, r.client_name, r.car_model, r.user_id, r.user_name) == ('c1', 'Garage', 'Golf 7', 'u1', None)
    assert r.parts == {'p1': 2}
    assert r.created_at == datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)
    assert r.last_transition_at == datetime(2025, 3, 2, 11, 0, tzinfo=timezone.utc)
    assert r.return_status == 'none'


def test_delivered_only_true_or_yes():
    assert normalize_delivered(True)
    assert normalize_delivered('yes')
    assert not normalize_delivered('no')
    assert not normalize_delivered(1)
    assert not normalize_delivered(None)


def test_serial_normalization():
    assert normalize_serial('  SBS25ET0001 ') == 'SBS25ET0001'
    assert normalize_serial('') is None
    assert normalize_serial({'serialNumber': None}) is None
    assert normalize_serial(12) is None


def test_returned_overrides_display_state():
    assert ItemRecord(id=1, state='en cours', is_returned=True).display_state == 'returned'
    assert ItemRecord(id=1, state='en cours').display_state == 'en cours'


def test_actor_from_login_profile():
    a = Actor.from_profile({'_id': 5, 'name': 'boss', 'role': 'admin'})
    assert a.user_id == 5 and a.is_admin
    assert not Actor.from_profile({'id': 6, 'name': 't'}).is_admin


def test_timestamps_render_in_utc_z():
    assert format_timestamp(datetime(2025, 1, 2, 3, 4, 5)) == '2025-01-02T03:04:05Z'


@pytest.mark.parametrize('counter,expected', [
    (0, {'p': 1}),
    (None, {'p': 1}),
    ('', {'p': 1}),
    ('abc', {'p': 1}),
    ('3', {'p': 3}),
    (-2, {}),
])
def test_piece_counters_never_leave_zero_quantities(counter, expected):
    r = ItemRecord.from_payload({'_id': 1, 'extra': {'pieces': ['p'], 'pieceCounters': {'p': counter}}})
    assert r.parts == expected


def test_piece_without_counter_defaults_to_one():
    r = ItemRecord.from_payload({'_id': 1, 'extra': {'pieces': [7], 'pieceCounters': None}})
    assert r.parts == {7: 1}
