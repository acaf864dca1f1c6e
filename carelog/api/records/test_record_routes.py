# carelog/api/records/test_record_routes.py
from carelog.models.user import DEMO_GUEST_UID

DATE = '2024-03-15'


def _create_resident(client, headers, name='山田 太郎', room='101'):
    response = client.post('/api/residents', json={
        'name': name, 'name_kana': 'ヤマダ タロウ', 'birth_date': '1940-03-15',
        'gender': 'male', 'room_number': room, 'care_level': 3,
    }, headers=headers)
    return response.get_json()['resident_id']


def test_absent_record_is_null(client, auth_headers):
    response = client.get(f'/api/residents/r-1/records/{DATE}', headers=auth_headers)
    assert response.status_code == 200
    assert response.get_json() == {'record': None}


def test_invalid_date_key(client, auth_headers):
    response = client.get('/api/residents/r-1/records/2024-3-15', headers=auth_headers)
    assert response.status_code == 400
    assert response.get_json()['error_code'] == 'INVALID_DATE_FORMAT'


def test_append_entry_then_append_again_keeps_both(client, auth_headers):
    resident_id = _create_resident(client, auth_headers)
    url = f'/api/residents/{resident_id}/records/{DATE}/vitals'

    first = client.post(url, json={'time': '06:00', 'temperature': 36.5, 'pulse': 70}, headers=auth_headers)
    assert first.status_code == 201
    first_body = first.get_json()
    assert first_body['entry']['recorded_by'] == DEMO_GUEST_UID
    assert first_body['record']['excretions'] == []

    second = client.post(url, json={'time': '12:00', 'temperature': 36.8}, headers=auth_headers)
    record = second.get_json()['record']
    assert [v['time'] for v in record['vitals']] == ['06:00', '12:00']
    assert record['vitals'][0]['id'] == first_body['entry']['id']
    assert record['date'] == DATE
    assert record['resident_id'] == resident_id


def test_append_validates_by_kind(client, auth_headers):
    url = f'/api/residents/r-1/records/{DATE}'

    response = client.post(f'{url}/vitals', json={'note': 'no measurements'}, headers=auth_headers)
    assert response.status_code == 400

    response = client.post(f'{url}/meals', json={'meal_type': 'lunch'}, headers=auth_headers)
    assert response.status_code == 400
    assert 'main_dish_amount' in response.get_json()['details']

    response = client.post(f'{url}/naps', json={}, headers=auth_headers)
    assert response.status_code == 400
    assert response.get_json()['error_code'] == 'INVALID_RECORD_TYPE'


def test_remove_entry(client, auth_headers):
    url = f'/api/residents/r-1/records/{DATE}/hydrations'
    entry_id = client.post(url, json={'amount': 150}, headers=auth_headers).get_json()['entry']['id']
    client.post(url, json={'amount': 200}, headers=auth_headers)

    response = client.delete(f'{url}/{entry_id}', headers=auth_headers)
    assert response.status_code == 200
    assert [h['amount'] for h in response.get_json()['record']['hydrations']] == [200]

    response = client.delete(f'{url}/{entry_id}', headers=auth_headers)
    assert response.status_code == 404
    assert response.get_json()['error_code'] == 'ENTRY_NOT_FOUND'


def test_put_replaces_whole_list(client, auth_headers):
    url = f'/api/residents/r-1/records/{DATE}'
    client.post(f'{url}/hydrations', json={'amount': 150}, headers=auth_headers)
    entry = {
        'id': 'entry-1', 'recorded_by': DEMO_GUEST_UID, 'recorded_at': '2024-03-15T10:00:00Z',
        'time': '10:00', 'amount': 300,
    }

    for _ in range(2):
        response = client.put(url, json={'hydrations': [entry]}, headers=auth_headers)
        assert response.status_code == 200

    record = response.get_json()['record']
    assert record['hydrations'] == [{**entry, 'recorded_at': '2024-03-15T10:00:00Z'}]



def test_put_extra_field_is_returned_by_get(client, auth_headers, fake_store):
    url = f'/api/residents/r-1/records/{DATE}'
    response = client.put(url, json={'shift_note': 'night shift ok'}, headers=auth_headers)
    assert response.status_code == 200
    assert response.get_json()['record']['shift_note'] == 'night shift ok'
    assert fake_store.documents('demo_records', 'r-1', 'daily')[DATE]['shift_note'] == 'night shift ok'

    record = client.get(url, headers=auth_headers).get_json()['record']
    assert record['shift_note'] == 'night shift ok'
    assert record['vitals'] == []

def test_put_rejects_empty_body(client, auth_headers):
    response = client.put(f'/api/residents/r-1/records/{DATE}', json={}, headers=auth_headers)
    assert response.status_code == 400
    assert response.get_json()['error_code'] == 'VALIDATION_ERROR'


def test_bulk_append(client, auth_headers):
    ids = [_create_resident(client, auth_headers, name, room)
           for name, room in [('山田 太郎', '101'), ('鈴木 花子', '102'), ('佐藤 一郎', '103')]]
    client.post(f'/api/residents/{ids[0]}/records/{DATE}/hydrations', json={'amount': 100}, headers=auth_headers)

    response = client.post('/api/records/bulk', json={
        'resident_ids': ids, 'kind': 'hydrations', 'date': DATE,
        'entry': {'time': '15:00', 'amount': 200, 'drink_type': 'お茶'},
    }, headers=auth_headers)
    assert response.status_code == 201
    assert response.get_json()['saved_count'] == 3

    history = client.get(f'/api/records/history?date={DATE}', headers=auth_headers).get_json()
    totals = {item['resident']['resident_id']: item['hydration_total_ml'] for item in history['items']}
    assert totals == {ids[0]: 300, ids[1]: 200, ids[2]: 200}
    assert history['previous_date'] == '2024-03-14'
    assert history['next_date'] == '2024-03-16'


def test_bulk_partial_failure_is_reported_but_not_rolled_back(client, auth_headers, fake_store):
    ids = [_create_resident(client, auth_headers, name, room)
           for name, room in [('山田 太郎', '101'), ('鈴木 花子', '102')]]
    fake_store.fail_writes(lambda path: f'/{ids[1]}/' in path)

    response = client.post('/api/records/bulk', json={
        'resident_ids': ids, 'kind': 'meals', 'date': DATE,
        'entry': {'meal_type': 'lunch', 'main_dish_amount': 80, 'side_dish_amount': 50},
    }, headers=auth_headers)
    assert response.status_code == 500
    assert response.get_json()['error_code'] == 'BULK_SAVE_FAILED'

    fake_store.clear_failures()
    first = client.get(f'/api/residents/{ids[0]}/records/{DATE}', headers=auth_headers).get_json()['record']
    second = client.get(f'/api/residents/{ids[1]}/records/{DATE}', headers=auth_headers).get_json()['record']
    assert len(first['meals']) == 1
    assert second is None


def test_bulk_validation(client, auth_headers):
    response = client.post('/api/records/bulk', json={
        'resident_ids': [], 'kind': 'hydrations', 'entry': {'amount': 200},
    }, headers=auth_headers)
    assert response.status_code == 400

    response = client.post('/api/records/bulk', json={
        'resident_ids': ['r-1'], 'kind': 'hydrations', 'entry': {},
    }, headers=auth_headers)
    assert response.status_code == 400
    assert 'entry' in response.get_json()['details']


def test_options(client, auth_headers):
    body = client.get('/api/records/options', headers=auth_headers).get_json()
    assert [o['value'] for o in body['meal_amounts']] == [100, 80, 50, 30, 0]
    assert [o['value'] for o in body['hydration_amounts']] == [50, 100, 150, 200, 250]
    assert [o['value'] for o in body['feces_conditions']] == ['hard', 'normal', 'soft', 'watery']
