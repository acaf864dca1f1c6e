# carelog/api/auth/test_auth_routes.py
from firebase_admin import auth as firebase_auth

from carelog.models.user import DEMO_GUEST_UID


def test_guest_login_creates_guest_user_once(client, fake_store):
    first = client.post('/api/auth/guest')
    assert first.status_code == 200
    body = first.get_json()
    assert body['user_id'] == DEMO_GUEST_UID
    assert body['access_token'] and body['refresh_token']
    assert body['user_info']['email'] == 'guest@demo.example.com'

    second = client.post('/api/auth/guest')
    assert second.status_code == 200
    assert list(fake_store.documents('demo_users')) == [DEMO_GUEST_UID]


def test_guest_token_reaches_me_endpoint(client):
    token = client.post('/api/auth/guest').get_json()['access_token']
    response = client.get('/api/users/me', headers={'Authorization': f'Bearer {token}'})
    assert response.status_code == 200
    assert response.get_json()['user_id'] == DEMO_GUEST_UID


def test_refresh_issues_new_access_token(client):
    refresh = client.post('/api/auth/guest').get_json()['refresh_token']
    response = client.post('/api/auth/token/refresh', headers={'Authorization': f'Bearer {refresh}'})
    assert response.status_code == 200
    assert response.get_json()['access_token']


def test_guest_login_is_demo_only(production_app, fake_store):
    response = production_app.test_client().post('/api/auth/guest')
    assert response.status_code == 403
    assert response.get_json()['error_code'] == 'DEMO_MODE_ONLY'
    assert fake_store.write_log == []


def test_login_with_firebase_id_token(production_app, fake_store, monkeypatch):
    def fake_verify(id_token):
        assert id_token == 'valid-token'
        return {'uid': 'staff-uid-1', 'email': 'staff@example.com', 'name': '介護 職員'}

    monkeypatch.setattr(firebase_auth, 'verify_id_token', fake_verify)
    client = production_app.test_client()

    response = client.post('/api/auth/login', json={'id_token': 'valid-token'})
    assert response.status_code == 200
    assert response.get_json()['user_info']['name'] == '介護 職員'
    assert 'staff-uid-1' in fake_store.documents('users')

    me = client.get('/api/users/me', headers={'Authorization': f"Bearer {response.get_json()['access_token']}"})
    assert me.get_json()['email'] == 'staff@example.com'


def test_login_rejects_invalid_token(production_app, monkeypatch):
    def fake_verify(id_token):
        raise ValueError("bad token")

    monkeypatch.setattr(firebase_auth, 'verify_id_token', fake_verify)
    response = production_app.test_client().post('/api/auth/login', json={'id_token': 'nope'})
    assert response.status_code == 401
    assert response.get_json()['error_code'] == 'INVALID_ID_TOKEN'


def test_login_requires_id_token(production_app):
    response = production_app.test_client().post('/api/auth/login', json={})
    assert response.status_code == 400


def test_me_without_user_document(production_app, production_auth_headers):
    response = production_app.test_client().get('/api/users/me', headers=production_auth_headers)
    assert response.status_code == 404
