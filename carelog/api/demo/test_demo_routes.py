# carelog/api/demo/test_demo_routes.py


def test_status_before_and_after_seed(client, auth_headers):
    status = client.get('/api/demo/status').get_json()
    assert status == {'mode': 'demo', 'is_seeded': False}

    response = client.post('/api/demo/seed', headers=auth_headers)
    assert response.status_code == 201
    assert response.get_json() == {'residents_count': 30, 'records_count': 90}

    assert client.get('/api/demo/status').get_json()['is_seeded'] is True

    residents = client.get('/api/residents', headers=auth_headers).get_json()
    assert len(residents) == 30


def test_seed_twice_is_conflict(client, auth_headers):
    client.post('/api/demo/seed', headers=auth_headers)
    response = client.post('/api/demo/seed', headers=auth_headers)
    assert response.status_code == 409
    assert response.get_json()['error_code'] == 'ALREADY_SEEDED'


def test_reset(client, auth_headers):
    client.post('/api/demo/seed', headers=auth_headers)
    response = client.post('/api/demo/reset', headers=auth_headers)
    assert response.status_code == 200
    body = response.get_json()
    assert body['deleted_residents'] == 30
    assert body['residents_count'] == 30


def test_demo_endpoints_in_production(production_app, production_auth_headers, fake_store):
    client = production_app.test_client()
    assert client.get('/api/demo/status').get_json() == {'mode': 'production', 'is_seeded': False}

    for path in ('/api/demo/seed', '/api/demo/reset'):
        response = client.post(path, headers=production_auth_headers)
        assert response.status_code == 403
        assert response.get_json()['error_code'] == 'DEMO_MODE_ONLY'
    assert fake_store.write_log == []


def test_cli_seed(app, fake_store):
    result = app.test_cli_runner().invoke(args=['demo', 'seed'])
    assert result.exit_code == 0
    assert 'Seed' in result.output
    assert len(fake_store.documents('demo_residents')) == 30


def test_cli_refuses_in_production(production_app):
    result = production_app.test_cli_runner().invoke(args=['demo', 'reset'])
    assert result.exit_code != 0
