from conftest import register_user


def test_register_returns_token_and_user(client):
    user, headers = register_user(client, email='Jo@Example.com')

    assert user['email'] == 'jo@example.com'
    assert headers['Authorization'].startswith('Bearer ')


def test_register_rejects_duplicate_email(client, user):
    response = client.post('/api/auth/register', json={
        'name': 'Alex', 'surname': 'Again', 'email': 'alex@example.com', 'password': 'secret123'
    })

    assert response.status_code == 409


def test_register_validates_password_length(client):
    response = client.post('/api/auth/register', json={
        'name': 'Kim', 'surname': 'Lee', 'email': 'kim@example.com', 'password': '123'
    })

    assert response.status_code == 400
    assert 'password' in response.get_json()['details']


def test_login_includes_basic_analysis(client, user, log_emission):
    _, headers = user
    log_emission(headers, value=12.0, category='Food', activity='beef')

    response = client.post('/api/auth/login', json={'email': 'alex@example.com', 'password': 'secret123'})

    assert response.status_code == 200
    body = response.get_json()
    assert body['access_token'] and body['refresh_token']
    assert body['analysis']['has_data'] is True
    assert body['analysis']['top_category'] == 'Food'
    assert body['analysis']['this_week_emissions'] == 12.0


def test_login_with_wrong_password(client, user):
    response = client.post('/api/auth/login', json={'email': 'alex@example.com', 'password': 'wrong-pass'})

    assert response.status_code == 401


def test_refresh_and_me(client, user):
    login = client.post('/api/auth/login', json={'email': 'alex@example.com', 'password': 'secret123'})
    refresh_token = login.get_json()['refresh_token']

    refreshed = client.post('/api/auth/refresh', headers={'Authorization': f'Bearer {refresh_token}'})
    assert refreshed.status_code == 200

    access = refreshed.get_json()['access_token']
    me = client.get('/api/auth/me', headers={'Authorization': f'Bearer {access}'})
    assert me.status_code == 200
    assert me.get_json()['user']['name'] == 'Alex'
