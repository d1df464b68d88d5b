from footprint.services.rate_limiter import RateLimiter


def test_insights_are_cached_until_a_write(client, user, log_emission):
    user_data, headers = user
    log_emission(headers, value=10)
    url = f"/api/analysis/insights/{user_data['id']}"

    first = client.get(url, headers=headers).get_json()
    second = client.get(url, headers=headers).get_json()

    assert first['has_data'] is True
    assert 'from_cache' not in first
    assert second['from_cache'] is True
    assert isinstance(second['generated_at'], str)

    log_emission(headers, value=5)
    third = client.get(url, headers=headers).get_json()
    assert 'from_cache' not in third
    assert third['summary']['total_emissions'] == 15


def test_insights_without_data(client, user):
    user_data, headers = user

    body = client.get(f"/api/analysis/insights/{user_data['id']}", headers=headers).get_json()

    assert body['has_data'] is False


def test_insights_reject_bad_params(client, user):
    user_data, headers = user

    response = client.get(f"/api/analysis/insights/{user_data['id']}?start_date=soon", headers=headers)

    assert response.status_code == 400


def test_other_users_analysis_is_forbidden(client, user, other_user):
    _, headers = user
    other, _ = other_user

    assert client.get(f"/api/analysis/comparisons/{other['id']}", headers=headers).status_code == 403


def test_requires_jwt(client, user):
    user_data, _ = user

    assert client.get(f"/api/analysis/quick-stats/{user_data['id']}").status_code == 401


def test_rate_limit(app, client, user):
    user_data, headers = user
    app.extensions['analysis_rate_limiter'] = RateLimiter(max_requests=2, window_seconds=60)
    url = f"/api/analysis/quick-stats/{user_data['id']}"

    assert client.get(url, headers=headers).status_code == 200
    assert client.get(url, headers=headers).status_code == 200
    response = client.get(url, headers=headers)

    assert response.status_code == 429
    assert response.get_json()['details']['retry_after_seconds'] == 60


def test_every_analysis_endpoint_answers(client, user, log_emission):
    user_data, headers = user
    log_emission(headers, value=25, category='Transport')
    log_emission(headers, value=3, category='Food', hours_ago=26)

    for name in ('recommendations', 'comparisons', 'notifications', 'daily-summary', 'quick-stats'):
        response = client.get(f"/api/analysis/{name}/{user_data['id']}", headers=headers)
        assert response.status_code == 200, name

    recommendations = client.get(f"/api/analysis/recommendations/{user_data['id']}", headers=headers).get_json()
    assert recommendations['recommendations'][0]['category'] == 'Transport'
    assert recommendations['category_summary']['high_priority'] >= 1

    comparisons = client.get(f"/api/analysis/comparisons/{user_data['id']}", headers=headers).get_json()
    assert comparisons['summary']['total_data_points'] == 2

    notifications = client.get(f"/api/analysis/notifications/{user_data['id']}", headers=headers).get_json()
    assert notifications['metadata']['total_data_points'] == 2


def test_new_user_gets_getting_started_recommendations(client, user):
    user_data, headers = user

    body = client.get(f"/api/analysis/recommendations/{user_data['id']}", headers=headers).get_json()

    assert body['has_data'] is False
    assert body['recommendations'][0]['type'] == 'getting_started'


def test_charts_are_png(client, user, log_emission):
    user_data, headers = user
    log_emission(headers, value=4)

    for chart in ('weekly', 'categories'):
        response = client.get(f"/api/analysis/charts/{chart}/{user_data['id']}", headers=headers)
        assert response.status_code == 200
        assert response.mimetype == 'image/png'
        assert response.data.startswith(b'\x89PNG')


def test_weekly_chart_bounds_weeks(client, user):
    user_data, headers = user

    response = client.get(f"/api/analysis/charts/weekly/{user_data['id']}?weeks=100", headers=headers)

    assert response.status_code == 400


def test_clear_cache_and_health(client, user, log_emission):
    user_data, headers = user
    log_emission(headers)
    client.get(f"/api/analysis/quick-stats/{user_data['id']}", headers=headers)

    health = client.get('/api/analysis/health').get_json()
    assert health['status'] == 'healthy'
    assert health['cache']['size'] == 1

    cleared = client.delete(f"/api/analysis/cache/{user_data['id']}", headers=headers).get_json()
    assert cleared['cleared_entries'] == 1


def test_app_health(client):
    assert client.get('/api/health').get_json()['status'] == 'healthy'
