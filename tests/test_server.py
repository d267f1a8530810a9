import json
import os

import pytest

from swellcast.api.server import app
from swellcast.surf_model import storage


@pytest.fixture
def client(ratings_dir):
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


def _rating_body(make_conditions, user_id='kelly', time='2025-03-01T08:00', wave_size='small', quality='clean', value=1.0):
    body = make_conditions(value)
    body.update({
        'userId': user_id,
        'time': time,
        'rating': {'waveSize': wave_size, 'quality': quality}
    })
    return body


def _predict_params(make_conditions, value=1.0, user_id='kelly'):
    params = make_conditions(value)
    params['userId'] = user_id
    return params


def test_health(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.get_json()['status'] == 'healthy'
    assert response.headers['Access-Control-Allow-Origin'] == '*'


def test_predict_requires_user_id(client, make_conditions):
    response = client.get('/predict', query_string=make_conditions(1.0))

    assert response.status_code == 400
    assert response.get_json()['error'] == 'userId is required'


def test_predict_rejects_missing_and_bad_parameters(client, make_conditions):
    params = _predict_params(make_conditions)
    del params['windDirection']
    response = client.get('/predict', query_string=params)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Missing query parameter: windDirection'

    params = _predict_params(make_conditions)
    params['wavePeriod'] = 'long'
    response = client.get('/predict', query_string=params)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Invalid numeric value for wavePeriod'


def test_predict_without_ratings(client, make_conditions):
    response = client.get('/predict', query_string=_predict_params(make_conditions))

    assert response.status_code == 400
    assert 'Not enough training data' in response.get_json()['error']


def test_rate_then_predict(client, make_conditions):
    assert client.post('/ratings', json=_rating_body(make_conditions)).status_code == 201
    assert client.post('/ratings', json=_rating_body(
        make_conditions, time='2025-03-02T08:00', wave_size='big', quality='messy', value=3.0
    )).status_code == 201

    response = client.get('/predict', query_string=_predict_params(make_conditions, 3.0))

    assert response.status_code == 200
    assert response.get_json() == {
        'predicted': {'waveSize': 'big', 'quality': 'messy'},
        'samplesUsed': 2
    }


def test_predict_accepts_sea_level(client, make_conditions):
    client.post('/ratings', json=_rating_body(make_conditions, wave_size='flat', quality='zero'))
    params = _predict_params(make_conditions)
    params['seaLevel'] = -0.3

    response = client.get('/predict', query_string=params)

    assert response.status_code == 200
    assert response.get_json()['predicted'] == {'waveSize': 'flat', 'quality': 'zero'}


def test_predict_with_corrupted_ratings_is_a_server_error(client, ratings_dir, make_sample, make_conditions):
    os.makedirs(ratings_dir)
    with open(storage._get_user_file_path('kelly'), 'w') as f:
        json.dump([dict(make_sample(1.0, 'tsunami', 'clean'), userId='kelly')], f)

    response = client.get('/predict', query_string=_predict_params(make_conditions))

    assert response.status_code == 500
    assert response.get_json()['error'] == 'Stored rating data is invalid'


def test_post_rating_validation_and_duplicates(client, make_conditions):
    assert client.post('/ratings', data='nope', content_type='application/json').status_code == 400

    body = _rating_body(make_conditions)
    body['rating']['waveSize'] = 'huge'
    response = client.post('/ratings', json=body)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Invalid waveSize'

    assert client.post('/ratings', json=_rating_body(make_conditions)).status_code == 201
    response = client.post('/ratings', json=_rating_body(make_conditions))
    assert response.status_code == 409


def test_post_flat_rating_stores_zero_quality(client, make_conditions):
    response = client.post('/ratings', json=_rating_body(make_conditions, wave_size='flat', quality='fair'))

    assert response.status_code == 201
    assert response.get_json()['rating_quality'] == 'zero'


def test_get_ratings(client, make_conditions):
    client.post('/ratings', json=_rating_body(make_conditions, time='2025-03-02T08:00'))
    client.post('/ratings', json=_rating_body(make_conditions, time='2025-03-01T08:00'))

    response = client.get('/ratings', query_string={'userId': 'kelly'})
    assert response.status_code == 200
    assert [r['time'] for r in response.get_json()] == ['2025-03-01T08:00', '2025-03-02T08:00']

    response = client.get('/ratings', query_string={'userId': 'kelly', 'time': '2025-03-02T08:00'})
    assert response.status_code == 200
    assert response.get_json()['time'] == '2025-03-02T08:00'

    response = client.get('/ratings', query_string={'userId': 'kelly', 'time': '2025-03-05T08:00'})
    assert response.status_code == 404

    assert client.get('/ratings').status_code == 400


def test_put_rating(client, make_conditions):
    response = client.put('/ratings', json=_rating_body(make_conditions))
    assert response.status_code == 404

    client.post('/ratings', json=_rating_body(make_conditions))
    response = client.put('/ratings', json=_rating_body(make_conditions, wave_size='medium', quality='fair'))

    assert response.status_code == 200
    assert response.get_json()['rating_waveSize'] == 'medium'


def test_delete_rating(client, make_conditions):
    client.post('/ratings', json=_rating_body(make_conditions))

    response = client.delete('/ratings', query_string={'userId': 'kelly', 'time': '2025-03-01T08:00'})
    assert response.status_code == 204

    response = client.delete('/ratings', query_string={'userId': 'kelly', 'time': '2025-03-01T08:00'})
    assert response.status_code == 404

    response = client.delete('/ratings', query_string={'userId': 'kelly'})
    assert response.status_code == 400


def test_unknown_route_and_method(client):
    assert client.get('/nowhere').status_code == 404
    assert client.patch('/ratings').status_code == 405
