"""Tests for the ShareDrive HTTP API."""

import pytest
from fastapi.testclient import TestClient

from server.main import app

REPORT = b"%PDF-1.4 abc"


@pytest.fixture
def client(test_db, blob_store):
    """Create FastAPI test client over a temp database and blob store."""
    return TestClient(app)


@pytest.fixture
def keys(client):
    """Register alice, bob and carol; returns their Authorization headers."""
    headers = {}
    for name in ("alice", "bob", "carol"):
        response = client.post('/auth/register', json={'username': name, 'password': 'password123'})
        assert response.status_code == 201
        headers[name] = {'Authorization': f"Bearer {response.json()['api_key']}"}
    return headers


def _upload(client, headers, name="report.pdf", content=REPORT):
    return client.post('/files', files={'file': (name, content)}, headers=headers)


def test_root_endpoint(client):
    response = client.get('/')
    assert response.status_code == 200
    assert response.json()['status'] == 'running'


def test_health_endpoint(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.json()['database'] == 'ok'


def test_request_id_echoed(client):
    response = client.get('/', headers={'X-Request-ID': 'abc-123'})
    assert response.headers['X-Request-ID'] == 'abc-123'


class TestAuthRoutes:
    def test_register_duplicate(self, client, keys):
        response = client.post('/auth/register', json={'username': 'alice', 'password': 'x'})
        assert response.status_code == 400
        assert response.json()['code'] == 'USER_ALREADY_EXISTS'

    def test_login(self, client, keys):
        response = client.post('/auth/login', json={'username': 'alice', 'password': 'password123'})
        assert response.status_code == 200
        assert response.json()['api_key'].startswith('sd_')
        assert response.json()['username'] == 'alice'

    def test_login_bad_password(self, client, keys):
        response = client.post('/auth/login', json={'username': 'alice', 'password': 'wrong'})
        assert response.status_code == 401
        assert response.json()['code'] == 'INVALID_CREDENTIALS'

    def test_register_rejects_bad_username(self, client):
        response = client.post('/auth/register', json={'username': 'bob,carol', 'password': 'x'})
        assert response.status_code == 422

    def test_whoami(self, client, keys):
        response = client.get('/auth/me', headers=keys['bob'])
        assert response.status_code == 200
        assert response.json()['username'] == 'bob'

    def test_logout_revokes_key(self, client, keys):
        response = client.post('/auth/logout', headers=keys['bob'])
        assert response.status_code == 200
        assert response.json() == {'logged_out': True}

        response = client.get('/auth/me', headers=keys['bob'])
        assert response.status_code == 401
        assert client.get('/auth/me', headers=keys['alice']).status_code == 200

    def test_login_after_logout(self, client, keys):
        client.post('/auth/logout', headers=keys['bob'])
        response = client.post('/auth/login', json={'username': 'bob', 'password': 'password123'})
        headers = {'Authorization': f"Bearer {response.json()['api_key']}"}
        assert client.get('/auth/me', headers=headers).json()['username'] == 'bob'

    def test_missing_api_key(self, client):
        response = client.get('/files')
        assert response.status_code == 401
        assert response.json()['code'] == 'INVALID_API_KEY'


class TestFileRoutes:
    def test_upload(self, client, keys):
        response = _upload(client, keys['alice'])

        assert response.status_code == 201
        data = response.json()
        assert data['file_id'] == 'report.pdf'
        assert data['owner'] == 'alice'
        assert data['size'] == 12
        assert data['shared_to'] == []

    def test_upload_conflict(self, client, keys):
        _upload(client, keys['alice'])
        response = _upload(client, keys['bob'], content=b"other")
        assert response.status_code == 409
        assert response.json()['code'] == 'FILE_CONFLICT'

    def test_upload_too_large(self, client, keys, monkeypatch):
        monkeypatch.setattr("server.routes.file_routes.MAX_UPLOAD_BYTES", 4)
        response = _upload(client, keys['alice'])
        assert response.status_code == 413

    def test_upload_name_too_long(self, client, keys):
        response = _upload(client, keys['alice'], name="a" * 260 + ".txt")
        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_FILE_NAME'

    def test_download_round_trip(self, client, keys):
        _upload(client, keys['alice'])
        response = client.get('/files/report.pdf/download', headers=keys['alice'])

        assert response.status_code == 200
        assert response.content == REPORT
        assert 'report.pdf' in response.headers['content-disposition']

    def test_scenario(self, client, keys):
        _upload(client, keys['alice'])

        response = client.put('/files/report.pdf/shares', json={'users': ['bob']}, headers=keys['alice'])
        assert response.status_code == 200
        assert response.json()['shared_to'] == ['bob']

        assert client.get('/files/report.pdf/download', headers=keys['bob']).content == REPORT
        assert client.get('/files/report.pdf/download', headers=keys['carol']).status_code == 404

        response = client.post('/files/report.pdf/transfer', json={'new_owner': 'bob'}, headers=keys['alice'])
        assert response.status_code == 200
        assert response.json()['owner'] == 'bob'

        response = client.post('/files/report.pdf/transfer', json={'new_owner': 'carol'}, headers=keys['alice'])
        assert response.status_code == 404

        response = client.put('/files/report.pdf/shares', json={'users': ['carol']}, headers=keys['bob'])
        assert response.status_code == 200

        response = client.delete('/files/report.pdf', headers=keys['bob'])
        assert response.status_code == 200
        assert response.json() == {'file_id': 'report.pdf', 'deleted': True}

    def test_list_files(self, client, keys):
        _upload(client, keys['alice'])
        _upload(client, keys['bob'], name='bob.txt', content=b'bob')

        response = client.get('/files', headers=keys['alice'])
        assert [f['file_id'] for f in response.json()['files']] == ['report.pdf']

    def test_get_file_metadata(self, client, keys):
        _upload(client, keys['alice'])
        response = client.get('/files/report.pdf', headers=keys['alice'])
        assert response.status_code == 200
        assert response.json()['type'] == 'pdf'

    def test_revoke(self, client, keys):
        _upload(client, keys['alice'])
        client.put('/files/report.pdf/shares', json={'users': ['bob', 'carol']}, headers=keys['alice'])

        response = client.delete('/files/report.pdf/shares?users=bob', headers=keys['alice'])
        assert response.status_code == 200
        assert response.json()['shared_to'] == ['carol']

    def test_share_unknown_user(self, client, keys):
        _upload(client, keys['alice'])
        response = client.put('/files/report.pdf/shares', json={'users': ['ghost']}, headers=keys['alice'])
        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_TARGET'

    def test_missing_file(self, client, keys):
        response = client.delete('/files/nope.txt', headers=keys['alice'])
        assert response.status_code == 404
        assert response.json()['code'] == 'FILE_NOT_FOUND'


class TestForbiddenResponses:
    def test_concealed_as_not_found(self, client, keys):
        _upload(client, keys['alice'])

        forbidden = client.get('/files/report.pdf', headers=keys['bob'])
        missing = client.get('/files/other.pdf', headers=keys['bob'])

        assert forbidden.status_code == missing.status_code == 404
        assert forbidden.json()['code'] == missing.json()['code'] == 'FILE_NOT_FOUND'

    def test_explicit_forbidden(self, client, keys, monkeypatch):
        monkeypatch.setattr("server.config.CONCEAL_FORBIDDEN", False)
        _upload(client, keys['alice'])

        response = client.delete('/files/report.pdf', headers=keys['bob'])
        assert response.status_code == 403
        assert response.json()['code'] == 'FORBIDDEN'

    @pytest.mark.parametrize("method,path,kwargs", [
        ('post', '/files/{id}/transfer', {'json': {'new_owner': 'nobody'}}),
        ('put', '/files/{id}/shares', {'json': {'users': ['nobody']}}),
        ('delete', '/files/{id}/shares?users=nobody', {}),
    ])
    def test_access_checked_before_targets(self, client, keys, method, path, kwargs):
        _upload(client, keys['alice'])

        for file_id in ('report.pdf', 'absent.txt'):
            response = getattr(client, method)(path.format(id=file_id), headers=keys['carol'], **kwargs)
            assert response.status_code == 404
            assert response.json()['code'] == 'FILE_NOT_FOUND'

    def test_forbidden_before_unknown_target(self, client, keys, monkeypatch):
        monkeypatch.setattr("server.config.CONCEAL_FORBIDDEN", False)
        _upload(client, keys['alice'])

        response = client.post(
            '/files/report.pdf/transfer', json={'new_owner': 'nobody'}, headers=keys['carol']
        )
        assert response.status_code == 403
        assert response.json()['code'] == 'FORBIDDEN'

    def test_owner_still_gets_invalid_target(self, client, keys):
        _upload(client, keys['alice'])
        response = client.post(
            '/files/report.pdf/transfer', json={'new_owner': 'nobody'}, headers=keys['alice']
        )
        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_TARGET'
