import base64
import json

import pytest

from pos_console.exceptions import ApiError, AuthenticationExpiredError
from pos_console.repositories import as_list, decode_token_role


def make_token(payload):
    body = base64.urlsafe_b64encode(json.dumps(payload).encode()).decode().rstrip('=')
    return f'header.{body}.firma'


def test_as_list_accepts_wrapped_collections():
    assert as_list([{'id': 1}]) == [{'id': 1}]
    assert as_list({'data': [{'id': 2}]}) == [{'id': 2}]
    assert as_list({'items': [{'id': 3}]}) == [{'id': 3}]
    assert as_list(None) == []
    assert as_list({'message': 'ok'}) == []


def test_decode_token_role():
    assert decode_token_role(make_token({'sub': 1, 'role': 'admin'})) == 'admin'
    assert decode_token_role('no-es-un-jwt') is None
    assert decode_token_role(None) is None


def test_requests_carry_bearer_token(catalog_repo, backend):
    backend.on('GET', '/users', json_body=[{'id': 9}])

    assert catalog_repo.list_users() == [{'id': 9}]
    assert backend.calls('GET', '/users')[0].headers['Authorization'] == 'Bearer test-token'


def test_non_success_raises_api_error_with_body(catalog_repo, backend):
    backend.on('GET', '/product', status=503, text='mantenimiento')

    with pytest.raises(ApiError) as exc:
        catalog_repo.list_products()

    assert exc.value.status == 503
    assert exc.value.body == 'mantenimiento'


def test_unauthorized_raises_expired(catalog_repo, backend):
    backend.on('GET', '/inventory', status=401, text='jwt expired')

    with pytest.raises(AuthenticationExpiredError):
        catalog_repo.list_inventories()


def test_transaction_listing_omits_partial_date_range(transaction_repo, backend):
    backend.on('GET', '/inventory-transaction', json_body=[])

    transaction_repo.list_transactions(start_date='2024-01-01')

    assert 'startDate' not in backend.calls('GET', '/inventory-transaction')[0].url.params


def test_login_requires_token(auth_repo, backend):
    backend.on('POST', '/auth/login', json_body={'user': {'id': 1}})

    with pytest.raises(ApiError):
        auth_repo.login('admin', 'secret')

    assert backend.last_json('POST', '/auth/login') == {'username': 'admin', 'password': 'secret'}
