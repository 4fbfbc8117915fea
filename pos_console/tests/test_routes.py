from pos_console.app_container import get_container


CANDIDATE = {
    'id': 10,
    'productId': 100,
    'productName': 'Coca Cola 400ml',
    'productSku': 'COC-400',
    'stockQuantity': 7,
    'price': 2500,
    'fromCatalog': False,
}


def build_sale(client):
    assert client.post('/api/borrador/punto-venta', json={'pointOfSaleId': 1}).status_code == 200
    r = client.post('/api/borrador/campos', json={'paymentMethod': 'cash', 'remarks': 'venta mostrador'})
    assert r.status_code == 200
    r = client.post('/api/borrador/items', json={'candidate': CANDIDATE, 'quantity': 2})
    assert r.status_code == 200
    return r.get_json()


def test_api_requires_login(client):
    r = client.get('/api/borrador')
    assert r.status_code == 401
    assert r.get_json()['ok'] is False


def test_login_stores_token_and_role(client, backend):
    backend.on('POST', '/auth/login', json_body={
        'user': {'id': 1, 'username': 'admin', 'role': 'admin'},
        'token': 'abc.def.ghi',
    })

    r = client.post('/login', json={'username': 'admin', 'password': 'secret'})

    assert r.status_code == 200
    assert r.get_json()['user']['role'] == 'admin'
    with client.session_transaction() as sess:
        assert sess['token'] == 'abc.def.ghi'

    r = client.get('/api/borrador')
    assert r.status_code == 200
    assert len(r.get_json()['tipos']) == 4


def test_login_rejected(client, backend):
    backend.on('POST', '/auth/login', status=400, json_body={'message': 'Invalid credentials'})

    r = client.post('/login', json={'username': 'admin', 'password': 'mala'})

    assert r.status_code == 401
    with client.session_transaction() as sess:
        assert 'token' not in sess


def test_regular_user_only_sees_sale_and_adjustment(logged_client):
    client = logged_client(role='user')

    tipos = [t['value'] for t in client.get('/api/borrador').get_json()['tipos']]
    assert tipos == ['sale', 'adjustment']

    r = client.post('/api/borrador/tipo', json={'transactionType': 'restock'})
    assert r.status_code == 400


def test_build_and_submit_sale(logged_client, backend):
    client = logged_client()
    backend.on('POST', '/inventory-transaction/bulk', status=201, json_body={'id': 55})

    data = build_sale(client)
    assert data['borrador']['totales']['total_formatted'] == '$ 5.000'

    r = client.post('/api/borrador/confirmar')

    assert r.status_code == 200
    assert r.get_json()['ok'] is True
    sent = backend.last_json('POST', '/inventory-transaction/bulk')
    assert sent == {
        'transactionType': 'sale',
        'remarks': 'venta mostrador',
        'items': [{'inventoryId': 10, 'quantity': 2}],
        'discount': 0.0,
        'paymentMethod': 'cash',
    }
    assert backend.calls('POST', '/inventory-transaction/bulk')[0].headers['Authorization'] == 'Bearer test-token'
    assert client.get('/api/borrador').get_json()['borrador']['items'] == []


def test_submit_with_errors_returns_fields(logged_client, backend):
    client = logged_client()

    r = client.post('/api/borrador/confirmar')

    assert r.status_code == 400
    errors = r.get_json()['errors']
    assert {'pointOfSaleId', 'remarks', 'items', 'paymentMethod'} <= set(errors)
    assert backend.requests == []


def test_backend_rejection_keeps_draft(logged_client, backend):
    client = logged_client()
    backend.on('POST', '/inventory-transaction/bulk', status=400, text='Stock insuficiente')
    build_sale(client)

    r = client.post('/api/borrador/confirmar')

    assert r.status_code == 502
    assert r.get_json()['error'] == 'Error 400: Stock insuficiente'
    assert len(client.get('/api/borrador').get_json()['borrador']['items']) == 1


def test_quantity_update_and_remove(logged_client):
    client = logged_client()
    build_sale(client)

    r = client.post('/api/borrador/items/cantidad', json={'key': 'inventory:10', 'quantity': 5})
    assert r.get_json()['borrador']['items'][0]['quantity'] == 5

    r = client.post('/api/borrador/items/eliminar', json={'key': 'inventory:10'})
    assert r.get_json()['borrador']['items'] == []


def test_search_echoes_client_sequence(logged_client, backend):
    client = logged_client()
    backend.on('GET', '/point-of-sale/1/inventory/search', json_body=[
        {'id': 10, 'productId': 100, 'product': {'id': 100, 'name': 'Coca Cola', 'sku': 'COC'}},
    ])
    client.post('/api/borrador/punto-venta', json={'pointOfSaleId': 1})

    r = client.get('/api/buscar?q=coca&seq=7')

    data = r.get_json()
    assert data['seq'] == 7
    assert data['stale'] is False
    assert data['resultados'][0]['productName'] == 'Coca Cola'


def test_expired_token_clears_session(logged_client, backend):
    client = logged_client()
    backend.on('GET', '/point-of-sale', status=401, text='jwt expired')

    r = client.get('/api/puntos-venta')

    assert r.status_code == 401
    assert r.get_json()['error'] == 'Sesión expirada. Por favor, inicia sesión nuevamente.'
    assert client.get('/api/borrador').status_code == 401


def test_transaction_listing_filters(logged_client, backend):
    client = logged_client()
    backend.on('GET', '/inventory-transaction', json_body=[
        {'id': 1, 'transactionType': 'sale', 'inventoryId': 10, 'quantity': 1, 'remarks': 'venta'},
        {'id': 2, 'transactionType': 'adjustment', 'inventoryId': 10, 'quantity': -1, 'remarks': 'merma'},
    ])
    backend.on('GET', '/product', json_body=[{'id': 100, 'name': 'Coca Cola', 'sku': 'COC'}])
    backend.on('GET', '/point-of-sale', json_body=[{'id': 1, 'name': 'Centro'}])
    backend.on('GET', '/users', json_body=[])
    backend.on('GET', '/inventory', json_body=[{'id': 10, 'productId': 100, 'pointOfSaleId': 1}])

    r = client.get('/api/transacciones?tipo=adjustment&periodo=custom&inicio=2024-01-01&fin=2024-01-31')

    data = r.get_json()
    assert r.status_code == 200
    assert [t['id'] for t in data['transacciones']] == [2]
    assert data['transacciones'][0]['productName'] == 'Coca Cola'
    assert data['resumen']['totalTransactions'] == 1
    assert data['rango'] == {'startDate': '2024-01-01', 'endDate': '2024-01-31'}
    params = backend.calls('GET', '/inventory-transaction')[0].url.params
    assert params['startDate'] == '2024-01-01'


def test_sessions_search_independently(app, logged_client, backend):
    backend.on('GET', '/point-of-sale/1/inventory/search', json_body=[
        {'id': 10, 'productId': 100, 'product': {'id': 100, 'name': 'Coca Cola', 'sku': 'COC'}},
    ])
    backend.on('GET', '/point-of-sale/2/inventory/search', json_body=[
        {'id': 20, 'productId': 200, 'product': {'id': 200, 'name': 'Agua', 'sku': 'AGU'}},
    ])
    first = logged_client()
    second = app.test_client()
    with second.session_transaction() as sess:
        sess['token'] = 'test-token'
        sess['user'] = 'cajero'
        sess['user_id'] = 2
        sess['role'] = 'user'

    first.post('/api/borrador/punto-venta', json={'pointOfSaleId': 1})
    second.post('/api/borrador/punto-venta', json={'pointOfSaleId': 2})

    r1 = first.get('/api/buscar?q=coca&seq=1').get_json()
    r2 = second.get('/api/buscar?q=agua&seq=1').get_json()

    assert r1['resultados'][0]['productName'] == 'Coca Cola'
    assert r2['resultados'][0]['productName'] == 'Agua'
    registry = get_container().search_registry
    assert len(registry) == 2

    first.post('/logout')
    assert len(registry) == 1
