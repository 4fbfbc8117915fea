import json
import os
import tempfile

# logs of the test run go to a throwaway directory
os.environ.setdefault('POS_LOGS_DIR', tempfile.mkdtemp(prefix='pos_console_logs_'))

import httpx
import pytest

from pos_console import performance_logger
from pos_console.app_container import AppContainer
from pos_console.repositories import (
    AuthRepository,
    CatalogRepository,
    TransactionRepository,
    create_http_client,
)
from pos_console.services import (
    CartService,
    EnrichmentService,
    PayloadService,
    PricingService,
    SearchService,
    TransactionService,
    ValidationService,
)


BACKEND_URL = 'http://backend.test'


class FakeBackend:
    """In-memory REST backend served through httpx.MockTransport."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, method, path, status=200, json_body=None, text=None):
        self.routes[(method, path)] = (status, json_body, text)

    def handler(self, request):
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, text='Not Found')
        status, json_body, text = route
        if callable(json_body):
            json_body = json_body(request)
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=json_body)

    def transport(self):
        return httpx.MockTransport(self.handler)

    def client(self):
        return create_http_client(BACKEND_URL, self.transport())

    def calls(self, method, path):
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def last_json(self, method, path):
        return json.loads(self.calls(method, path)[-1].content)


class FakeTimer:
    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function()


class FakeTimerFactory:
    def __init__(self):
        self.created = []

    def __call__(self, interval, function):
        timer = FakeTimer(interval, function)
        self.created.append(timer)
        return timer

    @property
    def live(self):
        return [t for t in self.created if t.started and not t.cancelled]


@pytest.fixture(autouse=True)
def log_files(tmp_path, monkeypatch):
    monkeypatch.setattr(performance_logger, 'ERRORS_LOG', str(tmp_path / 'errors.log'))
    monkeypatch.setattr(performance_logger, 'PERFORMANCE_LOG', str(tmp_path / 'performance.log'))
    monkeypatch.setattr(performance_logger, 'SLOW_ROUTES_LOG', str(tmp_path / 'slow_routes.log'))
    monkeypatch.setattr(performance_logger, 'SLOW_FUNCTIONS_LOG', str(tmp_path / 'slow_functions.log'))
    return tmp_path


@pytest.fixture
def errors_log(log_files):
    def read():
        path = log_files / 'errors.log'
        return path.read_text(encoding='utf-8') if path.exists() else ''
    return read


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def catalog_repo(backend):
    return CatalogRepository(backend.client(), lambda: 'test-token')


@pytest.fixture
def transaction_repo(backend):
    return TransactionRepository(backend.client(), lambda: 'test-token')


@pytest.fixture
def auth_repo(backend):
    return AuthRepository(backend.client())


@pytest.fixture
def timers():
    return FakeTimerFactory()


@pytest.fixture
def pricing():
    return PricingService()


@pytest.fixture
def validation(pricing):
    return ValidationService(pricing)


@pytest.fixture
def search(catalog_repo, timers):
    return SearchService(catalog_repo, debounce_ms=500, min_chars=2, timer_factory=timers)


@pytest.fixture
def storage():
    return {}


@pytest.fixture
def cart(pricing, search, storage):
    return CartService(pricing, lambda: search, storage=storage)


@pytest.fixture
def transactions(catalog_repo, transaction_repo, validation):
    return TransactionService(
        catalog_repo,
        transaction_repo,
        validation,
        PayloadService(),
        EnrichmentService()
    )


@pytest.fixture
def app(backend):
    AppContainer.reset_instance()
    AppContainer(base_url=BACKEND_URL, transport=backend.transport())

    from pos_console.main import app as flask_app
    flask_app.config['TESTING'] = True
    yield flask_app

    AppContainer.reset_instance()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def logged_client(client):
    def login(role='admin', user_id=1):
        with client.session_transaction() as sess:
            sess['token'] = 'test-token'
            sess['user'] = 'tester'
            sess['user_id'] = user_id
            sess['role'] = role
        return client
    return login
