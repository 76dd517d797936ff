import os

# Settings are read at import time, so the environment must be in place first
os.environ['SECRET_KEY'] = 'test-secret-key'
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['RAZORPAY_KEY_ID'] = 'rzp_test_key_id'
os.environ['RAZORPAY_KEY_SECRET'] = 'test_key_secret'
os.environ['LOG_LEVEL'] = 'WARNING'

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from src.admin.schemas import SettingsUpdate  # noqa: E402
from src.admin.settings_service import SettingsService  # noqa: E402
from src.auth.schemas import AdminCreate  # noqa: E402
from src.auth.service import AdminUserService  # noqa: E402
from src.buses.schemas import BusCreate, RouteStopCreate  # noqa: E402
from src.buses.service import BusService  # noqa: E402
from src.database import Base, build_engine, get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.payments.gateway import PaymentBridge, get_payment_bridge  # noqa: E402

TEST_KEY_ID = 'rzp_test_key_id'
TEST_KEY_SECRET = 'test_key_secret'
ADMIN_USERNAME = 'admin'
ADMIN_PASSWORD = 'admin-password'
API = '/api'


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f'sqlite:///{tmp_path / "bus_pass_test.db"}')
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def gateway_requests():
    """Requests the stub gateway received"""
    return []


@pytest.fixture
def gateway_handler():
    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={'id': 'order_TEST123', 'amount': 50000, 'currency': 'INR', 'status': 'created'},
        )

    return _handler


@pytest.fixture
def payment_bridge(gateway_handler, gateway_requests):
    def _recording_handler(request: httpx.Request) -> httpx.Response:
        gateway_requests.append(request)
        return gateway_handler(request)

    return PaymentBridge(
        key_id=TEST_KEY_ID,
        key_secret=TEST_KEY_SECRET,
        api_url='https://gateway.test/v1',
        transport=httpx.MockTransport(_recording_handler),
    )


@pytest.fixture
def client(session_factory, payment_bridge):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_bridge] = lambda: payment_bridge
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture
def make_bus(db):
    def _make_bus(route_code='R1', total_seats=10, stops=(), is_active=True, name=None):
        return BusService(db).create_bus(
            BusCreate(
                name=name or f'Bus {route_code}',
                route_code=route_code,
                total_seats=total_seats,
                is_active=is_active,
                stops=[RouteStopCreate(name=stop, fare=100000) for stop in stops],
            )
        )

    return _make_bus


@pytest.fixture
def open_booking(db):
    SettingsService(db).update_settings(SettingsUpdate(booking_enabled=True))


@pytest.fixture
def admin_headers(client, db):
    AdminUserService.create_admin(db, AdminCreate(username=ADMIN_USERNAME, password=ADMIN_PASSWORD))
    response = client.post(
        f'{API}/admin/login', json={'username': ADMIN_USERNAME, 'password': ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    return {'Authorization': f'Bearer {response.json()["access_token"]}'}


def booking_payload(**overrides):
    payload = {
        'studentName': 'Asha Menon',
        'admissionNumber': '24CS094',
        'busRoute': 'R1',
        'destination': 'Market Square',
        'paymentStatus': False,
    }
    payload.update(overrides)
    return payload
