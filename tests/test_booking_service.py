from datetime import date, datetime

import pytest

from src.admin.schemas import SettingsUpdate
from src.admin.settings_service import SettingsService
from src.bookings.booking_service import BookingService
from src.buses.inventory import InventoryGuard
from src.exceptions import (
    BookingClosedError,
    ConflictError,
    InventoryExhaustedError,
    NotFoundError,
    PersistenceError,
    StoreUnavailableError,
    ValidationError,
)
from src.models import Booking, SeatReconciliation
from src.payments.schemas import PaymentProof


def book(service, **overrides):
    fields = {
        'student_name': 'Asha Menon',
        'admission_number': '24CS094',
        'route_code': 'R1',
        'destination': 'Market Square',
    }
    fields.update(overrides)
    return service.create_booking(**fields)


@pytest.fixture
def service(db, payment_bridge):
    return BookingService(db, payment_bridge=payment_bridge)


def current_bookings(db):
    db.expire_all()
    return SettingsService(db).load().current_bookings


def test_last_seat_goes_to_first_request(db, service, make_bus, open_booking):
    make_bus('R1', total_seats=1)

    first = book(service)
    assert first.id is not None
    assert first.payment_status is False
    assert InventoryGuard(db).available_seats('R1') == 0

    with pytest.raises(InventoryExhaustedError) as exc_info:
        book(service, admission_number='24CS095', student_name='Ravi Kumar')

    assert exc_info.value.message == 'No seats available for this route'
    assert exc_info.value.status_code == 400
    assert db.query(Booking).count() == 1
    assert InventoryGuard(db).available_seats('R1') == 0
    assert current_bookings(db) == 1


def test_booking_closed_changes_nothing(db, service, make_bus):
    make_bus('R1', total_seats=5)

    with pytest.raises(BookingClosedError) as exc_info:
        book(service)

    assert exc_info.value.status_code == 403
    assert db.query(Booking).count() == 0
    assert InventoryGuard(db).available_seats('R1') == 5


def test_unknown_route_is_not_found(db, service, open_booking):
    with pytest.raises(NotFoundError):
        book(service, route_code='R9')

    assert db.query(Booking).count() == 0


def test_route_without_bus_is_not_bookable(db, service, open_booking):
    SettingsService(db).update_settings(SettingsUpdate(bus_availability={'R9': 3}))

    with pytest.raises(NotFoundError):
        book(service, route_code='R9')

    assert InventoryGuard(db).available_seats('R9') == 3
    assert db.query(Booking).count() == 0


def test_create_then_delete_round_trip_after_seat_override(db, service, make_bus, open_booking):
    make_bus('R1', total_seats=10)
    SettingsService(db).update_settings(SettingsUpdate(bus_availability={'R1': 3}))

    booking = book(service)
    assert InventoryGuard(db).available_seats('R1') == 2

    service.delete_booking(booking.id)

    assert InventoryGuard(db).available_seats('R1') == 3
    assert db.query(SeatReconciliation).count() == 0


def test_student_booking_lookup_checks_admission_number(db, service, make_bus, open_booking):
    make_bus('R1', total_seats=10)
    booking = book(service)

    assert service.get_student_booking(booking.id, ' 24cs094 ').id == booking.id
    with pytest.raises(NotFoundError):
        service.get_student_booking(booking.id, '24CS095')


def test_destination_must_be_a_stop(db, service, make_bus, open_booking):
    make_bus('R1', total_seats=5, stops=['Market Square', 'City Centre'])

    with pytest.raises(ValidationError):
        book(service, destination='Airport')

    booking = book(service, destination='market square')
    assert booking.destination == 'market square'
    assert InventoryGuard(db).available_seats('R1') == 4


def test_inactive_bus_rejects_bookings(db, service, make_bus, open_booking):
    make_bus('R1', total_seats=5, is_active=False)

    with pytest.raises(ValidationError):
        book(service)

    assert InventoryGuard(db).available_seats('R1') == 5


@pytest.mark.parametrize(
    'overrides',
    [
        {'student_name': 'A'},
        {'student_name': 'R2 D2'},
        {'admission_number': '24cs094'},
        {'admission_number': '24CS09'},
        {'admission_number': '24CS0945'},
        {'destination': ''},
        {'route_code': ''},
    ],
)
def test_invalid_fields_are_rejected_before_reserving(db, service, make_bus, open_booking, overrides):
    make_bus('R1', total_seats=5)

    with pytest.raises(ValidationError):
        book(service, **overrides)

    assert InventoryGuard(db).available_seats('R1') == 5
    assert db.query(Booking).count() == 0


def test_delete_restores_seat_and_counter(db, service, make_bus, open_booking):
    make_bus('R1', total_seats=3)
    booking = book(service)
    assert current_bookings(db) == 1

    service.delete_booking(booking.id)

    assert db.query(Booking).count() == 0
    assert InventoryGuard(db).available_seats('R1') == 3
    assert current_bookings(db) == 0
    assert db.query(SeatReconciliation).count() == 0


def test_delete_missing_booking_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.delete_booking(12345)


def test_failed_release_after_delete_is_flagged(db, service, make_bus, open_booking, monkeypatch):
    make_bus('R1', total_seats=3)
    booking = book(service)
    booking_id = booking.id

    def unavailable(route_code):
        raise StoreUnavailableError()

    monkeypatch.setattr(service.guard, 'release_seat', unavailable)
    service.delete_booking(booking_id)

    assert db.query(Booking).count() == 0
    assert InventoryGuard(db).available_seats('R1') == 2

    flagged = db.query(SeatReconciliation).one()
    assert flagged.bus_route == 'R1'
    assert flagged.booking_id == booking_id
    assert flagged.resolved is False


def test_failed_persist_releases_reserved_seat(db, service, make_bus):
    make_bus('R1', total_seats=2)

    def broken_persist():
        raise RuntimeError('disk full')

    with pytest.raises(PersistenceError) as exc_info:
        service.compensation.reserve_then_persist('R1', broken_persist)

    assert exc_info.value.message == 'Failed to create booking'
    assert InventoryGuard(db).available_seats('R1') == 2
    assert db.query(SeatReconciliation).count() == 0


def test_failed_persist_keeps_domain_errors(db, service, make_bus):
    make_bus('R1', total_seats=2)

    def rejected_persist():
        raise ValidationError('Destination is required')

    with pytest.raises(ValidationError):
        service.compensation.reserve_then_persist('R1', rejected_persist)

    assert InventoryGuard(db).available_seats('R1') == 2


def test_sold_out_route_never_runs_persist(db, service, make_bus):
    make_bus('R1', total_seats=0)
    calls = []

    with pytest.raises(InventoryExhaustedError):
        service.compensation.reserve_then_persist('R1', lambda: calls.append('persist'))

    assert calls == []


def test_update_payment_status_is_idempotent(db, service, make_bus, open_booking):
    make_bus('R1', total_seats=3)
    booking = book(service)

    once = service.update_payment_status(booking.id, True)
    twice = service.update_payment_status(booking.id, True)

    assert once.payment_status is True
    assert twice.payment_status is True
    assert InventoryGuard(db).available_seats('R1') == 2


def test_verified_payment_marks_booking_paid(db, service, payment_bridge, make_bus, open_booking):
    make_bus('R1', total_seats=3)
    proof = PaymentProof(
        order_id='order_TEST123',
        payment_id='pay_TEST456',
        signature=payment_bridge.sign('order_TEST123', 'pay_TEST456'),
    )

    booking = book(service, payment=proof)

    assert booking.payment_status is True
    assert booking.payment_reference == 'pay_TEST456'


def test_tampered_payment_is_rejected_before_reserving(db, service, payment_bridge, make_bus, open_booking):
    make_bus('R1', total_seats=3)
    signature = payment_bridge.sign('order_TEST123', 'pay_TEST456')
    tampered = ('0' if signature[0] != '0' else '1') + signature[1:]
    proof = PaymentProof(order_id='order_TEST123', payment_id='pay_TEST456', signature=tampered)

    with pytest.raises(ValidationError):
        book(service, payment=proof)

    assert InventoryGuard(db).available_seats('R1') == 3
    assert db.query(Booking).count() == 0


def test_payment_cannot_pay_for_two_bookings(db, service, payment_bridge, make_bus, open_booking):
    make_bus('R1', total_seats=3)
    proof = PaymentProof(
        order_id='order_1',
        payment_id='pay_1',
        signature=payment_bridge.sign('order_1', 'pay_1'),
    )
    book(service, payment=proof)

    with pytest.raises(ConflictError) as exc_info:
        book(service, admission_number='24CS095', payment=proof)

    assert exc_info.value.status_code == 409
    assert db.query(Booking).count() == 1
    assert InventoryGuard(db).available_seats('R1') == 2


def test_concurrent_payment_reuse_releases_seat(db, service, payment_bridge, make_bus, open_booking, monkeypatch):
    make_bus('R1', total_seats=3)
    proof = PaymentProof(
        order_id='order_1',
        payment_id='pay_1',
        signature=payment_bridge.sign('order_1', 'pay_1'),
    )
    book(service, payment=proof)
    # Both requests pass the lookup; the unique column decides
    monkeypatch.setattr(service, '_ensure_payment_unused', lambda payment_id: None)

    with pytest.raises(ConflictError):
        book(service, admission_number='24CS095', payment=proof)

    assert db.query(Booking).count() == 1
    assert InventoryGuard(db).available_seats('R1') == 2
    assert current_bookings(db) == 1


def test_list_bookings_filters_and_paginates(db, service, make_bus, open_booking):
    make_bus('R1', total_seats=10)
    make_bus('R2', total_seats=10)
    book(service, created_at=datetime(2025, 1, 10, 9, 0))
    book(service, admission_number='24CS095', created_at=datetime(2025, 1, 11, 9, 0))
    book(service, route_code='R2', admission_number='24ME001', created_at=datetime(2025, 1, 12, 9, 0))
    paid = book(service, route_code='R2', admission_number='24ME002', created_at=datetime(2025, 1, 13, 9, 0))
    service.update_payment_status(paid.id, True)

    bookings, total = service.list_bookings(page=1, limit=3)
    assert total == 4
    assert [b.admission_number for b in bookings] == ['24ME002', '24ME001', '24CS095']

    bookings, total = service.list_bookings(page=2, limit=3)
    assert [b.admission_number for b in bookings] == ['24CS094']

    bookings, total = service.list_bookings(bus_route='R1')
    assert total == 2

    bookings, total = service.list_bookings(payment_status=True)
    assert [b.id for b in bookings] == [paid.id]

    bookings, total = service.list_bookings(start_date=date(2025, 1, 11), end_date=date(2025, 1, 12))
    assert sorted(b.admission_number for b in bookings) == ['24CS095', '24ME001']


def test_booking_stats(db, service, make_bus, open_booking):
    make_bus('R1', total_seats=10)
    make_bus('R2', total_seats=10)
    first = book(service)
    book(service, admission_number='24CS095')
    book(service, route_code='R2', admission_number='24ME001', created_at=datetime(2020, 1, 1))
    service.update_payment_status(first.id, True)

    stats = service.get_booking_stats()

    assert stats['total_bookings'] == 3
    assert stats['paid_bookings'] == 1
    assert stats['pending_bookings'] == 2
    assert stats['recent_bookings'] == 2
    assert stats['route_stats'] == [{'route': 'R1', 'count': 2}, {'route': 'R2', 'count': 1}]
