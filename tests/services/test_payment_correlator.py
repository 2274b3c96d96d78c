# tests/services/test_payment_correlator.py

from decimal import Decimal

import pytest

from event_registration import crud
from event_registration.constants.notifications import NotificationType
from event_registration.constants.payment import PaymentStatus
from event_registration.constants.registration import RegistrationStatus
from event_registration.core.exceptions import (
    BankAccountNotFound,
    InvalidTransition,
    PaymentAlreadyLinked,
    PaymentNotFound,
)
from event_registration.schemas.payment import PaymentCreate
from event_registration.services.capacity_ledger import CapacityLedger
from event_registration.services.payment_correlator import PaymentCorrelator
from event_registration.services.registration_service import RegistrationService
from tests.utils.event import create_bank_account, create_random_event
from tests.utils.registration import queued_user_ids, registration_of


@pytest.fixture
def registrations(db, clock, published):
    return RegistrationService(db, clock=clock)


@pytest.fixture
def correlator(db, clock, published):
    return PaymentCorrelator(db, clock=clock)


@pytest.fixture
def paid_event(db):
    create_bank_account(db)
    return create_random_event(db, capacity=1, requires_payment=True, price=Decimal("300.00"))


def test_create_payment_uses_event_price_and_default_account(db, registrations, correlator, paid_event):
    outcome = registrations.register("user_a", paid_event.id)

    payment = correlator.create_payment(
        outcome.registration.id, PaymentCreate(), actor_id="user_a"
    )

    assert payment.amount == Decimal("300.00")
    assert payment.currency == "EUR"
    assert payment.status == PaymentStatus.PENDING
    assert payment.registration_id == outcome.registration.id
    assert payment.bank_account_id is not None
    assert len(payment.variable_symbol) == 10
    assert payment.variable_symbol.isdigit()


def test_create_payment_twice_is_already_linked(db, registrations, correlator, paid_event):
    outcome = registrations.register("user_a", paid_event.id)
    correlator.create_payment(outcome.registration.id, PaymentCreate(), actor_id="user_a")

    with pytest.raises(PaymentAlreadyLinked):
        correlator.create_payment(outcome.registration.id, PaymentCreate(), actor_id="user_a")


def test_create_payment_for_confirmed_registration_is_invalid(db, registrations, correlator):
    event = create_random_event(db, capacity=1)
    outcome = registrations.register("user_a", event.id)

    with pytest.raises(InvalidTransition):
        correlator.create_payment(outcome.registration.id, PaymentCreate(), actor_id="user_a")


def test_create_payment_with_unknown_bank_account(db, registrations, correlator, paid_event):
    outcome = registrations.register("user_a", paid_event.id)

    with pytest.raises(BankAccountNotFound):
        correlator.create_payment(
            outcome.registration.id,
            PaymentCreate(bank_account_id="bank_missing"),
            actor_id="user_a",
        )


def test_successful_payment_confirms_registration(db, registrations, correlator, paid_event, published):
    outcome = registrations.register("user_a", paid_event.id)
    payment = correlator.create_payment(outcome.registration.id, PaymentCreate(), actor_id="user_a")

    result = correlator.on_payment_status_change(payment.id, PaymentStatus.CONFIRMED)

    assert result.registration_action == "confirmed"
    assert result.registration.status == RegistrationStatus.CONFIRMED
    assert result.payment.paid_at is not None
    assert published[-1] == {
        "type": NotificationType.REGISTRATION_CONFIRMED,
        "userId": "user_a",
        "eventId": paid_event.id,
    }


def test_repeated_status_is_noop(db, registrations, correlator, paid_event):
    outcome = registrations.register("user_a", paid_event.id)
    payment = correlator.create_payment(outcome.registration.id, PaymentCreate(), actor_id="user_a")
    correlator.on_payment_status_change(payment.id, PaymentStatus.CONFIRMED)

    again = correlator.on_payment_status_change(payment.id, PaymentStatus.CONFIRMED)

    assert again.registration_action is None
    assert again.registration.status == RegistrationStatus.CONFIRMED
    history = registrations.history(outcome.registration.id)
    assert len(history) == 2


def test_scenario_failed_payment_promotes_next_to_pending(
    db, registrations, correlator, paid_event, clock, published
):
    a = registrations.register("user_a", paid_event.id)
    assert a.registration.status == RegistrationStatus.PENDING
    assert CapacityLedger(db).available_slots(paid_event.id) == 0

    clock.advance(seconds=1)
    b = registrations.register("user_b", paid_event.id)
    assert b.waitlisted

    payment = correlator.create_payment(a.registration.id, PaymentCreate(), actor_id="user_a")
    clock.advance(days=1)
    result = correlator.on_payment_status_change(payment.id, PaymentStatus.FAILED)

    assert result.registration_action == "cancelled"
    assert result.registration.status == RegistrationStatus.CANCELLED
    assert result.promoted.user_id == "user_b"
    assert result.promoted.status == RegistrationStatus.PENDING
    # user_b's pending registration holds the seat.
    assert CapacityLedger(db).available_slots(paid_event.id) == 0
    assert queued_user_ids(db, paid_event.id) == []
    assert published[-1]["type"] == NotificationType.WAITLIST_PROMOTED


def test_refund_cancels_confirmed_registration(db, registrations, correlator, paid_event):
    outcome = registrations.register("user_a", paid_event.id)
    payment = correlator.create_payment(outcome.registration.id, PaymentCreate(), actor_id="user_a")
    correlator.on_payment_status_change(payment.id, PaymentStatus.CONFIRMED)

    result = correlator.on_payment_status_change(payment.id, PaymentStatus.REFUNDED)

    assert result.registration_action == "cancelled"
    assert registration_of(db, paid_event.id, "user_a").status == RegistrationStatus.CANCELLED.value


def test_settled_payment_cannot_fail(db, registrations, correlator, paid_event):
    outcome = registrations.register("user_a", paid_event.id)
    payment = correlator.create_payment(outcome.registration.id, PaymentCreate(), actor_id="user_a")
    correlator.on_payment_status_change(payment.id, PaymentStatus.CONFIRMED)

    with pytest.raises(InvalidTransition):
        correlator.on_payment_status_change(payment.id, PaymentStatus.FAILED)

    assert registration_of(db, paid_event.id, "user_a").status == RegistrationStatus.CONFIRMED.value


def test_unknown_payment(correlator):
    with pytest.raises(PaymentNotFound):
        correlator.on_payment_status_change("pay_missing", PaymentStatus.CONFIRMED)


def test_link_paid_payment_confirms_pending_registration(db, registrations, correlator, paid_event, clock):
    outcome = registrations.register("user_a", paid_event.id)
    payment = crud.payment.create(
        db, user_id="user_a", amount=Decimal("300.00"), currency="EUR", now=clock()
    )
    crud.payment.set_status(db, db_obj=payment, status=PaymentStatus.CONFIRMED, now=clock())
    db.commit()

    result = correlator.link_payment(outcome.registration.id, payment.id)

    assert result.registration_action == "confirmed"
    assert result.registration.status == RegistrationStatus.CONFIRMED


def test_link_second_payment_is_rejected(db, registrations, correlator, paid_event, clock):
    outcome = registrations.register("user_a", paid_event.id)
    correlator.create_payment(outcome.registration.id, PaymentCreate(), actor_id="user_a")
    other = crud.payment.create(
        db, user_id="user_a", amount=Decimal("300.00"), currency="EUR", now=clock()
    )
    db.commit()

    with pytest.raises(PaymentAlreadyLinked):
        correlator.link_payment(outcome.registration.id, other.id)


@pytest.mark.parametrize(
    "owner, amount, other_event",
    [
        ("user_b", Decimal("300.00"), False),
        ("user_a", Decimal("1.00"), False),
        ("user_a", Decimal("300.00"), True),
    ],
)
def test_link_rejects_payment_that_does_not_match(
    db, registrations, correlator, paid_event, clock, owner, amount, other_event
):
    outcome = registrations.register("user_a", paid_event.id)
    event_id = create_random_event(db, capacity=5).id if other_event else None
    payment = crud.payment.create(
        db, user_id=owner, amount=amount, currency="EUR", event_id=event_id, now=clock()
    )
    crud.payment.set_status(db, db_obj=payment, status=PaymentStatus.CONFIRMED, now=clock())
    db.commit()

    with pytest.raises(InvalidTransition):
        correlator.link_payment(outcome.registration.id, payment.id)

    assert registration_of(db, paid_event.id, "user_a").status == RegistrationStatus.PENDING.value
    assert crud.payment.get_by_registration(db, registration_id=outcome.registration.id) is None


def test_link_rejects_failed_payment(db, registrations, correlator, paid_event, clock):
    outcome = registrations.register("user_a", paid_event.id)
    payment = crud.payment.create(
        db, user_id="user_a", amount=Decimal("300.00"), currency="EUR", now=clock()
    )
    crud.payment.set_status(db, db_obj=payment, status=PaymentStatus.FAILED, now=clock())
    db.commit()

    with pytest.raises(InvalidTransition):
        correlator.link_payment(outcome.registration.id, payment.id)

    # The registration can still get a fresh payment.
    fresh = correlator.create_payment(outcome.registration.id, PaymentCreate(), actor_id="user_a")
    assert fresh.registration_id == outcome.registration.id


def test_reregistration_starts_without_old_payment(db, registrations, correlator, paid_event, clock):
    first = registrations.register("user_a", paid_event.id)
    payment = correlator.create_payment(first.registration.id, PaymentCreate(), actor_id="user_a")
    correlator.on_payment_status_change(payment.id, PaymentStatus.CANCELLED)

    clock.advance(hours=1)
    again = registrations.register("user_a", paid_event.id)

    assert again.registration.status == RegistrationStatus.PENDING
    assert crud.payment.get_by_registration(db, registration_id=again.registration.id) is None
    fresh = correlator.create_payment(again.registration.id, PaymentCreate(), actor_id="user_a")
    assert fresh.id != payment.id
