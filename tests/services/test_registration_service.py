# tests/services/test_registration_service.py

import pytest

from event_registration import crud
from event_registration.constants.notifications import NotificationType
from event_registration.constants.registration import HistoryAction, RegistrationStatus
from event_registration.core.exceptions import (
    DuplicateRegistration,
    EventNotFound,
    InvalidTransition,
    RegistrationNotFound,
)
from event_registration.services.registration_service import RegistrationService
from tests.utils.event import create_random_event
from tests.utils.registration import count_status, queued_user_ids, registration_of


@pytest.fixture
def service(db, clock, published):
    return RegistrationService(db, clock=clock)


def test_register_confirms_immediately_without_payment(db, service, published):
    event = create_random_event(db, capacity=5)

    outcome = service.register("user_a", event.id)

    assert outcome.result == "registered"
    assert outcome.registration.status == RegistrationStatus.CONFIRMED
    assert outcome.registration.confirmed_at is not None
    assert published == [
        {"type": NotificationType.REGISTRATION_CONFIRMED, "userId": "user_a", "eventId": event.id}
    ]


def test_register_is_pending_when_payment_required(db, service, published):
    event = create_random_event(db, capacity=5, requires_payment=True)

    outcome = service.register("user_a", event.id)

    assert outcome.registration.status == RegistrationStatus.PENDING
    assert outcome.registration.confirmed_at is None
    # Nothing is confirmed yet, so nobody is told so.
    assert published == []


def test_register_unknown_event(service):
    with pytest.raises(EventNotFound):
        service.register("user_a", "evt_missing")


def test_scenario_capacity_two_cancel_promotes_waiter(db, service, clock, published):
    event = create_random_event(db, capacity=2)

    a = service.register("user_a", event.id)
    clock.advance(seconds=1)
    b = service.register("user_b", event.id)
    clock.advance(seconds=1)
    c = service.register("user_c", event.id)

    assert a.registration.status == RegistrationStatus.CONFIRMED
    assert b.registration.status == RegistrationStatus.CONFIRMED
    assert c.waitlisted
    assert c.registration is None
    assert c.waitlist_entry.position == 1
    assert registration_of(db, event.id, "user_c") is None

    clock.advance(minutes=5)
    outcome = service.cancel(a.registration.id, actor_id="user_a")

    assert outcome.registration.status == RegistrationStatus.CANCELLED
    assert outcome.promoted.user_id == "user_c"
    assert outcome.promoted.status == RegistrationStatus.CONFIRMED
    assert queued_user_ids(db, event.id) == []
    assert count_status(db, event.id, RegistrationStatus.CONFIRMED) == 2
    assert published[-1] == {
        "type": NotificationType.WAITLIST_PROMOTED,
        "userId": "user_c",
        "eventId": event.id,
    }


def test_duplicate_registration_rejected(db, service):
    event = create_random_event(db, capacity=5)
    service.register("user_a", event.id)

    with pytest.raises(DuplicateRegistration):
        service.register("user_a", event.id)

    assert count_status(db, event.id, RegistrationStatus.CONFIRMED) == 1


def test_register_while_waiting_is_duplicate(db, service):
    event = create_random_event(db, capacity=1)
    service.register("user_a", event.id)
    service.register("user_b", event.id)

    with pytest.raises(DuplicateRegistration):
        service.register("user_b", event.id)

    assert queued_user_ids(db, event.id) == ["user_b"]


def test_zero_capacity_waitlists_everyone(db, service):
    event = create_random_event(db, capacity=0)

    outcome = service.register("user_a", event.id)

    assert outcome.waitlisted
    assert count_status(db, event.id, RegistrationStatus.CONFIRMED) == 0


def test_unlimited_event_never_waitlists(db, service):
    event = create_random_event(db, capacity=None)

    outcomes = [service.register(f"user_{i}", event.id) for i in range(25)]

    assert all(o.result == "registered" for o in outcomes)
    assert queued_user_ids(db, event.id) == []


def test_cancel_twice_is_invalid_and_promotes_once(db, service, clock):
    event = create_random_event(db, capacity=1)
    a = service.register("user_a", event.id)
    clock.advance(seconds=1)
    service.register("user_b", event.id)
    clock.advance(seconds=1)
    service.register("user_c", event.id)

    first = service.cancel(a.registration.id, actor_id="user_a")
    assert first.promoted.user_id == "user_b"

    with pytest.raises(InvalidTransition):
        service.cancel(a.registration.id, actor_id="user_a")

    assert queued_user_ids(db, event.id) == ["user_c"]
    assert count_status(db, event.id, RegistrationStatus.CONFIRMED) == 1
    assert registration_of(db, event.id, "user_c") is None


def test_register_cancel_register_round_trip(db, service, clock):
    event = create_random_event(db, capacity=1)

    first = service.register("user_a", event.id)
    clock.advance(minutes=1)
    service.cancel(first.registration.id, actor_id="user_a")
    clock.advance(minutes=1)
    second = service.register("user_a", event.id)

    assert second.result == "registered"
    assert second.registration.status == RegistrationStatus.CONFIRMED
    # The cancelled row is reused; (user, event) stays unique.
    assert second.registration.id == first.registration.id
    assert second.registration.cancelled_at is None
    assert queued_user_ids(db, event.id) == []


def test_confirm_payment_requires_successful_payment(db, service):
    event = create_random_event(db, capacity=1, requires_payment=True)
    outcome = service.register("user_a", event.id)

    with pytest.raises(InvalidTransition):
        service.confirm_payment(outcome.registration.id)

    assert registration_of(db, event.id, "user_a").status == RegistrationStatus.PENDING.value


def test_confirm_payment_from_confirmed_is_invalid(db, service):
    event = create_random_event(db, capacity=1)
    outcome = service.register("user_a", event.id)

    with pytest.raises(InvalidTransition):
        service.confirm_payment(outcome.registration.id)


def test_cancel_pending_frees_the_reserved_seat(db, service, clock):
    event = create_random_event(db, capacity=1, requires_payment=True)
    a = service.register("user_a", event.id)
    clock.advance(seconds=1)
    service.register("user_b", event.id)

    outcome = service.cancel(a.registration.id, actor_id="user_a")

    assert outcome.promoted.user_id == "user_b"
    assert outcome.promoted.status == RegistrationStatus.PENDING


def test_cancel_unknown_registration(service):
    with pytest.raises(RegistrationNotFound):
        service.cancel("reg_missing", actor_id="user_a")


def test_every_transition_is_recorded(db, service, clock):
    event = create_random_event(db, capacity=1)
    a = service.register("user_a", event.id)
    clock.advance(seconds=1)
    service.register("user_b", event.id)
    clock.advance(seconds=1)
    cancelled = service.cancel(a.registration.id, actor_id="manager_x")

    history_a = service.history(a.registration.id)
    assert [h.action for h in history_a] == [HistoryAction.REGISTERED, HistoryAction.CANCELLED]
    assert history_a[-1].performed_by == "manager_x"
    assert history_a[-1].from_status == RegistrationStatus.CONFIRMED.value
    assert history_a[-1].to_status == RegistrationStatus.CANCELLED.value

    history_b = crud.registration_history.get_by_event(db, event_id=event.id, user_id="user_b")
    assert [h.action for h in history_b] == [HistoryAction.WAITLISTED, HistoryAction.PROMOTED]
    assert history_b[-1].registration_id == cancelled.promoted.id
    assert history_b[-1].performed_by == "system"


def test_waiters_are_served_before_new_registrants(db, service, clock):
    event = create_random_event(db, capacity=1)
    service.register("user_a", event.id)
    clock.advance(seconds=1)
    service.register("user_b", event.id)

    # A seat appears without going through the service (e.g. a manual fix).
    event.capacity = 2
    db.commit()

    clock.advance(seconds=1)
    outcome = service.register("user_c", event.id)

    assert registration_of(db, event.id, "user_b").status == RegistrationStatus.CONFIRMED.value
    assert outcome.waitlisted
    assert queued_user_ids(db, event.id) == ["user_c"]


def test_serialized_burst_never_overbooks(db, service):
    event = create_random_event(db, capacity=10)
    users = [f"user_{i:02d}" for i in range(50)]

    outcomes = [service.register(user, event.id) for user in users]

    registered = [o.registration.user_id for o in outcomes if o.result == "registered"]
    assert registered == users[:10]
    assert count_status(db, event.id, RegistrationStatus.CONFIRMED) == 10
    # Same timestamp for everyone: insertion order decides.
    assert queued_user_ids(db, event.id) == users[10:]


def test_list_for_event_filters_by_status(db, service, clock):
    event = create_random_event(db, capacity=3)
    a = service.register("user_a", event.id)
    clock.advance(seconds=1)
    service.register("user_b", event.id)
    service.cancel(a.registration.id, actor_id="user_a")

    confirmed = service.list_for_event(event.id, status=RegistrationStatus.CONFIRMED.value)
    assert [r.user_id for r in confirmed] == ["user_b"]
    assert len(service.list_for_event(event.id)) == 2
