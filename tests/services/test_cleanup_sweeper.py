# tests/services/test_cleanup_sweeper.py

from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from event_registration import crud
from event_registration.constants.cleanup import CleanupCategory
from event_registration.constants.payment import PaymentStatus
from event_registration.constants.registration import RegistrationStatus
from event_registration.core.exceptions import PersistenceError
from event_registration.models.audit_log import AuditLog
from event_registration.models.notification_log import NotificationLog
from event_registration.models.registration import Registration
from event_registration.models.role import UserRole
from event_registration.models.waiting_list import WaitingListEntry
from event_registration.services.cleanup_sweeper import CleanupSweeper
from tests.utils.auth import grant_role
from tests.utils.event import create_random_event


def _audit(db, when, entity_id="evt_x"):
    db.add(AuditLog(action="event.updated", entity_type="event", entity_id=entity_id, timestamp=when))


def _notification(db, when, status):
    db.add(
        NotificationLog(
            type="registration_confirmed", user_id="u", event_id="e", status=status, created_at=when
        )
    )


@pytest.fixture
def seeded(db, clock):
    now = clock()

    grant_role(db, "user_old", is_active=False, expires_at=now - timedelta(days=40))
    grant_role(db, "user_active", expires_at=now - timedelta(days=40))
    grant_role(db, "user_recent", is_active=False, expires_at=now - timedelta(days=5))

    _audit(db, now - timedelta(days=91))
    _audit(db, now - timedelta(days=10))

    for status, age in ((PaymentStatus.FAILED, 8), (PaymentStatus.FAILED, 1), (PaymentStatus.PENDING, 30)):
        payment = crud.payment.create(
            db, user_id="u", amount=Decimal("10.00"), currency="EUR", now=now - timedelta(days=age)
        )
        payment.status = status

    past = create_random_event(db, capacity=0, start_date=now - timedelta(days=20))
    future = create_random_event(db, capacity=0, start_date=now + timedelta(days=20))
    db.add(WaitingListEntry(event_id=past.id, user_id="u1", created_at=now - timedelta(days=30)))
    db.add(WaitingListEntry(event_id=future.id, user_id="u2", created_at=now - timedelta(days=30)))

    for user_id, age in (("c_old", 31), ("c_new", 2)):
        db.add(
            Registration(
                event_id=future.id,
                user_id=user_id,
                status=RegistrationStatus.CANCELLED.value,
                created_at=now - timedelta(days=60),
                updated_at=now - timedelta(days=age),
                cancelled_at=now - timedelta(days=age),
            )
        )

    _notification(db, now - timedelta(days=61), "SENT")
    _notification(db, now - timedelta(days=61), "PENDING")
    _notification(db, now - timedelta(days=1), "SENT")
    db.commit()


def test_only_requested_category_runs(db, clock, seeded):
    summary = CleanupSweeper(db, clock=clock).run({"oldAuditLogs": True, "failedPayments": False})

    assert summary.success is True
    assert summary.results == {"oldAuditLogs": 1}
    assert summary.errors == []
    assert db.query(AuditLog).count() == 1
    assert db.query(UserRole).count() == 3


def test_full_run_applies_every_retention_window(db, clock, seeded):
    summary = CleanupSweeper(db, clock=clock).run()

    assert summary.success is True
    assert summary.results == {
        "expiredUserRoles": 1,
        "oldAuditLogs": 1,
        "failedPayments": 1,
        "expiredWaitingList": 1,
        "cancelledRegistrations": 1,
        "oldNotificationLogs": 1,
    }
    assert "optimizeDatabase" not in summary.results
    assert [r.user_id for r in db.query(Registration).all()] == ["c_new"]
    assert [e.user_id for e in db.query(WaitingListEntry).all()] == ["u2"]


def test_failing_category_does_not_stop_the_others(db, clock, seeded, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("DELETE FROM audit_logs", {}, Exception("disk I/O error"))

    monkeypatch.setattr(crud.audit_log, "delete_before", broken)

    summary = CleanupSweeper(db, clock=clock).run(
        [CleanupCategory.OLD_AUDIT_LOGS, CleanupCategory.FAILED_PAYMENTS]
    )

    assert summary.success is False
    assert summary.results == {"failedPayments": 1}
    assert len(summary.errors) == 1
    assert summary.errors[0].startswith("Failed to clean oldAuditLogs")


def test_non_database_failure_is_collected(db, clock, seeded, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(crud.audit_log, "delete_before", broken)

    summary = CleanupSweeper(db, clock=clock).run(
        {"oldAuditLogs": True, "failedPayments": True, "staleSessions": True}
    )

    assert summary.success is False
    assert summary.results == {"failedPayments": 1}
    assert summary.errors == [
        "Unknown cleanup category: staleSessions",
        "Failed to clean oldAuditLogs: boom",
    ]


def test_unreachable_database_is_fatal(clock):
    db = MagicMock()
    db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))

    with pytest.raises(PersistenceError):
        CleanupSweeper(db, clock=clock).run()


def test_retention_windows_follow_settings(db, clock, seeded):
    settings = MagicMock(RETENTION_AUDIT_LOGS_DAYS=5)

    summary = CleanupSweeper(db, clock=clock, settings=settings).run([CleanupCategory.OLD_AUDIT_LOGS])

    assert summary.results == {"oldAuditLogs": 2}
