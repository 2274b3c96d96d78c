# event_registration/constants/cleanup.py
from enum import Enum


class CleanupCategory(str, Enum):
    """Retention categories handled by the cleanup sweeper."""
    EXPIRED_USER_ROLES = "expiredUserRoles"
    OLD_AUDIT_LOGS = "oldAuditLogs"
    FAILED_PAYMENTS = "failedPayments"
    EXPIRED_WAITING_LIST = "expiredWaitingList"
    CANCELLED_REGISTRATIONS = "cancelledRegistrations"
    OLD_NOTIFICATION_LOGS = "oldNotificationLogs"
    OPTIMIZE_DATABASE = "optimizeDatabase"


# Notification log rows in these statuses are final and may be purged.
FINAL_NOTIFICATION_STATUSES = ("SENT", "DELIVERED", "FAILED", "BOUNCED")
