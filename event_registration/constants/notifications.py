# event_registration/constants/notifications.py


class NotificationType:
    REGISTRATION_CONFIRMED = "registration_confirmed"
    WAITLIST_PROMOTED = "waitlist_promoted"


class NotificationStatus:
    PENDING = "PENDING"
    SENT = "SENT"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"
    BOUNCED = "BOUNCED"


TOPIC_REGISTRATION_EVENTS = "registration.events.v1"
