# event_registration/constants/payment.py
"""
Constants for Payment status values.
"""


class PaymentStatus:
    """Payment status values."""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"

    SUCCESS = (CONFIRMED,)
    TERMINAL_FAILURE = (FAILED, CANCELLED, REFUNDED)

    @classmethod
    def all_values(cls) -> list[str]:
        """Return all valid status values."""
        return [
            cls.PENDING,
            cls.PROCESSING,
            cls.CONFIRMED,
            cls.FAILED,
            cls.CANCELLED,
            cls.REFUNDED,
        ]

    @classmethod
    def is_valid(cls, status: str) -> bool:
        """Check if a status value is valid."""
        return status in cls.all_values()

    @classmethod
    def is_success(cls, status: str) -> bool:
        return status in cls.SUCCESS

    @classmethod
    def is_terminal_failure(cls, status: str) -> bool:
        return status in cls.TERMINAL_FAILURE

    @classmethod
    def can_change(cls, current: str, new: str) -> bool:
        """A settled payment only moves from CONFIRMED to REFUNDED."""
        if current in cls.TERMINAL_FAILURE:
            return False
        if current in cls.SUCCESS:
            return new == cls.REFUNDED
        return True
