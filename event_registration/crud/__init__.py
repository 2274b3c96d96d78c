# event_registration/crud/__init__.py

from .crud_audit_log import audit_log
from .crud_bank_account import bank_account
from .crud_event import event
from .crud_payment import payment
from .crud_registration import registration
from .crud_registration_history import registration_history
from .crud_user_role import user_role
from .crud_waitlist import waitlist
from . import crud_notification_log as notification_log
