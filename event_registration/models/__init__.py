# Import all models to ensure SQLAlchemy can resolve relationships
# Order matters for dependencies - import base models first

from event_registration.db.base_class import Base
from event_registration.models.event import Event
from event_registration.models.registration import Registration
from event_registration.models.waiting_list import WaitingListEntry
from event_registration.models.bank_account import BankAccount
from event_registration.models.payment import Payment
from event_registration.models.registration_history import RegistrationHistory
from event_registration.models.audit_log import AuditLog
from event_registration.models.role import Role, UserRole
from event_registration.models.notification_log import NotificationLog
