# event_registration/constants/roles.py


class RoleName:
    """System roles. Higher priority roles include the rights of lower ones."""
    USER = "USER"
    REGULAR = "REGULAR"
    EVENT_MANAGER = "EVENT_MANAGER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"


# Roles allowed to manage events, registrations and waiting lists.
MANAGER_ROLES = (RoleName.EVENT_MANAGER, RoleName.MODERATOR, RoleName.ADMIN)
