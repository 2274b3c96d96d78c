# event_registration/api/deps.py
import secrets
from typing import Generator, Optional

from fastapi import Depends, HTTPException, Header, status, Security
from fastapi.security import OAuth2PasswordBearer, APIKeyHeader
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from event_registration import crud
from event_registration.constants.roles import MANAGER_ROLES
from event_registration.core.clock import utcnow
from event_registration.core.config import settings
from event_registration.db.session import SessionLocal
from event_registration.schemas.token import TokenPayload


def get_db() -> Generator:
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# The `tokenUrl` doesn't have to be a real endpoint in this service,
# it's just for the OpenAPI documentation.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


def get_current_user(token: str = Depends(oauth2_scheme)) -> TokenPayload:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"])
        token_data = TokenPayload(**payload)
    except (JWTError, ValueError):
        # Catches any error from jose or Pydantic validation
        raise credentials_exception

    return token_data


def is_manager(db: Session, user_id: str) -> bool:
    return crud.user_role.has_any_role(
        db, user_id=user_id, roles=MANAGER_ROLES, now=utcnow()
    )


def require_manager(
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(get_current_user),
) -> TokenPayload:
    """Only event managers, moderators and admins may pass."""
    if not is_manager(db, current_user.sub):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Event manager role required",
        )
    return current_user


# Define the header we expect the key to be in
api_key_header = APIKeyHeader(name="X-Internal-Api-Key", auto_error=False)


def get_internal_api_key(api_key: str = Security(api_key_header)) -> str:
    """
    Checks for and validates the internal API key from the request header.
    """
    if api_key and secrets.compare_digest(api_key, settings.INTERNAL_API_KEY):
        return api_key
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing Internal API Key",
    )


def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    """The cron host calls with ``Authorization: Bearer <CRON_SECRET>``."""
    expected = f"Bearer {settings.CRON_SECRET}"
    if not authorization or not secrets.compare_digest(authorization, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
