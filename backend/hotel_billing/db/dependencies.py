"""FastAPI dependencies for storage injection and operator auth."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from hotel_billing.config import ACCESS_TOKEN_EXPIRE_MINUTES, ADMIN_CODE, ALGORITHM, SECRET_KEY
from hotel_billing.engine.catalog import MenuCatalog
from hotel_billing.engine.session import SessionRegistry
from hotel_billing.storage import Storage


def get_storage(request: Request) -> Storage:
    """Storage backend configured on the app."""
    return request.app.state.storage


def get_catalog(request: Request) -> MenuCatalog:
    """Menu catalog cache shared by all billing sessions."""
    return request.app.state.catalog


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


# ---------- Auth helpers ----------

ROLE_ADMIN = "admin"
ROLE_CLERK = "clerk"
OPERATOR_ID_LENGTH = 3

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def resolve_role(operator_id: str) -> Optional[str]:
    """
    Map an operator id to a role.

    The configured admin code logs in as admin; any other 3-character id is
    a clerk. Returns None for ids that cannot log in.
    """
    op = (operator_id or "").strip().upper()
    if not op:
        return None
    if op == ADMIN_CODE:
        return ROLE_ADMIN
    if len(op) == OPERATOR_ID_LENGTH:
        return ROLE_CLERK
    return None


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def get_current_operator(token: str = Depends(oauth2_scheme)) -> Dict[str, Any]:
    """Get the operator ({id, role}) from the bearer token."""
    credentials_exception = HTTPException(
        status_code=401,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"}
    )

    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise credentials_exception

    operator_id = payload.get("sub")
    role = payload.get("role")
    if operator_id is None or role not in (ROLE_ADMIN, ROLE_CLERK):
        raise credentials_exception
    return {"id": operator_id, "role": role}


def require_admin(operator: Dict[str, Any] = Depends(get_current_operator)) -> Dict[str, Any]:
    """Require an admin operator."""
    if operator["role"] != ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return operator
