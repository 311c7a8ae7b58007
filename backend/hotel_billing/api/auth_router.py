"""Operator login: exchange a terminal ID for a role-scoped JWT."""

from datetime import timedelta

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from hotel_billing.config import ACCESS_TOKEN_EXPIRE_MINUTES
from hotel_billing.db.dependencies import create_access_token, resolve_role


router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    operatorId: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str
    operatorId: str
    role: str


@router.post("/login", response_model=TokenResponse, summary="Login with an operator ID")
async def login_operator(request: LoginRequest):
    """
    Log in with a 3-character operator ID.

    The configured admin code gets the admin role, every other valid ID is
    a clerk.
    """
    operator_id = request.operatorId.strip().upper()
    if not operator_id:
        raise HTTPException(status_code=400, detail="Please enter an ID.")

    role = resolve_role(operator_id)
    if role is None:
        raise HTTPException(status_code=400, detail="Please enter a valid 3-letter ID.")

    access_token = create_access_token(
        data={"sub": operator_id, "role": role},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return TokenResponse(access_token=access_token, token_type="bearer", operatorId=operator_id, role=role)
