import logging
import os
import secrets
from typing import Annotated, Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response
from itsdangerous import BadData, URLSafeTimedSerializer
from pydantic import ValidationError

import storage
from db import SessionDep
from models import User
from schemas import IdentityClaims, LoginCallback, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])

SESSION_COOKIE = "session"
SESSION_MAX_AGE = int(os.getenv("SESSION_MAX_AGE", 60 * 60 * 8))
SECRET_KEY = os.getenv("SESSION_SECRET") or secrets.token_hex(32)

# Login tokens are signed by the identity provider with a shared key
IDENTITY_PROVIDER_SECRET = os.getenv("IDENTITY_PROVIDER_SECRET") or SECRET_KEY
IDENTITY_TOKEN_MAX_AGE = 5 * 60

serializer = URLSafeTimedSerializer(SECRET_KEY, salt="session")
identity_serializer = URLSafeTimedSerializer(IDENTITY_PROVIDER_SECRET, salt="identity")


def create_session_token(user_id: str) -> str:
    """
    Store the user id in the signed token.
    Example data:
        {"user_id": "4815162342"}
    """
    return serializer.dumps({"user_id": user_id})


def verify_session_token(token: str, max_age_seconds: int = SESSION_MAX_AGE) -> Optional[dict]:
    """
    Returns {'user_id': ...} if valid,
    or None if token is invalid/expired.
    """
    try:
        return serializer.loads(token, max_age=max_age_seconds)
    except BadData:
        logger.debug("Rejected session token")
        return None


def get_current_user(
    session: SessionDep,
    session_token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> User:
    """
    Reads the 'session' cookie, verifies the token and looks up the user.
    Raises 401 if not logged in / invalid.
    """
    if session_token is None:
        raise HTTPException(status_code=401, detail="Not logged in")

    data = verify_session_token(session_token)
    if not data:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    user = storage.get_user(session, data["user_id"])
    if user is None:
        raise HTTPException(status_code=401, detail="User not found for this session")

    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


@router.post("/auth/callback", response_model=UserRead)
def login_callback(payload: LoginCallback, session: SessionDep, response: Response):
    """
    Accept identity claims signed by the identity provider,
    upsert the user and start a session.
    """
    try:
        data = identity_serializer.loads(payload.token, max_age=IDENTITY_TOKEN_MAX_AGE)
    except BadData:
        raise HTTPException(status_code=401, detail="Invalid or expired identity token")

    try:
        claims = IdentityClaims.model_validate(data)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid identity claims")

    user = storage.upsert_user(session, claims)
    logger.info("User %s logged in", user.id)

    response.set_cookie(
        key=SESSION_COOKIE,
        value=create_session_token(user.id),
        httponly=True,
        secure=False,
        samesite="lax",
        max_age=SESSION_MAX_AGE,
    )
    return user


@router.post("/logout", status_code=204)
def logout():
    """
    Clear the session cookie.
    """
    response = Response(status_code=204)
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/auth/user", response_model=UserRead)
def read_current_user(current: CurrentUserDep):
    """
    Get the currently logged-in user.
    """
    return current
