# app/core/deps.py
from fastapi import Depends, Header, Query, Request

from app.core.config import Settings
from app.users.service import authenticate


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _extract_token(token: str | None, authorization: str | None) -> str | None:
    """
    Token por query (?token=) o por Authorization: Bearer XXX.
    """
    if not token and authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    return token or None


def get_current_user_id(
    token: str | None = Query(None),
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> int:
    return authenticate(_extract_token(token, authorization), settings)
