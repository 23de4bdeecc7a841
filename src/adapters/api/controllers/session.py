from __future__ import annotations

import secrets

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import RedirectResponse

from src.adapters.api.dependencies import get_session_service, get_view_config
from src.adapters.api.schemas.session import SessionSchema
from src.adapters.config import ViewConfig
from src.app.services.session_service import SessionService
from src.domain.models import RedirectRequired

router = APIRouter(tags=["session"])

SESSION_COOKIE_MAX_AGE_S = 30 * 24 * 3600


def _remember(response: Response, key: str, config: ViewConfig) -> None:
    response.set_cookie(
        config.session_cookie,
        key,
        max_age=SESSION_COOKIE_MAX_AGE_S,
        httponly=True,
        samesite="lax",
        secure=config.secure_cookies,
    )


@router.get("/session", response_model=SessionSchema)
def init_session(
    request: Request,
    response: Response,
    config: ViewConfig = Depends(get_view_config),
    service: SessionService = Depends(get_session_service),
) -> Response | SessionSchema:
    """Initialize the caller's session from `?jwt=` or its stored credential.

    The caller is identified by an opaque session cookie, issued on first
    success; stored credentials are only ever read back for that cookie.

    - No usable credential: 307 to the login page, which returns here with one.
    - Credential in the query: 303 to the same URL without it.
    """

    key = request.cookies.get(config.session_cookie) or secrets.token_urlsafe(32)
    url = str(request.url)
    result = service.initialize(request.query_params, client_key=key, return_url=url)
    if isinstance(result, RedirectRequired):
        return RedirectResponse(result.login_url, status_code=307)

    if service.credential_param in request.query_params:
        redirect = RedirectResponse(service.clean_url(url), status_code=303)
        _remember(redirect, key, config)
        return redirect

    _remember(response, key, config)
    return SessionSchema(email=result.email, expires_at=result.expires_at)
