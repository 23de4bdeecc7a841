from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Mapping

from src.app.ports.output import ICredentialStore
from src.domain.algorithms.jwt_claims import (
    claims_expiry,
    decode_jwt_claims,
    is_expired,
    login_redirect_url,
    strip_credential_from_url,
)
from src.domain.exceptions import SessionRequired
from src.domain.models import RedirectReason, RedirectRequired, Session

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionContext:
    """Holds the active session of each client for the lifetime of the process.

    A client's session is set once per initialization and never refreshed in
    place; expiry is only noticed at that client's next initialization.
    """

    _sessions: dict[str, Session] = field(
        default_factory=dict, init=False, repr=False
    )

    def current(self, client_key: str) -> Session | None:
        return self._sessions.get(client_key)

    def set(self, client_key: str, session: Session) -> None:
        self._sessions[client_key] = session

    def clear(self, client_key: str) -> None:
        self._sessions.pop(client_key, None)

    def require(self, client_key: str | None) -> Session:
        session = self._sessions.get(client_key) if client_key else None
        if session is None:
            raise SessionRequired("No active session; initialize the session first")
        return session


@dataclass(slots=True)
class SessionService:
    store: ICredentialStore
    context: SessionContext
    login_url: str
    credential_param: str = "jwt"

    def initialize(
        self,
        query: Mapping[str, str],
        *,
        client_key: str,
        return_url: str,
        now: datetime | None = None,
    ) -> Session | RedirectRequired:
        """Establish the client's session from the query or its stored credential.

        Returns `RedirectRequired` when no usable credential is available; the
        caller sends the user to `login_url`, which comes back with a fresh
        credential in the query string.
        """

        now = now or datetime.now(timezone.utc)

        token = (query.get(self.credential_param) or "").strip()
        if not token:
            token = (self.store.get(client_key) or "").strip()
        if not token:
            return self._redirect(return_url, RedirectReason.MISSING)

        claims = decode_jwt_claims(token)
        email = claims.get("email") if claims is not None else None
        if claims is None or not isinstance(email, str) or not email:
            return self._redirect(return_url, RedirectReason.MALFORMED)

        if is_expired(claims, now):
            return self._redirect(return_url, RedirectReason.EXPIRED)

        session = Session(token=token, email=email, expires_at=claims_expiry(claims))
        self.store.put(client_key, token)
        self.context.set(client_key, session)
        logger.info("Session initialized", extra={"email": email})
        return session

    def clean_url(self, url: str) -> str:
        return strip_credential_from_url(url, self.credential_param)

    def _redirect(self, return_url: str, reason: RedirectReason) -> RedirectRequired:
        logger.info("Login required", extra={"reason": reason.value})
        target = login_redirect_url(self.login_url, self.clean_url(return_url))
        return RedirectRequired(login_url=target, reason=reason)
