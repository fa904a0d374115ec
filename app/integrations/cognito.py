from __future__ import annotations

import threading
from typing import Any, Optional

import requests
from jose import JWTError, jwt

from app.errors import InvalidTokenError


class CognitoTokenValidator:
    """Validates Cognito ID tokens against the user pool's public JWKS.

    The JWKS document is fetched on first use and kept for the life of the process.
    """

    def __init__(
        self,
        user_pool_id: str,
        client_id: str,
        region: str = "us-east-1",
        *,
        session: Optional[Any] = None,
        timeout_sec: float = 10.0,
    ) -> None:
        self.client_id = client_id
        self.issuer = f"https://cognito-idp.{region}.amazonaws.com/{user_pool_id}"
        self.jwks_url = f"{self.issuer}/.well-known/jwks.json"
        self.session = session or requests
        self.timeout_sec = timeout_sec
        self._jwks: dict | None = None
        self._lock = threading.Lock()

    def _get_jwks(self) -> dict:
        with self._lock:
            if self._jwks is None:
                response = self.session.get(self.jwks_url, timeout=self.timeout_sec)
                response.raise_for_status()
                self._jwks = response.json()
            return self._jwks

    def validate(self, token: str) -> dict:
        """Decode and validate a Cognito ID token, returning its claims.

        Raises:
            InvalidTokenError: bad signature, expiry, wrong audience/issuer,
                wrong token_use, or an unreachable JWKS endpoint.
        """
        try:
            jwks = self._get_jwks()
        except (requests.RequestException, ValueError) as exc:
            raise InvalidTokenError(f"JWKS unavailable: {exc}") from exc

        try:
            kid = jwt.get_unverified_header(token).get("kid")
            rsa_key = next(
                (key for key in jwks.get("keys", []) if key.get("kid") == kid),
                None,
            )
            if not rsa_key:
                raise InvalidTokenError("signing key not found in JWKS")

            claims = jwt.decode(
                token,
                rsa_key,
                algorithms=["RS256"],
                audience=self.client_id,
                issuer=self.issuer,
                # only the ID token reaches this API, so at_hash has nothing to compare against
                options={"verify_at_hash": False},
            )
        except JWTError as exc:
            raise InvalidTokenError(f"token validation failed: {exc}") from exc

        if claims.get("token_use") != "id":
            raise InvalidTokenError(f"invalid token_use: {claims.get('token_use')!r}")
        if not claims.get("sub"):
            raise InvalidTokenError("token has no subject")
        return claims
