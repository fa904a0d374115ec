from fastapi import Header, HTTPException, Request

from app.errors import InvalidTokenError


def get_current_principal(
    request: Request,
    authorization: str | None = Header(default=None),
) -> str:
    """Validate the bearer ID token and return the caller's principal id (``sub``)."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")

    validator = getattr(request.app.state, "token_validator", None)
    if validator is None:
        raise HTTPException(status_code=503, detail="AUTH_PROVIDER_NOT_CONFIGURED")

    token = authorization.split(" ", 1)[1].strip()
    try:
        claims = validator.validate(token)
    except InvalidTokenError as exc:
        print(f"[AUTH][token_rejected] reason={exc}", flush=True)
        raise HTTPException(status_code=401, detail="Unauthorized") from exc
    return str(claims["sub"])
