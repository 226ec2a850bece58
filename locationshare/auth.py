import logging
from typing import Optional

from fastapi import Header, HTTPException, Request

from .errors import Unauthenticated

log = logging.getLogger(__name__)


def get_current_user(request: Request, authorization: Optional[str] = Header(None)) -> str:
    """Verify the bearer token and return the uid of its subject.

    The uid is also left on ``request.state.user_id`` for the rest of the
    request.
    """
    if not authorization:
        log.info("Missing authorization header")
        raise HTTPException(status_code=401, detail="missing authorization header")

    prefix = "Bearer "
    token = authorization[len(prefix) :] if authorization.startswith(prefix) else authorization
    if not token:
        log.info("Invalid token format")
        raise HTTPException(status_code=401, detail="invalid token format")

    verifier = getattr(request.app.state, "verifier", None)
    if verifier is None:
        log.error("No identity verifier configured")
        raise HTTPException(status_code=500, detail="error getting Auth client")

    try:
        user_id = verifier.verify(token)
    except Unauthenticated as ex:
        log.info("Token verification failed: %s", ex)
        raise HTTPException(status_code=401, detail=f"invalid token: {ex}") from ex

    request.state.user_id = user_id
    return user_id
