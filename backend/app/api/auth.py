"""Caller identity dependency.

Token issuance lives in the account service; this API only needs to know
whether the caller is signed in, and who they are. Signed-in callers send
"Bearer <user_id>"; guests send nothing and are told apart by their
browser session header.
"""

import uuid
from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.app.db.context import RequestContext


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
    x_session_id: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from request headers.

    Args:
        authorization: Authorization header (e.g., "Bearer <user_id>")
        x_session_id: Guest browser session ID

    Returns:
        RequestContext for a signed-in user, or a guest context

    Raises:
        HTTPException: If authorization is invalid
    """
    if not authorization:
        return RequestContext(user_id=None, session_id=x_session_id or "anonymous")

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:].strip()  # Strip "Bearer "

    try:
        user_id = uuid.UUID(token)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid bearer token (expected user ID)",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    return RequestContext(user_id=user_id, session_id=x_session_id or "anonymous")
