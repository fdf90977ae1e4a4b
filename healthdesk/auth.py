"""Session resolution for API routes.

Sessions are issued by the fronting auth service; requests carry
``Authorization: Bearer <user id>`` and the user must exist in the store.
"""

from fastapi import HTTPException, Request

from healthdesk.persistence.store import ChatStore, UserRecord


async def current_user(request: Request) -> UserRecord:
    """FastAPI dependency returning the authenticated user, or 401."""
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Unauthorized")
    store: ChatStore = request.app.state.chat_store
    user = await store.get_user(token)
    if user is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user
