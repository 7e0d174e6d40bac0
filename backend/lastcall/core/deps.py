"""
FastAPI dependencies: caller identity and the document store.
"""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from lastcall.core.context import RequestContext
from lastcall.core.security import decode_token
from lastcall.db.base import get_db
from lastcall.store import DocumentStore

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> RequestContext:
    """Resolve the caller from the bearer token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        logger.warning("Rejected bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return RequestContext(user_id=payload["sub"], email=payload.get("email"))


async def get_store(db: AsyncSession = Depends(get_db)) -> DocumentStore:
    return DocumentStore(db)
