"""
YourTales Backend - Request Dependencies
========================================

What:  FastAPI dependencies shared by the protected routes.
How:   get_current_user reads the "Authorization: Bearer <token>" header,
       verifies the token and loads the user row in the request's session.
       Every failure becomes AuthenticationError, which the global handler
       turns into a 401 with a WWW-Authenticate header.
"""

import logging
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from yourtales.database import get_db_session
from yourtales.exceptions import AuthenticationError
from yourtales.models.user import User
from yourtales.security import decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False: a missing header reaches us so the 401 body is ours
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token")

    try:
        claims = decode_access_token(credentials.credentials)
        user_id = int(claims["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        logger.info("Rejected bearer token: %s", type(e).__name__)
        raise AuthenticationError("Not authorized, token failed")

    user = await db.get(User, user_id)
    if user is None:
        # Token outlived its account
        raise AuthenticationError("Not authorized, token failed")
    return user
