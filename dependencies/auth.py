# dependencies/auth.py
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt
from models.session import SessionContext
from uuid import UUID
import config
import logging

logger = logging.getLogger(__name__)
security = HTTPBearer()

REFRESH_TOKEN_COOKIE = "refreshToken"

async def get_session_context(request: Request,
                              credentials: HTTPAuthorizationCredentials = Depends(security)) -> SessionContext:
    """Dependency that validates the bearer JWT and builds the caller's SessionContext"""
    try:
        token = credentials.credentials
        payload = jwt.decode(
            token,
            config.AUTH_JWT_SECRET,
            algorithms=[config.AUTH_JWT_ALGORITHM],
            audience=config.AUTH_JWT_AUDIENCE,
            options={"verify_aud": config.AUTH_JWT_AUDIENCE is not None}
        )

        user_id = payload.get("sub")
        if not user_id:
            raise HTTPException(status_code=401, detail="Invalid token: no user ID found")

        try:
            user_uuid = UUID(user_id)
        except ValueError:
            raise HTTPException(status_code=401, detail="Invalid user ID format")

        return SessionContext(
            user_id=user_uuid,
            access_token=token,
            refresh_token=request.cookies.get(REFRESH_TOKEN_COOKIE)
        )

    except HTTPException:
        raise
    except jwt.JWTError as e:
        logger.error(f"JWT decode error: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid authentication token")
    except Exception as e:
        logger.error(f"Auth error: {str(e)}")
        raise HTTPException(status_code=401, detail=str(e))
