"""
Principal extraction.
Tokens are issued by the institution's identity provider; this module only
verifies them and turns the role/department claims into a Principal.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from config import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, SECRET_KEY
from services.authorization import Principal

logger = logging.getLogger(__name__)

security = HTTPBearer()


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    """Sign a token carrying `role` and `department` claims (used by tooling and tests)"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes or ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


def get_current_principal(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Principal:
    token = credentials.credentials
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Session expired, please login again")

    role = payload.get("role")
    department = payload.get("department")
    if not role or not department:
        logger.warning("Token for %s is missing role/department claims", payload.get("sub"))
        raise HTTPException(status_code=401, detail="Token has no role or department")

    return Principal(role=str(role), department=str(department).strip())
