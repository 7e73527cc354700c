from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError

from config import ACCESS_TOKEN_EXPIRE_MINUTES, ALGORITHM, BCRYPT_ROUNDS, SECRET_KEY
from models import TokenIdentity

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def issue_token(user: dict) -> str:
    return create_access_token({
        "id": str(user["_id"]),
        "email": user["email"],
        "isAdmin": bool(user.get("is_admin", False)),
    })


def decode_token(token: str) -> TokenIdentity:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return TokenIdentity.model_validate(payload)
    except (JWTError, ValidationError):
        raise HTTPException(status_code=403, detail="Invalid token")


# Dependencies

def get_current_identity(authorization: Optional[str] = Header(default=None)) -> TokenIdentity:
    if not authorization:
        raise HTTPException(status_code=401, detail="No token provided")
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=403, detail="Invalid token")
    return decode_token(parts[1])


def require_admin(identity: TokenIdentity = Depends(get_current_identity)) -> TokenIdentity:
    if not identity.isAdmin:
        raise HTTPException(status_code=403, detail="Admins only")
    return identity
