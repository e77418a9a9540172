import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, Header
from passlib.context import CryptContext
from pydantic import BaseModel

import config
from database import get_db, to_object_id
from errors import AuthError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from schemas import User

logger = logging.getLogger("surprisetokri.auth")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class Session(BaseModel):
    """Per-request identity built from the bearer token."""
    user_id: str
    email: str
    role: str = "customer"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_token(user_doc: Dict[str, Any]) -> str:
    payload = {
        "sub": str(user_doc.get("_id")),
        "email": user_doc.get("email"),
        "role": user_doc.get("role", "customer"),
        "exp": datetime.now(timezone.utc) + timedelta(minutes=config.JWT_EXP_MIN),
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm="HS256")


def decode_token(token: str) -> Session:
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=["HS256"])
        return Session(user_id=payload["sub"], email=payload["email"], role=payload.get("role", "customer"))
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except (jwt.InvalidTokenError, KeyError):
        raise AuthError("Invalid or expired token")


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(user["_id"]),
        "name": user["name"],
        "email": user["email"],
        "phone": user.get("phone"),
        "role": user.get("role", "customer"),
    }


def register_user(db, name: str, email: str, password: str, phone: Optional[str] = None) -> Dict[str, Any]:
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long")
    email = email.lower()
    if db["user"].find_one({"email": email}):
        raise ConflictError("Email already in use")
    user = User(name=name.strip(), email=email, phone=phone, password_hash=hash_password(password))
    inserted = db["user"].insert_one(user.model_dump() | {
        "created_at": datetime.now(timezone.utc),
        "updated_at": datetime.now(timezone.utc),
    }).inserted_id
    logger.info("Registered user %s", inserted)
    return db["user"].find_one({"_id": inserted})


def authenticate(db, email: str, password: str) -> Dict[str, Any]:
    user = db["user"].find_one({"email": email.lower()})
    if not user or not verify_password(password, user.get("password_hash", "")):
        raise AuthError("Invalid credentials")
    if not user.get("is_active", True):
        raise ForbiddenError("Account is deactivated")
    return user


def load_user(db, session: Session) -> Dict[str, Any]:
    user = db["user"].find_one({"_id": to_object_id(session.user_id, "User")})
    if not user:
        raise NotFoundError("User not found")
    return user


async def get_session(authorization: Optional[str] = Header(default=None), db=Depends(get_db)) -> Session:
    if not authorization:
        raise AuthError("Access token required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthError("Invalid authorization header")
    session = decode_token(token.strip())
    try:
        user = load_user(db, session)
    except NotFoundError:
        raise AuthError("User not found")
    if not user.get("is_active", True):
        raise ForbiddenError("Account is deactivated")
    # the stored role wins over a stale claim
    return Session(user_id=session.user_id, email=user["email"], role=user.get("role", "customer"))


async def require_admin(session: Session = Depends(get_session)) -> Session:
    if not session.is_admin:
        raise ForbiddenError("Admin access required")
    return session
