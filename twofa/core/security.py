from datetime import datetime, timedelta, timezone
from typing import Optional
from passlib.context import CryptContext

from jose import jwt
from twofa.core.config import settings

# --- QR helpers ---
import base64
from io import BytesIO

import qrcode
from qrcode.exceptions import DataOverflowError

from twofa.core.logging import get_logger

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)

def create_access_token(
        subject: str,
        extra: Optional[dict] = None,
        expires_minutes: int | None = None
        ) -> str:
    to_encode = {"sub": subject, "iat": datetime.now(tz=timezone.utc)}
    if extra:
        to_encode.update(extra)
    expire = datetime.now(tz=timezone.utc) + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str) -> dict:
    # lanza JWTError si la firma o el exp no son válidos
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])

# -- QR PNG en base64 (solo para la respuesta HTTP, nunca se loguea) --
def qr_png_base64_from_text(text: str) -> str | None:
    try:
        img = qrcode.make(text)
        buf = BytesIO()
        img.save(buf, "PNG")
        return base64.b64encode(buf.getvalue()).decode("ascii")
    except (DataOverflowError, OSError, ValueError) as exc:
        logger.warning("QR rendering failed", extra={"error": type(exc).__name__})
        return None
