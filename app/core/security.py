import base64
import logging
from datetime import datetime, timedelta, timezone
from io import BytesIO

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)

def create_access_token(subject: str, expires_minutes: int | None = None) -> str:
    to_encode = {"sub": subject, "iat": datetime.now(tz=timezone.utc)}
    expire = datetime.now(tz=timezone.utc) + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str) -> str | None:
    """Devuelve el `sub` (id de usuario) o None si el token no sirve."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        return None
    return sub

# -- QR PNG en base64 para el otpauth:// del setup --
def qr_png_base64_from_text(text: str) -> str | None:
    import qrcode

    try:
        img = qrcode.make(text)
        buf = BytesIO()
        img.save(buf, "PNG")
    except (OSError, ValueError):
        logger.warning("Could not render QR code for provisioning URI", exc_info=True)
        return None
    return base64.b64encode(buf.getvalue()).decode("ascii")
