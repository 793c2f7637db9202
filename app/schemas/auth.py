from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.schemas.two_factor import BACKUP_CODE_PATTERN

class RegisterIn(BaseModel):
    full_name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)  # bcrypt corta en 72 bytes

class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    otp: str | None = None   # <-- requerido si el usuario tiene 2FA activo
    # alternativa al otp si se perdió el autenticador; se consume al usarlo
    backup_code: str | None = Field(None, pattern=BACKUP_CODE_PATTERN)

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: str
    email: EmailStr
    is_active: bool
    two_factor_enabled: bool
