from datetime import datetime
from pydantic import BaseModel, Field

from app.core.config import settings

def otp_pattern(digits: int) -> str:
    return rf"^\s*\d{{{digits}}}\s*$"

# tantos dígitos como TOTP_DIGITS
OTP_PATTERN = otp_pattern(settings.TOTP_DIGITS)
# XXXX-XXXX, tolera minúsculas y sin guión
BACKUP_CODE_PATTERN = r"^\s*[0-9A-Fa-f]{4}-?[0-9A-Fa-f]{4}\s*$"


class TwoFactorSetupOut(BaseModel):
    secret: str
    otpauth_url: str
    setup_token: str
    backup_codes: list[str]
    expires_at: datetime
    qr_base64_png: str | None = None

class TwoFactorConfirmIn(BaseModel):
    setup_token: str = Field(..., min_length=1, max_length=128)
    code: str = Field(..., pattern=OTP_PATTERN)

class TwoFactorCodeIn(BaseModel):
    code: str = Field(..., pattern=OTP_PATTERN)

class BackupCodeIn(BaseModel):
    code: str = Field(..., pattern=BACKUP_CODE_PATTERN)

class BackupCodesOut(BaseModel):
    backup_codes: list[str]

class BackupCodeRedeemOut(BaseModel):
    verified: bool = True
    remaining: int

class TwoFactorVerifyOut(BaseModel):
    verified: bool = True

class TwoFactorStatusOut(BaseModel):
    enabled: bool
    enabled_at: datetime | None = None
    backup_codes_remaining: int = 0

class MessageOut(BaseModel):
    message: str
