# app/core/errors.py
from fastapi import status


class TwoFactorError(Exception):
    """Base de los errores de 2FA: todos son 4xx, corregibles por el cliente."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Two-factor authentication error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class AlreadyEnabled(TwoFactorError):
    default_detail = "Two-factor authentication is already enabled"


class NotEnabled(TwoFactorError):
    default_detail = "Two-factor authentication is not enabled"


class InvalidOrExpiredToken(TwoFactorError):
    default_detail = "Invalid or expired setup token"


class InvalidCode(TwoFactorError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid verification code"


class UserNotFound(TwoFactorError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "User not found"
